"""DMARC, SPF and DKIM DNS record parsing, validation and recommendations."""

from .dkim import parse_dkim_record, validate_dkim_record
from .dmarc import parse_dmarc_record, validate_dmarc_record
from .inspector import inspect_record
from .recommendations import get_recommendations
from .spf import parse_spf_record, validate_spf_record

__version__ = "0.1.0"

__all__ = [
    "get_recommendations",
    "inspect_record",
    "parse_dkim_record",
    "parse_dmarc_record",
    "parse_spf_record",
    "validate_dkim_record",
    "validate_dmarc_record",
    "validate_spf_record",
]

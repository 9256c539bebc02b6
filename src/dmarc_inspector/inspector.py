"""Runs parser, validator and recommendations for one record and bundles the result."""

from typing import Optional, Union

from .dkim import parse_dkim_record, validate_dkim_record
from .dmarc import parse_dmarc_record, validate_dmarc_record
from .models import RecordReport, RecordType
from .recommendations import coerce_record_type, get_recommendations
from .spf import parse_spf_record, validate_spf_record
from .tokenizer import strip_quotes

PARSERS = {
    RecordType.DMARC: parse_dmarc_record,
    RecordType.SPF: parse_spf_record,
    RecordType.DKIM: parse_dkim_record,
}

VALIDATORS = {
    RecordType.DMARC: validate_dmarc_record,
    RecordType.SPF: validate_spf_record,
    RecordType.DKIM: validate_dkim_record,
}


def inspect_record(
    record_type: Union[str, RecordType],
    raw: Optional[str],
    domain: Optional[str] = None,
) -> RecordReport:
    """A None or blank record yields an empty report carrying setup guidance."""
    rtype = coerce_record_type(record_type)
    record = strip_quotes(raw)

    if not record:
        return RecordReport(
            record_type=rtype,
            raw_record=None,
            recommendations=get_recommendations(rtype, None, domain),
        )

    parsed = PARSERS[rtype](record)
    return RecordReport(
        record_type=rtype,
        raw_record=record,
        parsed=parsed,
        tags=list(parsed.tags),
        issues=VALIDATORS[rtype](record),
        recommendations=get_recommendations(rtype, record, domain),
    )

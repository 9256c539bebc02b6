"""Shared test factories for mock DNS responses."""

from unittest.mock import MagicMock

from dmarc_inspector.models import DnsRecord, DnsResponse, DnsStatus


def dns_response(domain, txt_values=None, status=DnsStatus.NOERROR):
    """Build a DnsResponse with zero or more TXT records."""
    records = []
    if txt_values:
        records = [DnsRecord(record_type="TXT", value=v, ttl=3600) for v in txt_values]
    return DnsResponse(domain=domain, record_type="TXT", status=status, records=records)


def nxdomain(domain):
    return dns_response(domain, status=DnsStatus.NXDOMAIN)


def mock_fetcher(mapping=None):
    """
    Build a mock DnsFetcher whose query_txt() answers from `mapping`.

    mapping: dict of domain -> list[str] of TXT values, a DnsResponse, or an
    exception instance to raise. Unknown domains return an empty NOERROR response.
    """
    mapping = mapping or {}
    fetcher = MagicMock()

    def _query_txt(domain):
        if domain not in mapping:
            return dns_response(domain)
        val = mapping[domain]
        if isinstance(val, Exception):
            raise val
        if isinstance(val, DnsResponse):
            return val
        return dns_response(domain, val)

    fetcher.query_txt.side_effect = _query_txt
    return fetcher


def tag_names(record):
    return [t.tag for t in record.tags]


def tag(record, name):
    """First ParsedTag named `name`."""
    return next(t for t in record.tags if t.tag == name)


def severities(issues):
    return [i.severity.value for i in issues]

"""Custom exception hierarchy for dmarc-inspector.

Record content never raises: malformed records degrade to info tags and
validation issues. These exceptions cover operational failures only.
"""


class DmarcInspectorError(Exception):
    """Base exception for all dmarc-inspector errors."""


# ── DNS Errors ─────────────────────────────────────────────────────────────────

class DnsError(DmarcInspectorError):
    """Base class for DNS-related errors."""


class DnsTimeoutError(DnsError):
    """DNS query timed out."""


class DnsNxdomainError(DnsError):
    """Domain or record does not exist."""


class DnsServfailError(DnsError):
    """DNS server returned SERVFAIL."""


class DnsAllResolversExhaustedError(DnsError):
    """All configured resolvers failed to answer."""


# ── Validation Errors ──────────────────────────────────────────────────────────

class ValidationError(DmarcInspectorError):
    """Base class for input validation errors."""


class InvalidDomainError(ValidationError):
    """The provided domain name is invalid."""


class InvalidSelectorError(ValidationError):
    """A DKIM lookup was requested without a usable selector."""


class UnknownRecordTypeError(ValidationError):
    """Record type is not one of dmarc, spf, dkim."""


class InvalidConfigError(ValidationError):
    """A DMARC generator configuration value is out of range."""

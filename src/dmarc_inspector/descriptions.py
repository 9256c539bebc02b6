"""Static description tables for record tags, keyed on tag or (tag, value)."""

from types import MappingProxyType

from .models import TagStatus

# ── DMARC ──────────────────────────────────────────────────────────────────────

DMARC_VERSION = "Version identifier for DMARC records"

DMARC_POLICY = MappingProxyType({
    "reject": "Reject emails that fail authentication",
    "quarantine": "Send failing emails to spam folder",
    "none": "Monitor only, no action taken",
})
DMARC_POLICY_FALLBACK = "Domain policy for failed emails"

DMARC_SUBDOMAIN_POLICY = MappingProxyType({
    "reject": "Reject emails from subdomains that fail",
    "quarantine": "Send failing subdomain emails to spam",
    "none": "Monitor subdomains only, no action taken",
})
DMARC_SUBDOMAIN_POLICY_FALLBACK = "Subdomain policy for failed emails"

POLICY_STATUS = MappingProxyType({
    "reject": TagStatus.GOOD,
    "quarantine": TagStatus.WARNING,
})

DMARC_RUA = "Where aggregate reports are sent"
DMARC_RUF = "Where detailed failure reports are sent"

DMARC_ALIGNMENT = MappingProxyType({
    ("adkim", "s"): "Strict DKIM alignment required",
    ("adkim", "r"): "Relaxed DKIM alignment allowed",
    ("aspf", "s"): "Strict SPF alignment required",
    ("aspf", "r"): "Relaxed SPF alignment allowed",
})

DMARC_FAILURE_OPTIONS = MappingProxyType({
    "0": "Report when all checks fail",
    "1": "Report when any check fails",
    "d": "Report DKIM failures only",
    "s": "Report SPF failures only",
})
DMARC_FAILURE_OPTIONS_FALLBACK = "Controls when failure reports are generated"

DMARC_INTERVAL_SECONDS = "Report interval in seconds"
DMARC_UNKNOWN = "Unknown tag"

# ── SPF ────────────────────────────────────────────────────────────────────────

SPF_VERSION = "Version identifier for SPF records"

SPF_MECHANISM = MappingProxyType({
    "include": "Authorise servers from this domain to send email",
    "a": "Authorise IP addresses from A records",
    "mx": "Authorise mail server IP addresses",
    "ip4": "Authorise this IPv4 address or range",
    "ip6": "Authorise this IPv6 address or range",
    "redirect": "Use SPF policy from another domain instead",
    "exists": "Advanced check if domain exists",
    "ptr": "Authorise hosts by reverse DNS (deprecated, slow and unreliable)",
})

SPF_MECHANISM_STATUS = MappingProxyType({
    "redirect": TagStatus.WARNING,
    "ptr": TagStatus.WARNING,
})

# qualifier -> (display label, description, status)
SPF_ALL = MappingProxyType({
    "-": ("hard fail", "Reject emails from unlisted servers", TagStatus.GOOD),
    "~": ("soft fail", "Mark emails from unlisted servers as suspicious", TagStatus.WARNING),
    "?": ("neutral", "No policy for unlisted servers", TagStatus.WARNING),
    "+": ("pass", "Allow any server to send email (not recommended)", TagStatus.ERROR),
})

SPF_UNKNOWN = "Unknown mechanism"

# ── DKIM ───────────────────────────────────────────────────────────────────────

DKIM_VERSION = "Version identifier for DKIM records"

DKIM_KEY_TYPE = MappingProxyType({
    "rsa": "RSA encryption (standard)",
    "ed25519": "Ed25519 encryption (modern)",
})
DKIM_KEY_TYPE_FALLBACK = "Encryption algorithm used for signing"

DKIM_REVOKED = "This key has been revoked and is no longer valid"

DKIM_FLAGS_TESTING = "Key is in testing mode (not enforced)"
DKIM_FLAGS = "Configuration flags"

DKIM_HASH = MappingProxyType({
    "sha256": "Only SHA-256 signatures are accepted",
    "sha1": "Only SHA-1 signatures are accepted (weak)",
    "sha1:sha256": "SHA-1 and SHA-256 signatures are accepted",
    "sha256:sha1": "SHA-256 and SHA-1 signatures are accepted",
})
DKIM_HASH_FALLBACK = "Allowed hash algorithms for signatures"

DKIM_SERVICE = MappingProxyType({
    "email": "Used for email signing only",
    "*": "Can be used for any service",
})
DKIM_SERVICE_FALLBACK = "Restricts which services can use this key"

DKIM_NOTES = "Notes for administrators (not interpreted)"
DKIM_UNKNOWN = "Additional configuration"

"""Shared data contracts between all dmarc-inspector modules. Zero logic here."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


# ── Enums ──────────────────────────────────────────────────────────────────────

class TagStatus(Enum):
    GOOD = "good"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RecordType(Enum):
    DMARC = "dmarc"
    SPF = "spf"
    DKIM = "dkim"


class DmarcPolicy(Enum):
    NONE = "none"
    QUARANTINE = "quarantine"
    REJECT = "reject"


class SpfQualifier(Enum):
    PASS = "+"
    FAIL = "-"
    SOFTFAIL = "~"
    NEUTRAL = "?"


class DnsStatus(Enum):
    NOERROR = "NOERROR"
    NXDOMAIN = "NXDOMAIN"
    SERVFAIL = "SERVFAIL"
    TIMEOUT = "TIMEOUT"


# ── Tags and Issues ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ParsedTag:
    tag: str
    value: str
    description: str
    status: TagStatus


@dataclass(frozen=True)
class ValidationIssue:
    severity: Severity
    message: str
    field: Optional[str] = None


# ── Parsed Records ─────────────────────────────────────────────────────────────

@dataclass
class DmarcRecord:
    raw_record: str
    version: Optional[str] = None
    policy: Optional[DmarcPolicy] = None
    subdomain_policy: Optional[DmarcPolicy] = None
    percentage: int = 100
    rua_emails: list = field(default_factory=list)  # list[str]
    ruf_emails: list = field(default_factory=list)  # list[str]
    dkim_alignment: str = "r"
    spf_alignment: str = "r"
    report_interval: int = 86400
    failure_options: Optional[str] = None
    tags: list = field(default_factory=list)        # list[ParsedTag]


@dataclass
class SpfMechanism:
    type: str
    value: str
    qualifier: SpfQualifier = SpfQualifier.PASS


@dataclass
class SpfRecord:
    raw_record: str
    version: Optional[str] = None
    mechanisms: list = field(default_factory=list)  # list[SpfMechanism]
    has_all: bool = False
    all_qualifier: Optional[SpfQualifier] = None
    tags: list = field(default_factory=list)        # list[ParsedTag]

    @property
    def includes(self) -> list:
        return [m.value for m in self.mechanisms if m.type == "include"]

    @property
    def ipv4(self) -> list:
        return [m.value for m in self.mechanisms if m.type == "ip4"]

    @property
    def ipv6(self) -> list:
        return [m.value for m in self.mechanisms if m.type == "ip6"]


@dataclass
class DkimRecord:
    raw_record: str
    version: Optional[str] = None
    key_type: str = "rsa"
    public_key: Optional[str] = None
    flags: Optional[str] = None
    hash_algorithms: list = field(default_factory=list)  # list[str]
    service_types: list = field(default_factory=list)    # list[str]
    notes: Optional[str] = None
    tags: list = field(default_factory=list)             # list[ParsedTag]

    @property
    def revoked(self) -> bool:
        """An empty p= tag is an explicit revocation, not a missing key."""
        return self.public_key == ""

    @property
    def testing(self) -> bool:
        return bool(self.flags) and "y" in self.flags


# ── Inspection ─────────────────────────────────────────────────────────────────

@dataclass
class RecordReport:
    record_type: RecordType
    raw_record: Optional[str]
    parsed: object = None                               # DmarcRecord | SpfRecord | DkimRecord
    tags: list = field(default_factory=list)            # list[ParsedTag]
    issues: list = field(default_factory=list)          # list[ValidationIssue]
    recommendations: list = field(default_factory=list) # list[str]

    @property
    def passed(self) -> bool:
        return not any(i.severity == Severity.ERROR for i in self.issues)


# ── Record Generation ──────────────────────────────────────────────────────────

@dataclass
class DmarcConfig:
    """Inputs for the DMARC record generator. sp=None inherits p."""
    domain: str
    policy: DmarcPolicy = DmarcPolicy.NONE
    subdomain_policy: Optional[DmarcPolicy] = None
    percentage: int = 100
    rua_emails: list = field(default_factory=list)  # list[str]
    ruf_emails: list = field(default_factory=list)  # list[str]
    dkim_alignment: str = "r"
    spf_alignment: str = "r"
    report_interval: int = 86400
    failure_options: str = "0"


@dataclass
class DnsRecordSpec:
    """A copy-paste-ready DNS record."""
    record_type: str
    name: str
    value: str
    purpose: str


# ── DNS Layer ──────────────────────────────────────────────────────────────────

@dataclass
class DnsRecord:
    record_type: str
    value: str
    ttl: int


@dataclass
class DnsResponse:
    domain: str
    record_type: str
    status: DnsStatus
    records: list = field(default_factory=list)  # list[DnsRecord]
    resolver_used: str = ""
    response_time_ms: float = 0.0
    cache_hit: bool = False
    queried_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class LookupResult:
    domain: str
    record_type: RecordType
    lookup_domain: str
    record: Optional[str] = None
    all_records: list = field(default_factory=list)  # list[str]
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.record is not None

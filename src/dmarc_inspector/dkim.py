"""DKIM key record parser and validator. An empty p= is a revoked key, not a missing one."""

from typing import Optional

from . import descriptions as d
from .models import DkimRecord, ParsedTag, Severity, TagStatus, ValidationIssue
from .tokenizer import split_tag_pairs

VERSION = "DKIM1"
KEY_TYPES = {"rsa", "ed25519"}
KEY_DISPLAY_LENGTH = 50
MIN_RSA_KEY_LENGTH = 200
REVOKED_DISPLAY = "(revoked)"


def parse_dkim_record(raw: Optional[str]) -> DkimRecord:
    record = DkimRecord(raw_record=raw or "")
    seen = set()

    for key, value in split_tag_pairs(raw):
        name = key.lower()
        handler = _TAG_HANDLERS.get(name)
        if handler is None:
            record.tags.append(ParsedTag(key, value, d.DKIM_UNKNOWN, TagStatus.INFO))
            continue
        target = record if name not in seen else DkimRecord(raw_record="")
        seen.add(name)
        record.tags.append(handler(target, value))

    return record


def _version(record: DkimRecord, value: str) -> ParsedTag:
    record.version = value
    status = TagStatus.GOOD if value == VERSION else TagStatus.ERROR
    return ParsedTag("v", value, d.DKIM_VERSION, status)


def _key_type(record: DkimRecord, value: str) -> ParsedTag:
    record.key_type = value
    status = TagStatus.GOOD if value in KEY_TYPES else TagStatus.INFO
    return ParsedTag("k", value, d.DKIM_KEY_TYPE.get(value, d.DKIM_KEY_TYPE_FALLBACK), status)


def _public_key(record: DkimRecord, value: str) -> ParsedTag:
    record.public_key = value
    if not value:
        return ParsedTag("p", REVOKED_DISPLAY, d.DKIM_REVOKED, TagStatus.ERROR)

    display = value
    if len(value) > KEY_DISPLAY_LENGTH:
        display = value[:KEY_DISPLAY_LENGTH] + "..."
    description = f"Public key for verifying signatures ({len(value)} characters)"
    return ParsedTag("p", display, description, TagStatus.GOOD)


def _flags(record: DkimRecord, value: str) -> ParsedTag:
    record.flags = value
    if "y" in value:
        return ParsedTag("t", value, d.DKIM_FLAGS_TESTING, TagStatus.WARNING)
    return ParsedTag("t", value, d.DKIM_FLAGS, TagStatus.INFO)


def _hash_algorithms(record: DkimRecord, value: str) -> ParsedTag:
    record.hash_algorithms = _colon_list(value)
    return ParsedTag("h", value, d.DKIM_HASH.get(value.lower(), d.DKIM_HASH_FALLBACK), TagStatus.INFO)


def _service_types(record: DkimRecord, value: str) -> ParsedTag:
    record.service_types = _colon_list(value)
    return ParsedTag("s", value, d.DKIM_SERVICE.get(value, d.DKIM_SERVICE_FALLBACK), TagStatus.INFO)


def _notes(record: DkimRecord, value: str) -> ParsedTag:
    record.notes = value
    return ParsedTag("n", value, d.DKIM_NOTES, TagStatus.INFO)


_TAG_HANDLERS = {
    "v": _version,
    "k": _key_type,
    "p": _public_key,
    "t": _flags,
    "h": _hash_algorithms,
    "s": _service_types,
    "n": _notes,
}


def _colon_list(value: str) -> list:
    return [part.strip() for part in value.split(":") if part.strip()]


# ── Validation ─────────────────────────────────────────────────────────────────

def validate_dkim_record(raw: Optional[str]) -> list:
    """Return ValidationIssues for a DKIM key record. Never raises."""
    issues = []
    pairs = split_tag_pairs(raw)

    if not pairs:
        issues.append(ValidationIssue(Severity.ERROR, "Invalid DKIM record"))
        return issues

    tags = {}
    for key, value in pairs:
        tags.setdefault(key.lower(), value)

    key_type = tags.get("k", "rsa")

    if "p" not in tags:
        issues.append(ValidationIssue(Severity.ERROR, "Missing public key (p=) in DKIM record", "p"))
    elif not tags["p"]:
        issues.append(ValidationIssue(
            Severity.ERROR, "DKIM key has been revoked (empty p=). Messages signed with this selector will fail", "p",
        ))
    elif key_type == "rsa" and len(tags["p"]) < MIN_RSA_KEY_LENGTH:
        issues.append(ValidationIssue(
            Severity.WARNING, "Public key seems short. Ensure it is a valid RSA key of at least 1024 bits.", "p",
        ))

    if key_type not in KEY_TYPES:
        issues.append(ValidationIssue(
            Severity.WARNING, f'Unknown key type: {key_type}. Common types are "rsa" or "ed25519".', "k",
        ))

    if "y" in tags.get("t", ""):
        issues.append(ValidationIssue(
            Severity.WARNING, "DKIM record is in testing mode (t=y). Remove this flag when ready for production.", "t",
        ))

    hashes = _colon_list(tags.get("h", ""))
    if hashes and "sha256" not in [h.lower() for h in hashes]:
        issues.append(ValidationIssue(
            Severity.WARNING, "Key does not allow sha256 signatures; sha1 alone is no longer considered secure", "h",
        ))

    if "v" not in tags:
        issues.append(ValidationIssue(Severity.INFO, "DKIM version tag (v=) is optional but recommended", "v"))
    elif tags["v"] != VERSION:
        issues.append(ValidationIssue(Severity.ERROR, f"DKIM version must be {VERSION} (found '{tags['v']}')", "v"))

    return issues

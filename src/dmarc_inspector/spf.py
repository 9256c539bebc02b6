"""SPF record parser, syntactic lookup counter and validator."""

from typing import Optional

from . import descriptions as d
from .models import ParsedTag, Severity, SpfMechanism, SpfQualifier, SpfRecord, TagStatus, ValidationIssue
from .tokenizer import WHITESPACE, tokenize

VERSION_TOKEN = "v=spf1"
MAX_LOOKUPS = 10
NEAR_LIMIT_LOOKUPS = 8
MAX_INCLUDES = 5
LOOKUP_MECHANISMS = {"include", "a", "mx", "ptr", "exists", "redirect"}
ARGUMENT_REQUIRED = {"include", "ip4", "ip6", "exists", "redirect"}
SELF_DEFAULT = {"a", "mx", "ptr"}
MODIFIERS = {"redirect", "exp"}

_QUALIFIERS = {q.value: q for q in SpfQualifier}


def parse_spf_record(raw: Optional[str]) -> SpfRecord:
    """Parse an SPF TXT value. Mechanism values keep their original case."""
    record = SpfRecord(raw_record=raw or "")

    for token in tokenize(raw, WHITESPACE):
        if token.lower() == VERSION_TOKEN:
            record.version = "spf1"
            record.tags.append(ParsedTag("v", "spf1", d.SPF_VERSION, TagStatus.GOOD))
            continue

        qualifier, name, value, delimiter = split_term(token)

        if name == "all" and not value:
            label, description, status = d.SPF_ALL[qualifier.value]
            record.has_all = True
            record.all_qualifier = qualifier
            record.tags.append(ParsedTag("all", f"{token} ({label})", description, status))
        elif name == "exp" and delimiter == "=":
            record.tags.append(ParsedTag("exp", value, "Explanation shown to rejected senders", TagStatus.INFO))
        elif name in d.SPF_MECHANISM and _delimiter_fits(name, delimiter):
            if not value and name in SELF_DEFAULT:
                value = "self"
            elif delimiter == "/":
                value = "self/" + value
            record.mechanisms.append(SpfMechanism(type=name, value=value, qualifier=qualifier))
            record.tags.append(_mechanism_tag(name, value))
        else:
            record.tags.append(ParsedTag(name or token, value, d.SPF_UNKNOWN, TagStatus.INFO))

    return record


def split_term(token: str) -> tuple:
    """Returns (qualifier, lowercased name, value, delimiter) for one SPF term."""
    if token and token[0] in _QUALIFIERS:
        qualifier = _QUALIFIERS[token[0]]
        rest = token[1:]
    else:
        qualifier = SpfQualifier.PASS
        rest = token

    for index, char in enumerate(rest):
        if char in ":=/":
            return qualifier, rest[:index].lower(), rest[index + 1:], char
    return qualifier, rest.lower(), "", ""


def _delimiter_fits(name: str, delimiter: str) -> bool:
    if name in MODIFIERS:
        return delimiter == "="
    if name in SELF_DEFAULT:
        return delimiter in ("", ":", "/")
    return delimiter == ":"


def _mechanism_tag(name: str, value: str) -> ParsedTag:
    if name in ARGUMENT_REQUIRED and not value:
        return ParsedTag(name, value, "Mechanism is missing its required argument", TagStatus.WARNING)
    status = d.SPF_MECHANISM_STATUS.get(name, TagStatus.INFO)
    return ParsedTag(name, value, d.SPF_MECHANISM[name], status)


# ── Validation ─────────────────────────────────────────────────────────────────

def count_lookups(raw: Optional[str]) -> int:
    """Syntactic DNS lookup count. Nested includes are not resolved."""
    total = 0
    for token in tokenize(raw, WHITESPACE)[1:]:
        _, name, _, delimiter = split_term(token)
        if name in LOOKUP_MECHANISMS and _delimiter_fits(name, delimiter):
            total += 1
    return total


def all_qualifiers(raw: Optional[str]) -> list:
    """Qualifiers of every bare all term, in record order."""
    result = []
    for token in tokenize(raw, WHITESPACE)[1:]:
        qualifier, name, value, _ = split_term(token)
        if name == "all" and not value:
            result.append(qualifier)
    return result


def validate_spf_record(raw: Optional[str]) -> list:
    """Return ValidationIssues for an SPF TXT value. Never raises."""
    issues = []
    tokens = tokenize(raw, WHITESPACE)

    if not tokens or tokens[0].lower() != VERSION_TOKEN:
        issues.append(ValidationIssue(Severity.ERROR, f"Invalid SPF record. Must start with {VERSION_TOKEN}", "v"))
        return issues

    qualifiers = []
    includes = 0
    has_redirect = False
    has_ptr = False
    unknown = []

    for token in tokens[1:]:
        qualifier, name, value, delimiter = split_term(token)
        if name == "all" and not value:
            qualifiers.append(qualifier)
        elif name == "include" and delimiter == ":":
            includes += 1
        elif name == "redirect" and delimiter == "=":
            has_redirect = True
        elif name == "ptr" and _delimiter_fits(name, delimiter):
            has_ptr = True
        elif not (name in d.SPF_MECHANISM and _delimiter_fits(name, delimiter)) and name != "exp":
            unknown.append(token)

    if qualifiers:
        # Every all term is checked, not only the last
        if SpfQualifier.PASS in qualifiers:
            issues.append(ValidationIssue(
                Severity.ERROR, 'SPF record contains "+all" which allows any server to send as this domain. '
                'Use "-all" (hard fail) or "~all" (soft fail).', "all",
            ))
        if SpfQualifier.NEUTRAL in qualifiers:
            issues.append(ValidationIssue(
                Severity.WARNING, 'SPF record contains "?all" which enforces nothing for unlisted servers. '
                'Use "-all" (hard fail) or "~all" (soft fail).', "all",
            ))
        if len(qualifiers) > 1:
            issues.append(ValidationIssue(
                Severity.WARNING, "SPF record contains more than one all mechanism; terms after the first are never evaluated", "all",
            ))
        if has_redirect:
            issues.append(ValidationIssue(
                Severity.WARNING, "redirect= is ignored when an all mechanism is present", "redirect",
            ))
    elif not has_redirect:
        issues.append(ValidationIssue(
            Severity.WARNING, 'SPF record does not end with an "all" mechanism. This may allow unauthorized senders.', "all",
        ))

    lookups = count_lookups(raw)
    if lookups > MAX_LOOKUPS:
        issues.append(ValidationIssue(
            Severity.ERROR, f"SPF record exceeds the {MAX_LOOKUPS} DNS lookup limit of RFC 7208 (currently {lookups}). "
            "This will cause SPF validation to fail.",
        ))
    elif lookups >= NEAR_LIMIT_LOOKUPS:
        issues.append(ValidationIssue(
            Severity.WARNING, f"SPF record has {lookups} DNS lookups (limit is {MAX_LOOKUPS}). "
            "Consider reducing to avoid hitting the limit.",
        ))

    if includes > MAX_INCLUDES:
        issues.append(ValidationIssue(
            Severity.INFO, f"SPF record has {includes} include mechanisms. Consider consolidating to reduce DNS lookups.", "include",
        ))

    if has_ptr:
        issues.append(ValidationIssue(
            Severity.WARNING, "The ptr mechanism is deprecated by RFC 7208; replace it with ip4:/ip6: ranges", "ptr",
        ))

    for token in unknown:
        issues.append(ValidationIssue(
            Severity.WARNING, f"Unrecognised term '{token}'; receivers may treat the record as a permanent error",
        ))

    return issues

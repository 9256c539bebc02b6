"""Split raw DNS TXT record strings into tokens for the three record grammars."""

from typing import Optional

SEMICOLON = "semicolon"
WHITESPACE = "whitespace"


def tokenize(raw: Optional[str], grammar: str) -> list:
    """
    semicolon (DMARC, DKIM): list of (key, value) tuples. Each part is split on
    the first '=' only, so values may themselves contain '='. A part with no
    '=' becomes (part, "").

    whitespace (SPF): list of raw tokens, case preserved.
    """
    if not raw:
        return []

    if grammar == SEMICOLON:
        return split_tag_pairs(raw)
    if grammar == WHITESPACE:
        return raw.split()
    raise ValueError(f"Unknown grammar: {grammar}")


def split_tag_pairs(raw: Optional[str]) -> list:
    pairs = []
    for part in (raw or "").split(";"):
        part = part.strip()
        if not part:
            continue
        key, _, value = part.partition("=")
        pairs.append((key.strip(), value.strip()))
    return pairs


def strip_quotes(raw: Optional[str]) -> Optional[str]:
    """Remove surrounding double quotes a user may paste from zone files."""
    if raw is None:
        return None
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        return raw[1:-1].strip()
    return raw

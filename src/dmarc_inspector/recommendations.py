"""Advisory hardening suggestions per record type. Most urgent suggestion first."""

from typing import Optional, Union

from .dkim import MIN_RSA_KEY_LENGTH, parse_dkim_record
from .dmarc import parse_dmarc_record, VERSION as DMARC_VERSION
from .exceptions import UnknownRecordTypeError
from .models import DmarcPolicy, RecordType, SpfQualifier
from .spf import NEAR_LIMIT_LOOKUPS, all_qualifiers, count_lookups, parse_spf_record


def coerce_record_type(record_type: Union[str, RecordType]) -> RecordType:
    if isinstance(record_type, RecordType):
        return record_type
    try:
        return RecordType((record_type or "").strip().lower())
    except ValueError:
        raise UnknownRecordTypeError(
            f"Invalid type '{record_type}'. Must be dmarc, spf, or dkim"
        ) from None


def get_recommendations(
    record_type: Union[str, RecordType],
    record: Optional[str],
    domain: Optional[str] = None,
) -> list:
    """
    record None (or blank) means no record was found: returns setup guidance.
    Otherwise returns suggestions for the published record, possibly none.
    """
    rtype = coerce_record_type(record_type)
    if not record or not record.strip():
        return _setup_guidance(rtype, domain or "yourdomain.com")

    builders = {
        RecordType.DMARC: _dmarc_recommendations,
        RecordType.SPF: _spf_recommendations,
        RecordType.DKIM: _dkim_recommendations,
    }
    return builders[rtype](record.strip(), domain or "yourdomain.com")


# ── No Record ──────────────────────────────────────────────────────────────────

def _setup_guidance(rtype: RecordType, domain: str) -> list:
    if rtype == RecordType.DMARC:
        return [
            f"No DMARC record found. Add a TXT record at _dmarc.{domain} to protect your domain from email spoofing.",
            f"Start with a monitoring policy: v=DMARC1; p=none; rua=mailto:dmarc@{domain}",
        ]
    if rtype == RecordType.SPF:
        return [
            f"No SPF record found. Add a TXT record at {domain} listing the servers allowed to send email for your domain.",
            "Example: v=spf1 include:_spf.google.com ~all",
        ]
    return [
        "No DKIM record found for this selector. Ensure you are using the correct selector.",
        f"DKIM records are published at <selector>._domainkey.{domain} and are generated by your email service provider.",
    ]


# ── DMARC ──────────────────────────────────────────────────────────────────────

def _dmarc_recommendations(record: str, domain: str) -> list:
    if not record.startswith(f"v={DMARC_VERSION}"):
        return [f"Your record is not a valid DMARC record. It must begin with v={DMARC_VERSION}."]

    parsed = parse_dmarc_record(record)
    recommendations = []

    if parsed.policy is None:
        recommendations.append("Add a policy tag (p=none, p=quarantine or p=reject); receivers ignore DMARC records without one.")
    elif parsed.policy == DmarcPolicy.NONE:
        recommendations.append(
            "Your DMARC policy is in monitoring mode. Once you have verified SPF and DKIM are working "
            "correctly, consider moving to p=quarantine or p=reject."
        )
        recommendations.append("Monitor your aggregate reports (rua) for at least 2-4 weeks before tightening the policy.")

    if not parsed.rua_emails:
        recommendations.append(f"Add aggregate reporting (rua=mailto:dmarc@{domain}) so you can see who sends mail as your domain.")
        if parsed.policy in (DmarcPolicy.QUARANTINE, DmarcPolicy.REJECT) and parsed.percentage == 100:
            recommendations.append(
                "Without reports you cannot confirm legitimate mail passes; consider lowering pct before "
                "enforcing on all mail."
            )

    if parsed.policy in (DmarcPolicy.QUARANTINE, DmarcPolicy.REJECT) and parsed.percentage < 100:
        recommendations.append(
            f"Policy applies to {parsed.percentage}% of mail. Raise pct gradually to 100 as reports confirm clean delivery."
        )
    elif parsed.policy == DmarcPolicy.QUARANTINE:
        recommendations.append("Quarantine is fully applied. Consider moving to p=reject after 4-8 weeks of clean reports.")

    if parsed.policy in (DmarcPolicy.QUARANTINE, DmarcPolicy.REJECT) and parsed.subdomain_policy == DmarcPolicy.NONE:
        recommendations.append("sp=none leaves subdomains unprotected; remove sp= to inherit the domain policy.")

    if not parsed.ruf_emails:
        recommendations.append("Consider adding forensic reporting (ruf=) to receive samples of failed messages.")

    return recommendations


# ── SPF ────────────────────────────────────────────────────────────────────────

def _spf_recommendations(record: str, domain: str) -> list:
    parsed = parse_spf_record(record)
    if parsed.version is None:
        return ["Your record is not a valid SPF record. It must begin with v=spf1."]

    qualifiers = all_qualifiers(record)
    recommendations = []
    if SpfQualifier.PASS in qualifiers:
        recommendations.append('Replace "+all" immediately: it authorises every server on the internet to send as your domain.')
    elif not parsed.has_all and not any(m.type == "redirect" for m in parsed.mechanisms):
        recommendations.append('End the record with "~all" or "-all" so unlisted servers are not implicitly allowed.')

    weak = next((q for q in qualifiers if q in (SpfQualifier.SOFTFAIL, SpfQualifier.NEUTRAL)), None)
    if weak is not None:
        recommendations.append(
            f'Consider using "-all" instead of "{weak.value}all" for stronger protection once you have verified all '
            "legitimate senders are included."
        )

    lookups = count_lookups(record)
    if lookups >= NEAR_LIMIT_LOOKUPS:
        recommendations.append(
            f"The record uses {lookups} of 10 DNS lookups. Replace include: mechanisms with ip4:/ip6: ranges "
            "where senders publish stable addresses."
        )

    if any(m.type == "ptr" for m in parsed.mechanisms):
        recommendations.append("Remove the deprecated ptr mechanism and list the sending IP ranges explicitly.")

    return recommendations


# ── DKIM ───────────────────────────────────────────────────────────────────────

def _dkim_recommendations(record: str, domain: str) -> list:
    parsed = parse_dkim_record(record)
    recommendations = []

    if parsed.revoked:
        recommendations.append(
            "This selector's key is revoked. Make sure your provider signs with a different, active selector, "
            "or remove this record once no mail references it."
        )
    elif parsed.public_key is None:
        recommendations.append("The record has no p= tag. Republish the full key record supplied by your email provider.")
    elif parsed.key_type == "rsa" and len(parsed.public_key) < MIN_RSA_KEY_LENGTH:
        recommendations.append("Rotate to a 2048-bit RSA key; short keys can be factored.")

    if parsed.testing:
        recommendations.append('Your DKIM key is in testing mode. Remove "t=y" when ready for production.')

    if parsed.version is None:
        recommendations.append("Add v=DKIM1 at the start of the record for compatibility with strict verifiers.")

    return recommendations

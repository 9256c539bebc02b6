"""DMARC record builder: turns a DmarcConfig into a copy-paste-ready TXT value."""

import re

from .dmarc import DEFAULT_INTERVAL, validate_dmarc_record
from .exceptions import InvalidConfigError
from .models import DmarcConfig, DmarcPolicy, DnsRecordSpec, Severity, ValidationIssue

_FAILURE_OPTION = re.compile(r"^[01ds](:[01ds])*$")
_ENFORCING_ACTION = {
    DmarcPolicy.REJECT: "rejected",
    DmarcPolicy.QUARANTINE: "quarantined",
}


class RecordGenerator:
    def build(self, config: DmarcConfig) -> str:
        """
        Tag order: v, p, sp, pct, rua, ruf, adkim, aspf, ri, fo.
        Tags at their default value are omitted, except adkim and aspf
        which are always written out.
        """
        self._check(config)

        parts = ["v=DMARC1", f"p={config.policy.value}"]
        if config.subdomain_policy is not None:
            parts.append(f"sp={config.subdomain_policy.value}")
        if config.percentage < 100:
            parts.append(f"pct={config.percentage}")
        if config.rua_emails:
            parts.append("rua=" + ",".join(f"mailto:{e}" for e in config.rua_emails))
        if config.ruf_emails:
            parts.append("ruf=" + ",".join(f"mailto:{e}" for e in config.ruf_emails))
        parts.append(f"adkim={config.dkim_alignment}")
        parts.append(f"aspf={config.spf_alignment}")
        if config.report_interval != DEFAULT_INTERVAL:
            parts.append(f"ri={config.report_interval}")
        if config.failure_options != "0":
            parts.append(f"fo={config.failure_options}")

        return "; ".join(parts)

    def warnings(self, config: DmarcConfig) -> list:
        """
        Issues for the generated record, plus a missing-domain error. An
        enforcing policy at 100% always draws the testing-risk warning,
        whether or not reports are configured.
        """
        issues = []
        if not config.domain.strip():
            issues.append(ValidationIssue(Severity.ERROR, "Domain name is required", "domain"))

        enforcing = config.policy in _ENFORCING_ACTION and config.percentage == 100
        if enforcing:
            action = _ENFORCING_ACTION[config.policy]
            issues.append(ValidationIssue(
                Severity.WARNING,
                f"Using p={config.policy.value} at 100% without testing can cause legitimate emails to be "
                f"{action}. Consider starting with p=none or using a lower percentage.",
                "pct",
            ))

        for issue in validate_dmarc_record(self.build(config)):
            # The record validator raises the same pct risk when rua is missing
            if enforcing and issue.field == "pct" and issue.severity == Severity.WARNING:
                continue
            issues.append(issue)
        return issues

    def record_spec(self, config: DmarcConfig) -> DnsRecordSpec:
        domain = config.domain.strip().rstrip(".")
        return DnsRecordSpec(
            record_type="TXT",
            name=f"_dmarc.{domain}" if domain else "_dmarc",
            value=self.build(config),
            purpose=f"DMARC policy p={config.policy.value}",
        )

    # ── Checks ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _check(config: DmarcConfig) -> None:
        if not 0 <= config.percentage <= 100:
            raise InvalidConfigError(f"pct must be between 0 and 100, got {config.percentage}")
        for name, value in (("adkim", config.dkim_alignment), ("aspf", config.spf_alignment)):
            if value not in ("r", "s"):
                raise InvalidConfigError(f"{name} must be 'r' or 's', got '{value}'")
        if config.report_interval <= 0:
            raise InvalidConfigError(f"ri must be a positive number of seconds, got {config.report_interval}")
        if not _FAILURE_OPTION.match(config.failure_options):
            raise InvalidConfigError(f"fo must be a colon-separated list of 0, 1, d, s; got '{config.failure_options}'")
        for address in list(config.rua_emails) + list(config.ruf_emails):
            if "@" not in address or ";" in address or "," in address:
                raise InvalidConfigError(f"Invalid report address: {address}")

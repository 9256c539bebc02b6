"""JSON serializer for inspection reports, lookups and generated records."""

import json
from dataclasses import asdict
from typing import Optional

from .models import (
    DkimRecord,
    DmarcRecord,
    DnsRecordSpec,
    LookupResult,
    ParsedTag,
    RecordReport,
    SpfRecord,
    ValidationIssue,
)


class JsonReporter:
    def render(self, report: RecordReport, lookup: Optional[LookupResult] = None) -> str:
        return json.dumps(self.to_dict(report, lookup), indent=2, default=str)

    def render_generated(self, spec: DnsRecordSpec, issues: list) -> str:
        return json.dumps(self.generated_to_dict(spec, issues), indent=2)

    def to_dict(self, report: RecordReport, lookup: Optional[LookupResult] = None) -> dict:
        data = {
            "type": report.record_type.value,
            "record": report.raw_record,
            "found": report.raw_record is not None,
            "valid": report.passed,
            "parsed": self._parsed_dict(report.parsed),
            "tags": [self._tag_dict(t) for t in report.tags],
            "issues": [self._issue_dict(i) for i in report.issues],
            "recommendations": report.recommendations,
        }
        if lookup is not None:
            data.update({
                "domain": lookup.lookup_domain,
                "all_records": lookup.all_records,
                "found": lookup.found,
                "error": lookup.error,
            })
        return data

    def generated_to_dict(self, spec: DnsRecordSpec, issues: list) -> dict:
        return {
            "record": asdict(spec),
            "warnings": [self._issue_dict(i) for i in issues],
        }

    # ── Pieces ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _tag_dict(tag: ParsedTag) -> dict:
        return {"tag": tag.tag, "value": tag.value, "description": tag.description, "status": tag.status.value}

    @staticmethod
    def _issue_dict(issue: ValidationIssue) -> dict:
        return {"severity": issue.severity.value, "field": issue.field, "message": issue.message}

    def _parsed_dict(self, parsed) -> Optional[dict]:
        if isinstance(parsed, DmarcRecord):
            return {
                "version": parsed.version,
                "policy": parsed.policy.value if parsed.policy else None,
                "subdomain_policy": parsed.subdomain_policy.value if parsed.subdomain_policy else None,
                "percentage": parsed.percentage,
                "rua_emails": parsed.rua_emails,
                "ruf_emails": parsed.ruf_emails,
                "dkim_alignment": parsed.dkim_alignment,
                "spf_alignment": parsed.spf_alignment,
                "report_interval": parsed.report_interval,
                "failure_options": parsed.failure_options,
            }
        if isinstance(parsed, SpfRecord):
            return {
                "version": parsed.version,
                "mechanisms": [
                    {"type": m.type, "value": m.value, "qualifier": m.qualifier.value}
                    for m in parsed.mechanisms
                ],
                "has_all": parsed.has_all,
                "all_qualifier": parsed.all_qualifier.value if parsed.all_qualifier else None,
                "includes": parsed.includes,
                "ipv4": parsed.ipv4,
                "ipv6": parsed.ipv6,
            }
        if isinstance(parsed, DkimRecord):
            return {
                "version": parsed.version,
                "key_type": parsed.key_type,
                "public_key": parsed.public_key,
                "revoked": parsed.revoked,
                "testing": parsed.testing,
                "flags": parsed.flags,
                "hash_algorithms": parsed.hash_algorithms,
                "service_types": parsed.service_types,
                "notes": parsed.notes,
            }
        return None

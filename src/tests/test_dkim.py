"""Unit tests for the DKIM key record parser and validator."""

import pytest

from dmarc_inspector.dkim import parse_dkim_record, validate_dkim_record
from dmarc_inspector.models import Severity, TagStatus

from .helpers import severities, tag, tag_names

LONG_KEY = "MIIBIjANBgkqhkiG9w0BAQEFAAOCAQ8AMIIBCgKCAQEA" + "x" * 300


class TestDkimParsing:
    def test_tags_in_order(self):
        record = parse_dkim_record(f"v=DKIM1; k=rsa; p={LONG_KEY}")
        assert tag_names(record) == ["v", "k", "p"]

    def test_long_key_truncated_for_display(self):
        key = tag(parse_dkim_record(f"v=DKIM1; p={LONG_KEY}"), "p")
        assert key.value == LONG_KEY[:50] + "..."
        assert f"({len(LONG_KEY)} characters)" in key.description
        assert key.status == TagStatus.GOOD

    def test_short_key_shown_in_full(self):
        assert tag(parse_dkim_record("p=abc123"), "p").value == "abc123"

    def test_full_key_kept_on_model(self):
        assert parse_dkim_record(f"p={LONG_KEY}").public_key == LONG_KEY

    def test_revoked_key(self):
        record = parse_dkim_record("v=DKIM1; k=rsa; p=")
        key = tag(record, "p")
        assert key.value == "(revoked)"
        assert key.status == TagStatus.ERROR
        assert record.revoked is True

    def test_missing_key_is_not_revoked(self):
        record = parse_dkim_record("v=DKIM1; k=rsa")
        assert record.public_key is None
        assert record.revoked is False

    @pytest.mark.parametrize("value,status", [
        ("rsa", TagStatus.GOOD),
        ("ed25519", TagStatus.GOOD),
        ("dsa", TagStatus.INFO),
    ])
    def test_key_type_status(self, value, status):
        assert tag(parse_dkim_record(f"k={value}; p=abc"), "k").status == status

    def test_testing_flag(self):
        record = parse_dkim_record("v=DKIM1; t=y; p=abc")
        assert tag(record, "t").status == TagStatus.WARNING
        assert record.testing is True

    def test_hash_and_service_lists(self):
        record = parse_dkim_record("h=sha1:sha256; s=email; p=abc")
        assert record.hash_algorithms == ["sha1", "sha256"]
        assert record.service_types == ["email"]
        assert tag(record, "h").description == "SHA-1 and SHA-256 signatures are accepted"

    def test_unknown_tag_is_additional_configuration(self):
        extra = tag(parse_dkim_record("v=DKIM1; x=1; p=abc"), "x")
        assert extra.description == "Additional configuration"
        assert extra.status == TagStatus.INFO

    def test_first_duplicate_fills_model(self):
        record = parse_dkim_record("v=DKIM1; p=; p=abc")
        assert record.revoked is True
        assert [t.value for t in record.tags if t.tag == "p"] == ["(revoked)", "abc"]

    def test_key_with_padding_survives_split(self):
        assert parse_dkim_record("p=QUJD==").public_key == "QUJD=="


class TestDkimValidation:
    def test_good_record_has_no_issues(self):
        assert validate_dkim_record(f"v=DKIM1; k=rsa; p={LONG_KEY}") == []

    def test_empty_is_error(self):
        assert severities(validate_dkim_record("")) == ["error"]

    def test_missing_key_is_error(self):
        issues = validate_dkim_record("v=DKIM1; k=rsa")
        assert [(i.severity, i.field) for i in issues] == [(Severity.ERROR, "p")]

    def test_revoked_key_is_error(self):
        issues = validate_dkim_record("v=DKIM1; p=")
        assert any(i.severity == Severity.ERROR and "revoked" in i.message for i in issues)

    def test_short_rsa_key_warns(self):
        issues = validate_dkim_record("v=DKIM1; k=rsa; p=MIGfMA0GCSqGSIb3DQEB")
        assert [(i.severity, i.field) for i in issues] == [(Severity.WARNING, "p")]

    def test_short_ed25519_key_is_fine(self):
        assert validate_dkim_record("v=DKIM1; k=ed25519; p=11qYAYKxCrfVS/7TyWQHOg7hcvPapiMlrwIaaPcHURo=") == []

    def test_unknown_key_type_warns(self):
        issues = validate_dkim_record(f"v=DKIM1; k=dsa; p={LONG_KEY}")
        assert [i.field for i in issues] == ["k"]

    def test_testing_mode_warns(self):
        issues = validate_dkim_record(f"v=DKIM1; t=y; p={LONG_KEY}")
        assert [i.field for i in issues] == ["t"]

    def test_sha1_only_warns(self):
        issues = validate_dkim_record(f"v=DKIM1; h=sha1; p={LONG_KEY}")
        assert [i.field for i in issues] == ["h"]

    def test_missing_version_is_info(self):
        issues = validate_dkim_record(f"k=rsa; p={LONG_KEY}")
        assert [(i.severity, i.field) for i in issues] == [(Severity.INFO, "v")]

    def test_wrong_version_is_error(self):
        issues = validate_dkim_record(f"v=DKIM2; p={LONG_KEY}")
        assert [(i.severity, i.field) for i in issues] == [(Severity.ERROR, "v")]

    @pytest.mark.parametrize("raw", [";", "p", "==", "v=DKIM1; p=; p=abc"])
    def test_never_raises(self, raw):
        assert isinstance(validate_dkim_record(raw), list)

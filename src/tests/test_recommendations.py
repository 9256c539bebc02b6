"""Unit tests for hardening recommendations."""

import pytest

from dmarc_inspector.exceptions import UnknownRecordTypeError
from dmarc_inspector.models import RecordType
from dmarc_inspector.recommendations import coerce_record_type, get_recommendations

LONG_KEY = "A" * 400


class TestRecordTypeCoercion:
    @pytest.mark.parametrize("value,expected", [
        ("dmarc", RecordType.DMARC),
        ("SPF", RecordType.SPF),
        (" dkim ", RecordType.DKIM),
        (RecordType.SPF, RecordType.SPF),
    ])
    def test_accepted(self, value, expected):
        assert coerce_record_type(value) == expected

    @pytest.mark.parametrize("value", ["bimi", "", None])
    def test_rejected(self, value):
        with pytest.raises(UnknownRecordTypeError):
            coerce_record_type(value)


class TestSetupGuidance:
    def test_missing_dmarc_names_record_location(self):
        recs = get_recommendations("dmarc", None, "example.com")
        assert len(recs) >= 1
        assert "_dmarc.example.com" in recs[0]

    def test_blank_record_treated_as_missing(self):
        assert get_recommendations("dmarc", "   ", "example.com") == get_recommendations("dmarc", None, "example.com")

    def test_default_domain_placeholder(self):
        assert "_dmarc.yourdomain.com" in get_recommendations("dmarc", None)[0]

    def test_missing_spf(self):
        assert "No SPF record found" in get_recommendations("spf", None, "example.com")[0]

    def test_missing_dkim_mentions_selector(self):
        assert "selector" in get_recommendations("dkim", None)[0]


class TestDmarcRecommendations:
    def test_monitoring_policy_first(self):
        recs = get_recommendations("dmarc", "v=DMARC1; p=none; rua=mailto:a@example.com")
        assert "monitoring mode" in recs[0]

    def test_missing_rua_suggests_reporting(self):
        recs = get_recommendations("dmarc", "v=DMARC1; p=reject", "example.com")
        assert any("rua=mailto:dmarc@example.com" in r for r in recs)

    def test_partial_pct_suggests_raising(self):
        recs = get_recommendations("dmarc", "v=DMARC1; p=quarantine; pct=25; rua=mailto:a@example.com")
        assert any("25%" in r for r in recs)

    def test_full_quarantine_suggests_reject(self):
        recs = get_recommendations("dmarc", "v=DMARC1; p=quarantine; rua=mailto:a@example.com")
        assert any("p=reject" in r for r in recs)

    def test_hardened_record_only_suggests_forensics(self):
        recs = get_recommendations("dmarc", "v=DMARC1; p=reject; rua=mailto:a@example.com")
        assert len(recs) == 1
        assert "ruf=" in recs[0]

    def test_invalid_record(self):
        recs = get_recommendations("dmarc", "v=spf1 -all")
        assert recs == ["Your record is not a valid DMARC record. It must begin with v=DMARC1."]


class TestSpfRecommendations:
    def test_plus_all_first(self):
        recs = get_recommendations("spf", "v=spf1 +all")
        assert "+all" in recs[0]

    def test_plus_all_anywhere_comes_first(self):
        recs = get_recommendations("spf", "v=spf1 +all -all")
        assert "+all" in recs[0]

    def test_neutral_all_named_in_advice(self):
        recs = get_recommendations("spf", "v=spf1 mx ?all")
        assert any('instead of "?all"' in r for r in recs)

    def test_softfail_suggests_hardfail(self):
        recs = get_recommendations("spf", "v=spf1 include:_spf.google.com ~all")
        assert any('instead of "~all"' in r for r in recs)

    def test_hardfail_record_is_quiet(self):
        assert get_recommendations("spf", "v=spf1 ip4:192.0.2.0/24 -all") == []

    def test_missing_all(self):
        recs = get_recommendations("spf", "v=spf1 mx")
        assert any("End the record" in r for r in recs)

    def test_invalid_record(self):
        assert "not a valid SPF record" in get_recommendations("spf", "v=DMARC1; p=none")[0]


class TestDkimRecommendations:
    def test_revoked_key(self):
        assert "revoked" in get_recommendations("dkim", "v=DKIM1; p=")[0]

    def test_testing_mode(self):
        recs = get_recommendations("dkim", f"v=DKIM1; t=y; p={LONG_KEY}")
        assert any("t=y" in r for r in recs)

    def test_healthy_key_is_quiet(self):
        assert get_recommendations("dkim", f"v=DKIM1; k=rsa; p={LONG_KEY}") == []

"""Unit tests for field pseudonymization."""

import re
from datetime import UTC, datetime

from datacompliance.erasure import (
    PSEUDONYMIZED_NOTE,
    PseudonymizationMethod,
    PseudonymizationRule,
    Pseudonymizer,
    generate_pseudonym_key,
)

KEY_PATTERN = re.compile(r"^\d{8}-\d{6}-[A-Za-z0-9]{24}$")


class TestPseudonymKey:
    """Tests for replacement key generation."""

    def test_format(self):
        """Test the timestamp-prefixed format."""
        key = generate_pseudonym_key(datetime(2018, 4, 20, 10, 32, 0, tzinfo=UTC))

        assert KEY_PATTERN.match(key)
        assert key.startswith("20180420-103200-")

    def test_keys_are_unique(self):
        """Test that keys generated in the same second differ."""
        now = datetime(2026, 1, 1, tzinfo=UTC)

        keys = {generate_pseudonym_key(now) for _ in range(200)}

        assert len(keys) == 200


class TestPseudonymizer:
    """Tests for Pseudonymizer.apply."""

    def test_methods(self):
        """Test each method's replacement value."""
        pseudonymizer = Pseudonymizer(clock=lambda: datetime(2026, 3, 4, 5, 6, 7, tzinfo=UTC))
        data = {
            "city": "Springfield",
            "ip": "203.0.113.77",
            "processor_key": "PP-123",
            "params": {"nickname": "Jane"},
            "isbusiness": 1,
            "level": "PRO",
        }
        rules = [
            PseudonymizationRule.redact("city", "City Redacted"),
            *PseudonymizationRule.blank("ip"),
            PseudonymizationRule("processor_key", PseudonymizationMethod.PSEUDONYM_KEY),
            PseudonymizationRule("params", PseudonymizationMethod.EMPTY_MAPPING),
            *PseudonymizationRule.reset("isbusiness"),
        ]

        changes, result = pseudonymizer.apply(data, rules)

        assert changes["city"] == "City Redacted"
        assert changes["ip"] == ""
        assert changes["processor_key"].startswith("20260304-050607-")
        assert changes["params"] == {}
        assert changes["isbusiness"] == 0
        assert "level" not in changes
        assert result.fields_cleared == ["city", "ip", "processor_key", "params", "isbusiness"]
        assert result.methods_used["processor_key"] == "pseudonym_key"

    def test_missing_fields_skipped(self):
        """Test that rules for absent fields are ignored."""
        changes, result = Pseudonymizer().apply(
            {"notes": "hello"},
            [
                PseudonymizationRule.redact("notes", PSEUDONYMIZED_NOTE),
                *PseudonymizationRule.blank("ua"),
            ],
        )

        assert changes == {"notes": PSEUDONYMIZED_NOTE}
        assert result.fields_cleared == ["notes"]

    def test_input_not_modified(self):
        """Test that the input mapping is left untouched."""
        data = {"ip": "203.0.113.77"}

        Pseudonymizer().apply(data, PseudonymizationRule.blank("ip"))

        assert data == {"ip": "203.0.113.77"}

    def test_redaction_without_replacement_blanks(self):
        changes, _ = Pseudonymizer().apply(
            {"notes": "x"}, [PseudonymizationRule("notes", PseudonymizationMethod.REDACTION)]
        )

        assert changes == {"notes": ""}

    def test_detach_clears_owner_reference(self):
        """Test that detached fields become None and are reported as cleared."""
        changes, result = Pseudonymizer().apply(
            {"user_id": 42, "city": "Springfield"},
            [*PseudonymizationRule.detach("user_id"), PseudonymizationRule.redact("city", "X")],
        )

        assert changes == {"user_id": None, "city": "X"}
        assert result.fields_cleared == ["user_id", "city"]
        assert result.methods_used["user_id"] == "detach"

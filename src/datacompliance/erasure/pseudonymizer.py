"""Field-level pseudonymization of stored records.

A settled transaction cannot be deleted (it backs accounting records), so
its personal fields are overwritten in place instead. The Pseudonymizer
applies one rule per field and reports which fields it cleared.
"""

import secrets
import string
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from datacompliance.core.logging import get_logger

logger = get_logger(__name__)

PSEUDONYMIZED_NOTE = "This record has been pseudonymized per GDPR requirements"

KEY_ALPHABET = string.ascii_letters + string.digits
KEY_RANDOM_LENGTH = 24


class PseudonymizationMethod(str, Enum):
    """How a field is overwritten."""

    REDACTION = "redaction"
    """Replace with fixed replacement text."""

    BLANK = "blank"
    """Replace with an empty string."""

    PSEUDONYM_KEY = "pseudonym_key"
    """Replace with a timestamped random key (collision resistant)."""

    EMPTY_MAPPING = "empty_mapping"
    """Replace with an empty mapping."""

    RESET_FLAG = "reset_flag"
    """Reset a flag to 0."""

    DETACH = "detach"
    """Replace with NULL (owner references)."""


@dataclass(frozen=True)
class PseudonymizationRule:
    """Rule for overwriting a specific field."""

    field_name: str
    method: PseudonymizationMethod
    replacement: str | None = None
    """Replacement text (REDACTION only)."""

    @classmethod
    def redact(cls, field_name: str, replacement: str) -> "PseudonymizationRule":
        return cls(field_name, PseudonymizationMethod.REDACTION, replacement)

    @classmethod
    def blank(cls, *field_names: str) -> list["PseudonymizationRule"]:
        return [cls(name, PseudonymizationMethod.BLANK) for name in field_names]

    @classmethod
    def reset(cls, *field_names: str) -> list["PseudonymizationRule"]:
        return [cls(name, PseudonymizationMethod.RESET_FLAG) for name in field_names]

    @classmethod
    def detach(cls, *field_names: str) -> list["PseudonymizationRule"]:
        return [cls(name, PseudonymizationMethod.DETACH) for name in field_names]


@dataclass
class PseudonymizationResult:
    """Which fields were overwritten, and how."""

    fields_cleared: list[str] = field(default_factory=list)
    methods_used: dict[str, str] = field(default_factory=dict)


def generate_pseudonym_key(now: datetime | None = None) -> str:
    """Build a replacement key such as ``20180420-103200-dfawey2h24t2tnlwhfwngym0``.

    The UTC timestamp prefix records when the record was wiped; the random
    suffix keeps keys unique across records wiped in the same second.
    """
    now = now or datetime.now(UTC)
    suffix = "".join(secrets.choice(KEY_ALPHABET) for _ in range(KEY_RANDOM_LENGTH))
    return f"{now.astimezone(UTC):%Y%m%d-%H%M%S}-{suffix}"


class Pseudonymizer:
    """Applies pseudonymization rules to a record's column values.

    Usage:
        pseudonymizer = Pseudonymizer()
        changes, result = pseudonymizer.apply(
            row_values,
            [PseudonymizationRule.redact("city", "City Redacted"), *PseudonymizationRule.blank("ip")],
        )
    """

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or (lambda: datetime.now(UTC))

    def apply(
        self,
        data: Mapping[str, Any],
        rules: Iterable[PseudonymizationRule],
    ) -> tuple[dict[str, Any], PseudonymizationResult]:
        """Compute replacement values for the fields named by rules.

        Fields that do not exist in data are skipped. Fields that are not
        named by any rule are left out of the returned mapping.

        Args:
            data: Current column values
            rules: One rule per field to overwrite

        Returns:
            Tuple of (field -> replacement value, result)
        """
        result = PseudonymizationResult()
        changes: dict[str, Any] = {}

        for rule in rules:
            if rule.field_name not in data:
                continue
            changes[rule.field_name] = self._replacement(rule)
            result.fields_cleared.append(rule.field_name)
            result.methods_used[rule.field_name] = rule.method.value

        if result.fields_cleared:
            logger.debug("fields_pseudonymized", fields=result.fields_cleared)

        return changes, result

    def _replacement(self, rule: PseudonymizationRule) -> Any:
        method = rule.method

        if method == PseudonymizationMethod.REDACTION:
            return rule.replacement if rule.replacement is not None else ""
        elif method == PseudonymizationMethod.BLANK:
            return ""
        elif method == PseudonymizationMethod.PSEUDONYM_KEY:
            return generate_pseudonym_key(self._clock())
        elif method == PseudonymizationMethod.EMPTY_MAPPING:
            return {}
        elif method == PseudonymizationMethod.RESET_FLAG:
            return 0
        elif method == PseudonymizationMethod.DETACH:
            return None
        raise ValueError(f"Unsupported pseudonymization method: {method}")

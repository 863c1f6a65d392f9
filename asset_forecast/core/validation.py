"""
Boundary validation for override records and month keys.

The engines never raise and silently fall back to defaults. These checks
are meant for the ingestion/API layer, so that malformed or ambiguous
records are reported when they are stored instead of producing quietly
wrong forecasts later.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Union
import logging

from pydantic import ValidationError

from ..config.schema import ForecastOverride
from .months import parse_month_key
from .registry import PERCENTAGE_GROUPS

logger = logging.getLogger(__name__)

# Allowed distance of a group's total from 100%
SUM_TOLERANCE = 0.01


class OverrideValidationError(ValueError):
    """Raised when an override record cannot be decoded."""


@dataclass
class ValidationResult:
    """Result of a validation check."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> None:
        """Merge another validation result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        if not other.valid:
            self.valid = False

    def __str__(self) -> str:
        lines = ["Validation PASSED" if self.valid else "Validation FAILED"]
        if self.errors:
            lines.append(f"  Errors ({len(self.errors)}):")
            lines.extend(f"    - {err}" for err in self.errors)
        if self.warnings:
            lines.append(f"  Warnings ({len(self.warnings)}):")
            lines.extend(f"    - {warn}" for warn in self.warnings)
        return "\n".join(lines)


def parse_override(data: Union[ForecastOverride, Mapping[str, Any]]) -> ForecastOverride:
    """
    Decode an override record, failing loudly.

    Parameters
    ----------
    data : ForecastOverride | Mapping
        Stored or submitted override.

    Returns
    -------
    ForecastOverride
        Validated override.

    Raises
    ------
    OverrideValidationError
        If the record does not match the override schema.
    """
    if isinstance(data, ForecastOverride):
        return data
    try:
        return ForecastOverride.model_validate(data)
    except ValidationError as e:
        raise OverrideValidationError(f"Invalid forecast override: {e}") from e


def validate_month_key(month_key: Any) -> ValidationResult:
    """Check that a month key follows the 'May26' format."""
    result = ValidationResult(valid=True)
    if parse_month_key(month_key) is None:
        result.add_error(
            f"Month key '{month_key}' is not a month abbreviation followed by a 2-digit year (e.g. 'May26')"
        )
    return result


def validate_override(data: Union[ForecastOverride, Mapping[str, Any]]) -> ValidationResult:
    """
    Validate an override record and report likely misconfigurations.

    Errors: the record does not decode, or its month key is unreadable.
    Warnings: a group that does not sum to ~100%, unknown labels,
    negative percentages, and values of exactly 1 whose unit is
    ambiguous.
    """
    result = ValidationResult(valid=True)
    try:
        override = parse_override(data)
    except OverrideValidationError as e:
        result.add_error(str(e))
        return result

    if override.month_key is not None:
        result.merge(validate_month_key(override.month_key))

    for group, labels in PERCENTAGE_GROUPS.items():
        entries = override.group(group)
        if not entries:
            continue

        for entry in entries:
            unit = entry.unit or override.pct_unit
            if not entry.label:
                result.add_warning(f"{group}: entry without a label is ignored")
            elif entry.label not in labels:
                result.add_warning(f"{group}: unknown label '{entry.label}' added as an extra row")
            if entry.pct < 0:
                result.add_warning(f"{group}: '{entry.label}' has a negative percentage ({entry.pct})")
            if unit == "auto" and entry.pct == 1:
                result.add_warning(
                    f"{group}: '{entry.label}' is exactly 1, read as 100%; set pct_unit to be explicit"
                )

        total = sum(e.fraction(override.pct_unit) for e in entries if e.label)
        if abs(total - 1.0) > SUM_TOLERANCE:
            result.add_warning(f"{group}: percentages sum to {total:.2%}, expected 100%")

    creative = override.creative_budget_fraction()
    if creative is not None and not 0 <= creative <= 1:
        result.add_warning(f"creative_budget_pct resolves to {creative:.2%}, outside 0-100%")

    for use_case, boost in override.use_case_boost_json.items():
        if boost < 0:
            result.add_warning(f"use_case_boost: '{use_case}' has a negative boost ({boost})")

    if not result.valid or result.warnings:
        logger.info(
            f"Override validation: {len(result.errors)} error(s), {len(result.warnings)} warning(s)"
        )
    return result

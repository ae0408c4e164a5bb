"""
Data validation module.
Validates occupancy series before they reach the forecasting engine.
"""
import pandas as pd
import numpy as np
from dataclasses import dataclass, field
from typing import List, Dict, Any
from enum import Enum


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Series cannot be forecast
    WARNING = "warning"  # Series can be used but may have issues
    INFO = "info"        # Informational message


@dataclass
class ValidationIssue:
    """A single validation issue."""
    severity: ValidationSeverity
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    affected_rows: List[int] = field(default_factory=list)

    def __str__(self):
        return f"[{self.severity.value.upper()}] {self.message}"


@dataclass
class ValidationResult:
    """Result of a validation check."""
    is_valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def add_issue(
        self,
        severity: ValidationSeverity,
        code: str,
        message: str,
        details: Dict = None,
        affected_rows: List[int] = None
    ):
        """Add a validation issue."""
        self.issues.append(ValidationIssue(
            severity=severity,
            code=code,
            message=message,
            details=details or {},
            affected_rows=affected_rows or []
        ))

        if severity == ValidationSeverity.ERROR:
            self.is_valid = False


class SeriesValidator:
    """
    Validates an ordered (date, occupancy) series.

    Errors: empty series, unparseable dates, non-numeric or non-finite
    values, duplicate or non-increasing dates.
    Warnings: negative values, gaps between dates.
    """

    SHORT_SERIES_POINTS = 8

    def __init__(self):
        self.result = ValidationResult(is_valid=True)

    def validate(self, dates: pd.DatetimeIndex, values: np.ndarray) -> ValidationResult:
        """
        Validate a series given as parallel dates and values.

        Args:
            dates: Parsed dates (NaT marks unparseable entries)
            values: Numeric values (NaN marks non-numeric entries)

        Returns:
            ValidationResult with issues and summary
        """
        self.result = ValidationResult(is_valid=True)

        if len(values) == 0:
            self.result.add_issue(
                ValidationSeverity.ERROR,
                "SERIES_EMPTY",
                "The occupancy series is empty"
            )
            return self.result

        if len(dates) != len(values):
            self.result.add_issue(
                ValidationSeverity.ERROR,
                "LENGTH_MISMATCH",
                f"Got {len(dates)} dates for {len(values)} values"
            )
            return self.result

        self._validate_dates(pd.DatetimeIndex(dates))
        self._validate_values(np.asarray(values, dtype=float))

        if self.result.is_valid:
            self.result.summary = self._create_summary(pd.DatetimeIndex(dates), np.asarray(values, dtype=float))

        return self.result

    def _validate_dates(self, dates: pd.DatetimeIndex):
        """Dates must parse and be strictly increasing."""
        missing = np.flatnonzero(dates.isna())
        if len(missing) > 0:
            self.result.add_issue(
                ValidationSeverity.ERROR,
                "INVALID_DATES",
                f"Found {len(missing)} dates that could not be parsed",
                affected_rows=missing.tolist()[:10]
            )
            return

        # Points are calendar days: two timestamps on the same day collide
        steps = pd.Series(dates.normalize()).diff()

        duplicated = np.flatnonzero(dates.normalize().duplicated())
        if len(duplicated) > 0:
            self.result.add_issue(
                ValidationSeverity.ERROR,
                "DUPLICATE_DATES",
                f"Found {len(duplicated)} duplicate dates",
                affected_rows=duplicated.tolist()[:10]
            )

        decreasing = np.flatnonzero((steps < pd.Timedelta(0)).to_numpy())
        if len(decreasing) > 0:
            self.result.add_issue(
                ValidationSeverity.ERROR,
                "NON_INCREASING_DATES",
                "Dates must be strictly increasing",
                affected_rows=decreasing.tolist()[:10]
            )
            return

        # Gaps are tolerated
        gaps = np.flatnonzero((steps > pd.Timedelta(days=1)).to_numpy())
        if len(gaps) > 0:
            self.result.add_issue(
                ValidationSeverity.WARNING,
                "DATE_GAPS",
                f"Found {len(gaps)} gaps between consecutive dates",
                affected_rows=gaps.tolist()[:10]
            )

    def _validate_values(self, values: np.ndarray):
        """Values must be finite numbers; negatives are flagged only."""
        non_finite = np.flatnonzero(~np.isfinite(values))
        if len(non_finite) > 0:
            self.result.add_issue(
                ValidationSeverity.ERROR,
                "NON_FINITE_VALUES",
                f"Found {len(non_finite)} missing or non-numeric values",
                affected_rows=non_finite.tolist()[:10]
            )
            return

        negative = np.flatnonzero(values < 0)
        if len(negative) > 0:
            self.result.add_issue(
                ValidationSeverity.WARNING,
                "NEGATIVE_VALUES",
                f"Found {len(negative)} negative occupancy values",
                details={"min_value": float(values.min())},
                affected_rows=negative.tolist()[:10]
            )

        if len(values) < self.SHORT_SERIES_POINTS:
            self.result.add_issue(
                ValidationSeverity.INFO,
                "SHORT_SERIES",
                f"Only {len(values)} observations; exponential smoothing will be used"
            )

    def _create_summary(self, dates: pd.DatetimeIndex, values: np.ndarray) -> Dict[str, Any]:
        """Create validation summary."""
        return {
            "observations": int(len(values)),
            "start_date": dates.min().date().isoformat(),
            "end_date": dates.max().date().isoformat(),
            "mean": float(values.mean()),
            "min": float(values.min()),
            "max": float(values.max()),
        }


def validate_series(dates: pd.DatetimeIndex, values: np.ndarray) -> ValidationResult:
    """Convenience function to validate a series."""
    return SeriesValidator().validate(dates, values)

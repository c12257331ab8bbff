# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade derivation: marks to letter grade and grade point.

The mapping is a single ordered table of descending marks cutoffs. Grade
creation, grade revision and transcript entry construction all derive through
``GradingScale.derive`` so they can never disagree.

The default table is a 10-point scale. An institution can replace it with a
YAML file referenced by ``GRADING_SCALE_FILE``:

    bands:
      - {min_marks: 85, letter: "A", point: 4.0}
      - {min_marks: 70, letter: "B", point: 3.0}
      - {min_marks: 0, letter: "F", point: 0.0}
"""

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

from edurecords.core.config import get_settings, load_yaml
from edurecords.domains.ledger.errors import InvalidMarksError

logger = logging.getLogger(__name__)

MIN_MARKS = 0.0
MAX_MARKS = 100.0


@dataclass(frozen=True)
class GradeBand:
    """One row of the grading table.

    Attributes:
        min_marks: Inclusive lower cutoff.
        letter: Letter grade awarded at or above the cutoff.
        point: Grade point awarded at or above the cutoff.
    """

    min_marks: float
    letter: str
    point: float


@dataclass(frozen=True)
class DerivedGrade:
    """Letter grade and grade point for a marks value."""

    letter_grade: str
    grade_point: float


DEFAULT_GRADE_BANDS: tuple[GradeBand, ...] = (
    GradeBand(min_marks=90, letter="A", point=10.0),
    GradeBand(min_marks=80, letter="B", point=9.0),
    GradeBand(min_marks=70, letter="C", point=8.0),
    GradeBand(min_marks=60, letter="D", point=7.0),
    GradeBand(min_marks=50, letter="E", point=6.0),
    GradeBand(min_marks=40, letter="P", point=5.0),
    GradeBand(min_marks=0, letter="F", point=0.0),
)


def validate_marks(marks: float) -> float:
    """Check marks are a finite number within 0-100.

    Args:
        marks: Marks obtained.

    Returns:
        Marks as float.

    Raises:
        InvalidMarksError: If marks are not a number or out of range.
    """
    if isinstance(marks, bool) or not isinstance(marks, (int, float)):
        raise InvalidMarksError(f"Marks must be a number, got {marks!r}")

    value = float(marks)
    if math.isnan(value) or not MIN_MARKS <= value <= MAX_MARKS:
        raise InvalidMarksError(
            f"Marks must be between {MIN_MARKS:g} and {MAX_MARKS:g}, got {marks}"
        )
    return value


class GradingScale:
    """Ordered marks-to-grade lookup table.

    Bands must have strictly descending cutoffs and the last band must start
    at 0 so every valid marks value maps to exactly one band.
    """

    def __init__(self, bands: Iterable[GradeBand]) -> None:
        self.bands: tuple[GradeBand, ...] = tuple(bands)
        self._validate()

    def _validate(self) -> None:
        if not self.bands:
            raise ValueError("Grading scale needs at least one band")

        cutoffs = [band.min_marks for band in self.bands]
        if any(later >= earlier for earlier, later in zip(cutoffs, cutoffs[1:])):
            raise ValueError(f"Grading cutoffs must be strictly descending: {cutoffs}")

        if cutoffs[-1] != MIN_MARKS:
            raise ValueError("Lowest grading band must start at 0 marks")

        if cutoffs[0] > MAX_MARKS:
            raise ValueError("Grading cutoffs cannot exceed 100 marks")

    def derive(self, marks: float) -> DerivedGrade:
        """Map marks to a letter grade and grade point.

        Args:
            marks: Marks obtained, 0-100.

        Returns:
            Derived letter grade and grade point.

        Raises:
            InvalidMarksError: If marks are out of range.
        """
        value = validate_marks(marks)
        for band in self.bands:
            if value >= band.min_marks:
                return DerivedGrade(letter_grade=band.letter, grade_point=band.point)

        # Unreachable: the last band starts at 0.
        raise InvalidMarksError(f"No grading band for marks {marks}")

    @property
    def max_grade_point(self) -> float:
        """Highest grade point on the scale."""
        return max(band.point for band in self.bands)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "GradingScale":
        """Build a scale from a parsed configuration mapping.

        Args:
            data: Mapping with a ``bands`` list of
                ``{min_marks, letter, point}`` items.

        Returns:
            GradingScale instance.

        Raises:
            ValueError: If the mapping is malformed.
        """
        raw_bands = data.get("bands")
        if not isinstance(raw_bands, list):
            raise ValueError("Grading scale file must define a 'bands' list")

        try:
            bands = [
                GradeBand(
                    min_marks=float(item["min_marks"]),
                    letter=str(item["letter"]),
                    point=float(item["point"]),
                )
                for item in raw_bands
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid grading band: {e}") from e

        return cls(bands)


DEFAULT_GRADING_SCALE = GradingScale(DEFAULT_GRADE_BANDS)


def load_grading_scale(path: Path | None) -> GradingScale:
    """Load a grading scale from YAML, or return the default scale.

    Args:
        path: Optional YAML file path.

    Returns:
        GradingScale instance.
    """
    if path is None:
        return DEFAULT_GRADING_SCALE

    scale = GradingScale.from_mapping(load_yaml(path))
    logger.info("Loaded grading scale from %s (%d bands)", path, len(scale.bands))
    return scale


@lru_cache(maxsize=1)
def get_grading_scale() -> GradingScale:
    """Get the configured grading scale (cached)."""
    return load_grading_scale(get_settings().ledger.grading_scale_file)


def derive_grade(marks: float, scale: GradingScale | None = None) -> DerivedGrade:
    """Derive letter grade and grade point with the configured scale.

    Args:
        marks: Marks obtained, 0-100.
        scale: Optional scale override.

    Returns:
        Derived letter grade and grade point.
    """
    return (scale or get_grading_scale()).derive(marks)

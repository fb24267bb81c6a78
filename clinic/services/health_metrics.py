"""
BMI computation, classification and trend analysis.

Every function here is pure and total: bad numeric input degrades to a
defined sentinel (``0.0`` for BMI, ``Trend.UNKNOWN`` for trends) instead
of raising.  Certificates, the dashboard and the health-metrics endpoints
all classify through this module so the 18.5/25/30 thresholds live in
exactly one place.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional, Union

INVALID_BMI = 0.0

UNDERWEIGHT_BELOW = 18.5
NORMAL_BELOW = 25.0
OVERWEIGHT_BELOW = 30.0

# Changes smaller than this between two readings count as noise.
TREND_STABLE_BAND = 0.5


class BmiCategory(Enum):
    UNDERWEIGHT = 'underweight'
    NORMAL = 'normal'
    OVERWEIGHT = 'overweight'
    OBESE = 'obese'

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    BmiCategory.UNDERWEIGHT: 'Underweight',
    BmiCategory.NORMAL: 'Normal weight',
    BmiCategory.OVERWEIGHT: 'Overweight',
    BmiCategory.OBESE: 'Obesity',
}


class ColorToken(Enum):
    BLUE = 'blue'
    GREEN = 'green'
    YELLOW = 'yellow'
    RED = 'red'
    GRAY = 'gray'


class Trend(Enum):
    INCREASING = 'increasing'
    DECREASING = 'decreasing'
    STABLE = 'stable'
    UNKNOWN = 'unknown'

    @property
    def icon(self) -> str:
        return _TREND_ICONS[self]


_TREND_ICONS = {
    Trend.INCREASING: 'arrow-up',
    Trend.DECREASING: 'arrow-down',
    Trend.STABLE: 'arrow-right',
    Trend.UNKNOWN: 'help-circle',
}

_CATEGORY_COLORS = {
    BmiCategory.UNDERWEIGHT: ColorToken.BLUE,
    BmiCategory.NORMAL: ColorToken.GREEN,
    BmiCategory.OVERWEIGHT: ColorToken.YELLOW,
    BmiCategory.OBESE: ColorToken.RED,
}


@dataclass(frozen=True)
class MedicalRecordSnapshot:
    """The slice of a medical record needed for trend analysis."""
    date: Union[date, datetime]
    bmi: float


def _is_positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def compute_bmi(height_cm: float, weight_kg: float) -> float:
    """Return ``weight / (height in metres)**2``.

    Returns :data:`INVALID_BMI` unless both inputs are finite and strictly
    positive.  The result is not rounded; storage and display layers round
    as they need.
    """
    if not (_is_positive(height_cm) and _is_positive(weight_kg)):
        return INVALID_BMI
    height_m = height_cm / 100
    return weight_kg / (height_m ** 2)


def is_valid_bmi(bmi: float) -> bool:
    return _is_positive(bmi)


def classify_bmi(bmi: float) -> BmiCategory:
    """Map a BMI onto its category using half-open intervals.

    The invalid sentinel (and any negative value) lands in
    ``UNDERWEIGHT``; callers showing a category must check
    :func:`is_valid_bmi` first and display "N/A" instead.
    """
    if bmi < UNDERWEIGHT_BELOW:
        return BmiCategory.UNDERWEIGHT
    if bmi < NORMAL_BELOW:
        return BmiCategory.NORMAL
    if bmi < OVERWEIGHT_BELOW:
        return BmiCategory.OVERWEIGHT
    return BmiCategory.OBESE


def category_color(bmi: float) -> ColorToken:
    return _CATEGORY_COLORS[classify_bmi(bmi)]


def compute_trend(snapshots: Iterable[MedicalRecordSnapshot]) -> Trend:
    """Direction of change between the two most recent snapshots.

    Snapshots sharing a date keep their input order (``sorted`` is stable,
    including with ``reverse=True``).
    """
    ordered = sorted(snapshots, key=lambda s: s.date, reverse=True)
    if len(ordered) < 2:
        return Trend.UNKNOWN
    difference = ordered[0].bmi - ordered[1].bmi
    if abs(difference) < TREND_STABLE_BAND:
        return Trend.STABLE
    if difference > 0:
        return Trend.INCREASING
    return Trend.DECREASING


def trend_display_color(trend: Trend, bmi: float) -> ColorToken:
    """Colour a trend by whether it moves the subject toward a healthy BMI.

    Gaining is good when underweight, holding steady is good when normal,
    losing is good when overweight or obese.
    """
    if trend is Trend.UNKNOWN:
        return ColorToken.GRAY
    category = classify_bmi(bmi)
    if category is BmiCategory.UNDERWEIGHT:
        return ColorToken.GREEN if trend is Trend.INCREASING else ColorToken.RED
    if category is BmiCategory.NORMAL:
        return ColorToken.GREEN if trend is Trend.STABLE else ColorToken.YELLOW
    return ColorToken.GREEN if trend is Trend.DECREASING else ColorToken.RED


def trend_icon(trend: Trend) -> str:
    return trend.icon


def describe_bmi(bmi: float, *, digits: Optional[int] = None) -> dict:
    """JSON-ready view of a BMI; category and colour are ``None`` for the sentinel."""
    if not is_valid_bmi(bmi):
        return {'bmi': INVALID_BMI, 'valid': False, 'category': None, 'categoryLabel': None, 'color': None}
    category = classify_bmi(bmi)
    return {
        'bmi': round(bmi, digits) if digits is not None else bmi,
        'valid': True,
        'category': category.value,
        'categoryLabel': category.label,
        'color': category_color(bmi).value,
    }


def summarize(height_cm: float, weight_kg: float, *, digits: Optional[int] = None) -> dict:
    return describe_bmi(compute_bmi(height_cm, weight_kg), digits=digits)

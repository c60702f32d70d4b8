from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional

SUCCESS_COLOR = "#22C55E"
WARNING_COLOR = "#FACC15"
DANGER_COLOR = "#EF4444"

RATING_POINTS = {"1": 1.0, "2": 0.5}
RATING_LABELS = {"1": "Fully Met", "2": "Partially Met", "3": "Not Met"}
MAX_CRITERIA_SCORE = 4

MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Tried in order after ISO parsing fails; slash dates are US month/day.
# "%Y-%m-%d" catches unpadded dashed dates such as 2025-8-5.
FALLBACK_DATE_FORMATS = (
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%Y-%m-%d",
)


def color_for_rating(value: str) -> str:
    if value == "1":
        return SUCCESS_COLOR
    if value == "2":
        return WARNING_COLOR
    return DANGER_COLOR


def points_for(value: str) -> float:
    return RATING_POINTS.get(value, 0.0)


def criteria_score(ratings: Iterable[str]) -> float:
    return sum(points_for(value) for value in ratings)


def format_criteria_score(score: float) -> str:
    if float(score).is_integer():
        return f"{int(score)}/{MAX_CRITERIA_SCORE}"
    return f"{score:.1f}/{MAX_CRITERIA_SCORE}"


def parse_report_date(value: str) -> Optional[date]:
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text) if len(text) == 10 else _parse_iso_datetime(text)
    except ValueError:
        pass
    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _parse_iso_datetime(text: str) -> date:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).date()


def format_date_dd_mmm_yyyy(value: str) -> str:
    """Format a report date as ``05 Aug 2025``; empty or unparseable input gives ``""``."""
    parsed = parse_report_date(value)
    if parsed is None:
        return ""
    return f"{parsed.day:02d} {MONTH_ABBREVIATIONS[parsed.month - 1]} {parsed.year:04d}"

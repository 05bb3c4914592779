"""
Granularity Classifier — Map a range's span to a bucket size class.

The span is an approximate calendar decomposition (years*365 + months*30 +
days) rather than an exact day count, so bucket sizes stay stable across
month-length variation.
"""

from __future__ import annotations

import logging
from enum import Enum

from dateutil.relativedelta import relativedelta

from chartboard.services.charts.ranges import DateRange, require_range

logger = logging.getLogger(__name__)

WEEK_THRESHOLD_DAYS = 7
MONTH_THRESHOLD_DAYS = 30


class Granularity(str, Enum):
    """Bucket width class."""

    DAYS = "DAYS"
    WEEKS = "WEEKS"
    MONTHS = "MONTHS"


def approximate_day_count(date_range: DateRange) -> int:
    """Calendar-decomposed span of a range in approximate days."""
    date_range = require_range(date_range)
    span = relativedelta(date_range.end, date_range.start)
    return span.years * 365 + span.months * 30 + span.days


def classify(date_range: DateRange) -> Granularity:
    """Pick the bucket granularity for a primary range."""
    days = approximate_day_count(date_range)
    if days < WEEK_THRESHOLD_DAYS:
        granularity = Granularity.DAYS
    elif days < MONTH_THRESHOLD_DAYS:
        granularity = Granularity.WEEKS
    else:
        granularity = Granularity.MONTHS
    logger.debug("Classified %d-day span as %s", days, granularity.value)
    return granularity

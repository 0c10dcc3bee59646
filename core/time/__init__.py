"""
Yardbook Core Time — Public API
================================
Explicit clock protocol and business-day helpers.
Doctrine: NO datetime.now() in engine logic.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    now_utc,
    parse_iso,
    set_default_clock,
    to_iso,
)
from core.time.temporal import (
    business_days_between,
    is_business_day,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "set_default_clock",
    "now_utc",
    "parse_iso",
    "to_iso",
    "business_days_between",
    "is_business_day",
]

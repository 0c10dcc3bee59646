"""
Yardbook Core Config — Public API
==================================
Engine tunables, read from Django settings or passed explicitly.
"""

from core.config.rules import DEFAULT_RULES, LedgerRules

__all__ = [
    "DEFAULT_RULES",
    "LedgerRules",
]

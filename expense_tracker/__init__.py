"""
Expense Tracker - Core Package

The non-UI core of a personal expense tracker: record models,
spending aggregation, the owner-scoped remote store adapter and
the one-shot import of data cached on a device before sign-in.

DESIGN PRINCIPLES:
1. Records are validated when they are built, never at the store
2. Aggregation is pure: same records + same "now" = same numbers
3. Every expense belongs to exactly one owner
4. Failures are surfaced, never silently defaulted
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"

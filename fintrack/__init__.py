"""
FinTrack - Source Package

A personal finance tracker: transactions recorded per user behind a
session, a budget split across categories by percentage, and savings
goals with progress.

DESIGN PRINCIPLES:
1. The owner of a record is the session user, never the request body
2. Fail early, fail visibly
3. No silent corrections
4. Every change must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FinTrack Team"

"""
Expense Ledger - Source Package

A small personal finance ledger: dated income and expense entries,
per-category monthly budgets, and a flat CSV store that is rewritten
on every change.

DESIGN PRINCIPLES:
1. Money is exact decimal, never float
2. Every mutation is persisted immediately
3. Bad input is rejected loudly, never silently corrected
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Ledger Team"

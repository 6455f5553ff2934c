"""
Budget Tracker - Source Package

A personal finance ledger: record income and expenses, keep a running
balance, and export the history to a spreadsheet.

DESIGN PRINCIPLES:
1. The ledger is an explicit object, never ambient state
2. Every mutation is written through to storage immediately
3. Bad input is rejected loudly, corrupt storage is recovered quietly
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Budget Tracker Team"

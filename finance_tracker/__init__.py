"""
Finance Tracker - Source Package

A personal finance tracker that records income and expenses, shows them
by month and projects the current month.

DESIGN PRINCIPLES:
1. The remote store is authoritative whenever it is reachable
2. The app keeps working offline; a remote fault never fails a mutation
3. The local cache always mirrors what the user sees
4. Storage backends are swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"

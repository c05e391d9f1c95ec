"""
LifeLedger - Source Package

A personal habit and finance tracker. Users log daily habit progress,
record income and expenses, and see derived statistics computed from
their own records only.

DESIGN PRINCIPLES:
1. Every record belongs to exactly one user
2. Statistics are pure functions of the stored records
3. No current user means empty reads and no-op writes
4. External services fail visibly, never fatally
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "LifeLedger Team"

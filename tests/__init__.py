"""
Test suite for clmsr-vault-core

Contains:
- tests/unit/          : Unit tests for fixed-point math, market tree, pricing,
                         fee waterfall and capital ledger
"""

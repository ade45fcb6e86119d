"""
Core domain models, fixed-point primitives, and JSON contracts.

This module contains the foundational building blocks shared by the market
tree (src.tree) and the vault (src.vault).
"""

"""Document collection engine.

This package maps a flat key-value store onto named collections of
identified records with filtering, sorting, and grouping.
"""

"""Key-value storage layer.

This package provides the string-keyed store capability and the codec
that turns record values into the store's string representation.
"""

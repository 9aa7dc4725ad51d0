"""Data models and translation functions.

This package contains:
- types: Data model (addresses, commands, status replies, resource codes)
- translator: Bulb command <-> hub JSON translation
- utils: Utility functions (fuzzy matching, display helpers)
"""

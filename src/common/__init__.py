"""
Common utilities for the subscription tracker state layer.

Modules:
- errors: error taxonomy shared by the path resolver and the state store
- paths: resolution of the per-app data directory and data file path
"""

__all__ = [
    "errors",
    "paths",
]

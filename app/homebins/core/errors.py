"""Common exception base for homebins.

Each core module defines its own exceptions on top of HomebinsError, so
callers processing many manifests can isolate failures with a single
except clause.
"""


class HomebinsError(Exception):
    """Base exception for all homebins errors."""

"""
Store error raised by every repository on persistence failure.
"""


class StoreError(Exception):
    """A load, save or delete against the store failed. The operation can be retried by the caller."""

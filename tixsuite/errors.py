"""
Design (errors.py)
- Purpose: Error types raised by the ledger, codec, reports and scanner.
- Every error is local and recoverable; the UI turns them into a toast.
"""


class TixError(Exception):
    """Base class for all errors raised by tixsuite."""


class ValidationError(TixError):
    """Input rejected before any mutation (bad count, empty prefix, empty manual entry...)."""


class DecodeError(TixError):
    """Malformed import document or QR payload. The ledger is left untouched."""


class ScannerUnavailable(TixError):
    """No capture device could be found or opened."""

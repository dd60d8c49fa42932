# app/domain/errors.py
from __future__ import annotations


class InvalidSearchCriteria(ValueError):
    """Search input that cannot be ranked (e.g. no goals selected)."""


class WeightValidationError(ValueError):
    """A candidate weight set that violates the five-signal/sum-to-100 invariant."""


class AuditWriteError(RuntimeError):
    """An audit append failed after the change it describes was committed."""

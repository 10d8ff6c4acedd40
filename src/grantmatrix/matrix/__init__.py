"""
Authorization matrix engine for grantmatrix.

This package holds the pure core of grantmatrix:
    - translator: ID-space <-> name-space conversion of records
    - builder: the AuthorizationMatrix index and is_granted queries
    - validator: referential integrity and wildcard exclusivity checks

Nothing in this package performs I/O, logs, or keeps state between calls.
Directory snapshots and allow-lists are passed in by the caller, so the
functions are safe to call concurrently with different inputs.
"""

from grantmatrix.matrix.builder import (
    UNSCOPED,
    AuthorizationMatrix,
    build_matrix,
    is_granted,
)
from grantmatrix.matrix.translator import count_dropped, translate_to_ids, translate_to_names
from grantmatrix.matrix.validator import ensure_valid, validate

__all__ = [
    "UNSCOPED",
    "AuthorizationMatrix",
    "build_matrix",
    "count_dropped",
    "ensure_valid",
    "is_granted",
    "translate_to_ids",
    "translate_to_names",
    "validate",
]

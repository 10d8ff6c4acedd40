"""
grantmatrix - Authorization-matrix engine for realm-scoped group grants.

grantmatrix records which group, in which realm, may perform which action
against which target realm/group. It provides:
- Translation of rule sets between group IDs and group display names
- Validation against an allow-list (referential integrity, wildcard exclusivity)
- A read-optimized matrix answering "is this tuple granted?"
- Directory adapters to fetch realm groups from an identity provider

Example usage:
    $ grantmatrix validate rules.yaml --allow allowed.yaml
    $ grantmatrix translate rules.yaml --directory directory.yaml --to names --realm R1
    $ grantmatrix check rules.yaml g1 read --target-realm R1 --target-group G1
"""

__version__ = "0.1.0"
__author__ = "grantmatrix Contributors"

from grantmatrix.matrix import (
    AuthorizationMatrix,
    build_matrix,
    ensure_valid,
    is_granted,
    translate_to_ids,
    translate_to_names,
    validate,
)
from grantmatrix.schema import WILDCARD, Authorization, GroupAuthorizations

__all__ = [
    "__version__",
    "__author__",
    "WILDCARD",
    "Authorization",
    "AuthorizationMatrix",
    "GroupAuthorizations",
    "build_matrix",
    "ensure_valid",
    "is_granted",
    "translate_to_ids",
    "translate_to_names",
    "validate",
]

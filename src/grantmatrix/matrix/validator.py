"""
Rule set validation.

Checks run in a fixed order and the first failure wins:

    1. Pairing: a target group requires a target realm
    2. Target realm is in the allow-list
    3. Target group is allowed within its target realm
    4. (build the matrix)
    5. "*" target realm is alone in its (group, action) bucket
    6. "*" target group is alone in its (group, action, target realm) bucket

Each step is checked across all records before the next one starts, so the
reported error does not depend on where in the list problems of different
kinds happen to sit.
"""

from typing import Callable, Collection, Iterable, Mapping

from grantmatrix.errors import (
    AmbiguousWildcardGroupError,
    AmbiguousWildcardRealmError,
    AuthorizationValidationError,
    InvalidTargetGroupError,
    InvalidTargetRealmError,
    MissingTargetRealmError,
)
from grantmatrix.matrix.builder import UNSCOPED, build_matrix
from grantmatrix.schema import WILDCARD, Authorization

AllowedTargets = Mapping[str, Collection[str]]


def validate(
    records: Iterable[Authorization],
    allowed_targets: AllowedTargets,
) -> AuthorizationValidationError | None:
    """
    Validate a rule set against an allow-list.

    Args:
        records: Records in ID-space, in submission order
        allowed_targets: target realm ID -> allowed target group IDs

    Returns:
        The first violation found, or None when the rule set is valid
    """
    records = list(records)

    for index, record in enumerate(records):
        if record.target_group_id is not None and record.target_realm_id is None:
            return MissingTargetRealmError(record=record, record_index=index)

    for index, record in enumerate(records):
        if record.target_realm_id is not None and record.target_realm_id not in allowed_targets:
            return InvalidTargetRealmError(record=record, record_index=index)

    for index, record in enumerate(records):
        if record.target_group_id is None:
            continue
        if record.target_group_id not in allowed_targets[record.target_realm_id]:
            return InvalidTargetGroupError(record=record, record_index=index)

    matrix = build_matrix(records)

    for (group_id, action), realms in matrix.buckets():
        scoped = [realm for realm in realms if realm is not UNSCOPED]
        if WILDCARD in scoped and len(scoped) != 1:
            index = _first_index(
                records,
                lambda r: r.group_id == group_id
                and r.action == action
                and r.target_realm_id not in (UNSCOPED, WILDCARD),
            )
            return AmbiguousWildcardRealmError(
                record=records[index],
                record_index=index,
                group_id=group_id,
                action=action,
            )

    for (group_id, action), realms in matrix.buckets():
        for realm, groups in realms.items():
            scoped = [group for group in groups if group is not UNSCOPED]
            if WILDCARD in scoped and len(scoped) != 1:
                index = _first_index(
                    records,
                    lambda r: r.group_id == group_id
                    and r.action == action
                    and r.target_realm_id == realm
                    and r.target_group_id not in (UNSCOPED, WILDCARD),
                )
                return AmbiguousWildcardGroupError(
                    record=records[index],
                    record_index=index,
                    group_id=group_id,
                    action=action,
                    target_realm_id=realm,
                )

    return None


def ensure_valid(
    records: Iterable[Authorization],
    allowed_targets: AllowedTargets,
) -> None:
    """
    Raise the first violation instead of returning it.

    Raises:
        AuthorizationValidationError: If the rule set is invalid
    """
    error = validate(records, allowed_targets)
    if error is not None:
        raise error


def _first_index(
    records: list[Authorization],
    predicate: Callable[[Authorization], bool],
) -> int:
    return next(index for index, record in enumerate(records) if predicate(record))

"""
Translation of authorization records between ID-space and name-space.

Stored and enforced rules reference target groups by opaque ID; the
administrator edits them by display name. Both directions are pure
functions over a list of records and a lookup table supplied by the caller.

Translation never fails. A record whose target group cannot be resolved is
treated as a stale reference and dropped from the output; strict checking
belongs to the validator. Callers that need to report drops can compare
counts with ``count_dropped``.
"""

from typing import Iterable, Mapping

from grantmatrix.schema import WILDCARD, Authorization


def translate_to_names(
    records: Iterable[Authorization],
    names_by_id: Mapping[str, str],
) -> list[Authorization]:
    """
    Replace target group IDs with group names.

    Args:
        records: Records in ID-space
        names_by_id: group ID -> group name for the realm being presented.
            The "*" -> "*" sentinel is always added.

    Returns:
        Records in name-space, in input order. Records without a target
        group are copied unchanged; records whose target group is unknown
        are omitted.
    """
    lookup = dict(names_by_id)
    lookup[WILDCARD] = WILDCARD

    translated = []
    for record in records:
        if record.target_group_id is None:
            translated.append(record)
            continue

        name = lookup.get(record.target_group_id)
        if name is None:
            continue

        translated.append(record.with_target_group(name))

    return translated


def translate_to_ids(
    records: Iterable[Authorization],
    mapper: Mapping[str, Mapping[str, str]],
) -> list[Authorization]:
    """
    Replace target group names with group IDs.

    The group is only resolved when both target realm and target group are
    set. Otherwise the target group of the output record is cleared, even
    if it held a value. The target realm is never translated.

    Args:
        records: Records in name-space
        mapper: target realm ID -> (group name -> group ID)

    Returns:
        Records in ID-space, in input order, without unresolvable records.
    """
    translated = []
    for record in records:
        if record.target_realm_id is None or record.target_group_id is None:
            if record.target_group_id is None:
                translated.append(record)
            else:
                translated.append(record.with_target_group(None))
            continue

        group_id = mapper.get(record.target_realm_id, {}).get(record.target_group_id)
        if group_id is None:
            continue

        translated.append(record.with_target_group(group_id))

    return translated


def count_dropped(before: Iterable[Authorization], after: Iterable[Authorization]) -> int:
    """Number of records a translation dropped."""
    return len(list(before)) - len(list(after))

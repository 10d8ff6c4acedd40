"""
Authorization matrix: a read-optimized index of grants.

The matrix is keyed ``(group_id, action) -> target realm -> {target group}``.
A missing target realm (unscoped grant) is stored under ``UNSCOPED``, which
is distinct from every realm value including the wildcard. The same holds
for a missing target group within a realm.

The matrix is rebuilt from a rule set on demand and never persisted.
"""

from typing import Iterable, Iterator

from grantmatrix.schema import WILDCARD, Authorization

# Key used for an absent target realm or target group
UNSCOPED = None

BucketKey = tuple[str, str]
RealmKey = str | None
GroupKey = str | None


class AuthorizationMatrix:
    """
    Set-like index of grants.

    Usage:
        matrix = build_matrix(records)
        if matrix.is_granted("g1", "read", "R1", "G1"):
            ...

    Iteration order follows first insertion, so building from the same
    record list always yields the same traversal.
    """

    def __init__(self) -> None:
        self._buckets: dict[BucketKey, dict[RealmKey, set[GroupKey]]] = {}

    def grant(
        self,
        group_id: str,
        action: str,
        target_realm_id: str | None = UNSCOPED,
        target_group_id: str | None = UNSCOPED,
    ) -> None:
        """Record a grant. Granting the same tuple twice is a no-op."""
        realms = self._buckets.setdefault((group_id, action), {})
        realms.setdefault(target_realm_id, set()).add(target_group_id)

    def buckets(self) -> Iterator[tuple[BucketKey, dict[RealmKey, set[GroupKey]]]]:
        """Iterate over ``((group_id, action), realms)`` pairs."""
        for key, realms in self._buckets.items():
            yield key, {realm: set(groups) for realm, groups in realms.items()}

    def realms(self, group_id: str, action: str) -> dict[RealmKey, set[GroupKey]]:
        """Target realms (and their groups) granted to a group for an action."""
        realms = self._buckets.get((group_id, action), {})
        return {realm: set(groups) for realm, groups in realms.items()}

    def entries(self) -> Iterator[tuple[str, str, RealmKey, GroupKey]]:
        """Iterate over every ``(group_id, action, target_realm, target_group)``."""
        for (group_id, action), realms in self._buckets.items():
            for realm, groups in realms.items():
                for group in groups:
                    yield (group_id, action, realm, group)

    def is_granted(
        self,
        group_id: str,
        action: str,
        target_realm_id: str | None = UNSCOPED,
        target_group_id: str | None = UNSCOPED,
    ) -> bool:
        """
        Check whether a query tuple is covered by a stored grant.

        A stored "*" matches any concrete query value in its position. An
        absent stored value only matches an absent query value.
        """
        realms = self._buckets.get((group_id, action))
        if not realms:
            return False

        for realm in _candidates(target_realm_id):
            groups = realms.get(realm)
            if groups is None:
                continue
            for group in _candidates(target_group_id):
                if group in groups:
                    return True

        return False

    def __contains__(self, entry: object) -> bool:
        if not isinstance(entry, tuple) or len(entry) != 4:
            return False
        group_id, action, realm, group = entry
        return group in self._buckets.get((group_id, action), {}).get(realm, set())

    def __len__(self) -> int:
        return sum(1 for _ in self.entries())

    def __repr__(self) -> str:
        return f"<AuthorizationMatrix: {len(self._buckets)} buckets, {len(self)} grants>"


def _candidates(value: str | None) -> tuple[str | None, ...]:
    if value is None:
        return (UNSCOPED,)
    if value == WILDCARD:
        return (WILDCARD,)
    return (value, WILDCARD)


def build_matrix(records: Iterable[Authorization]) -> AuthorizationMatrix:
    """Fold authorization records into a matrix. Duplicates collapse."""
    matrix = AuthorizationMatrix()
    for record in records:
        matrix.grant(
            record.group_id,
            record.action,
            record.target_realm_id,
            record.target_group_id,
        )
    return matrix


def is_granted(
    matrix: AuthorizationMatrix,
    group_id: str,
    action: str,
    target_realm_id: str | None = UNSCOPED,
    target_group_id: str | None = UNSCOPED,
) -> bool:
    """Functional form of ``AuthorizationMatrix.is_granted``."""
    return matrix.is_granted(group_id, action, target_realm_id, target_group_id)

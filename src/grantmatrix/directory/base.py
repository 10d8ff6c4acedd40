"""
Base classes for the directory boundary.

This module defines the abstractions grantmatrix uses to talk to the
identity provider that owns realms and groups:
- DirectoryAdapter: Abstract base class every directory backend implements
- DirectorySnapshot: Point-in-time copy of realm groups, handed to the engine

The engine never calls an adapter itself. Callers fetch one snapshot per
request and pass the lookups derived from it to both translation and
validation so that the two agree.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from grantmatrix.schema import WILDCARD, DirectoryGroup


@dataclass(frozen=True)
class DirectorySnapshot:
    """
    Immutable copy of the groups of a set of realms.

    Every lookup method returns a fresh dict; the snapshot itself is never
    modified after construction.

    Attributes:
        realms: realm ID -> groups of that realm
    """

    realms: Mapping[str, tuple[DirectoryGroup, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {realm: tuple(groups) for realm, groups in self.realms.items()}
        object.__setattr__(self, "realms", MappingProxyType(frozen))

    @classmethod
    def from_mapping(
        cls,
        realms: Mapping[str, Iterable[DirectoryGroup]],
    ) -> "DirectorySnapshot":
        """Build a snapshot from realm ID -> groups."""
        return cls(realms={realm: tuple(groups) for realm, groups in realms.items()})

    @property
    def realm_ids(self) -> list[str]:
        """Realms contained in the snapshot."""
        return list(self.realms)

    def names_by_id(self, realm_id: str) -> dict[str, str]:
        """
        Group ID -> group name for one realm.

        Always contains the "*" -> "*" sentinel. An unknown realm yields
        only the sentinel.
        """
        lookup = {group.id: group.name for group in self.realms.get(realm_id, ())}
        lookup[WILDCARD] = WILDCARD
        return lookup

    def ids_by_name(self, realm_id: str) -> dict[str, str]:
        """Group name -> group ID for one realm, with the "*" sentinel."""
        lookup = {group.name: group.id for group in self.realms.get(realm_id, ())}
        lookup[WILDCARD] = WILDCARD
        return lookup

    def name_mapper(self) -> dict[str, dict[str, str]]:
        """
        Target realm ID -> (group name -> group ID) for every realm.

        The "*" realm maps only "*" to itself.
        """
        mapper = {realm: self.ids_by_name(realm) for realm in self.realms}
        mapper[WILDCARD] = {WILDCARD: WILDCARD}
        return mapper

    def allowed_targets(self) -> dict[str, set[str]]:
        """
        Allow-list covering every realm and group of the snapshot.

        Each realm allows all its group IDs plus "*", and the "*" realm
        allows "*".
        """
        targets = {
            realm: {group.id for group in groups} | {WILDCARD}
            for realm, groups in self.realms.items()
        }
        targets[WILDCARD] = {WILDCARD}
        return targets


class DirectoryAdapter(ABC):
    """
    Abstract base class for directory backends.

    Subclasses must implement:
    - list_realms(): The realms the directory knows about
    - list_groups(): The groups of one realm

    Example:
        class FixedDirectory(DirectoryAdapter):
            def list_realms(self) -> list[str]:
                return ["master"]

            def list_groups(self, realm_id: str) -> list[DirectoryGroup]:
                return [DirectoryGroup(id="g1", name="admins")]
    """

    @abstractmethod
    def list_realms(self) -> list[str]:
        """
        List the realm IDs known to the directory.

        Returns:
            Realm IDs
        """
        ...

    @abstractmethod
    def list_groups(self, realm_id: str) -> list[DirectoryGroup]:
        """
        List the groups of a realm.

        Args:
            realm_id: The realm to read

        Returns:
            The realm's groups (ID and display name)

        Raises:
            DirectoryError: If the realm cannot be read
        """
        ...

    def snapshot(self, realm_ids: Iterable[str] | None = None) -> DirectorySnapshot:
        """
        Take a snapshot of the given realms (all realms when None).

        ``list_groups`` is called exactly once per realm.
        """
        if realm_ids is None:
            realm_ids = self.list_realms()
        return DirectorySnapshot.from_mapping(
            {realm: self.list_groups(realm) for realm in realm_ids}
        )

    def close(self) -> None:
        """Release any resources held by the adapter."""

    def __enter__(self) -> "DirectoryAdapter":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"

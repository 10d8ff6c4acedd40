"""
In-memory directory backend.

Serves realms and groups from a fixed mapping, typically the ``realms``
section of a directory configuration file.
"""

from typing import Iterable, Mapping

from grantmatrix.directory.base import DirectoryAdapter
from grantmatrix.errors import DirectoryRealmNotFoundError
from grantmatrix.schema import DirectoryGroup


class StaticDirectory(DirectoryAdapter):
    """
    Directory backed by a fixed realm -> groups mapping.

    Example:
        directory = StaticDirectory({"R1": [DirectoryGroup(id="G1", name="ops")]})
        snapshot = directory.snapshot()
    """

    def __init__(self, realms: Mapping[str, Iterable[DirectoryGroup]]) -> None:
        self._realms = {realm: list(groups) for realm, groups in realms.items()}

    def list_realms(self) -> list[str]:
        return list(self._realms)

    def list_groups(self, realm_id: str) -> list[DirectoryGroup]:
        if realm_id not in self._realms:
            raise DirectoryRealmNotFoundError(realm_id=realm_id)
        return list(self._realms[realm_id])

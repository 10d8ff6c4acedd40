"""
Directory boundary for grantmatrix.

The directory supplies, per realm, the mapping between group IDs and
group display names. grantmatrix queries it but does not own it.

Backends:
    - static: realms and groups listed in the directory config file
    - http: the identity provider admin REST API

Example:
    from grantmatrix.directory import create_directory
    from grantmatrix.schema import load_directory_config

    directory = create_directory(load_directory_config("directory.yaml"))
    snapshot = directory.snapshot()
"""

from grantmatrix.directory.base import DirectoryAdapter, DirectorySnapshot
from grantmatrix.directory.http import HttpDirectory
from grantmatrix.directory.static import StaticDirectory
from grantmatrix.schema import DirectoryConfig


def create_directory(config: DirectoryConfig) -> DirectoryAdapter:
    """Build the adapter selected by ``config.backend``."""
    if config.backend == "http":
        if config.http is None:
            raise ValueError("The http directory backend requires http settings")
        return HttpDirectory(config.http)
    return StaticDirectory(config.realms)


__all__ = [
    "DirectoryAdapter",
    "DirectorySnapshot",
    "HttpDirectory",
    "StaticDirectory",
    "create_directory",
]

"""
HTTP directory backend.

Reads realms and groups from an identity provider's admin REST API:

    GET {base_url}/admin/realms                 -> [{"realm": "..."}, ...]
    GET {base_url}/admin/realms/{realm}/groups  -> [{"id": "...", "name": "..."}, ...]

Usage:
    from grantmatrix.directory.http import HttpDirectory
    from grantmatrix.schema import HttpDirectoryConfig

    config = HttpDirectoryConfig(base_url="https://idp.example.com", token="...")
    with HttpDirectory(config) as directory:
        snapshot = directory.snapshot(["R1", "R2"])

Connection failures and timeouts are retried; an unknown realm is not.
"""

import logging
import time
from typing import Any
from urllib.parse import quote

import httpx

from grantmatrix.directory.base import DirectoryAdapter
from grantmatrix.errors import (
    DirectoryConnectionError,
    DirectoryRealmNotFoundError,
    DirectoryResponseError,
    DirectoryTimeoutError,
)
from grantmatrix.schema import DirectoryGroup, HttpDirectoryConfig

logger = logging.getLogger(__name__)


class HttpDirectory(DirectoryAdapter):
    """
    Directory adapter over the identity provider admin API.

    The underlying httpx client is created lazily and reused until
    ``close()`` (or the end of a ``with`` block).
    """

    def __init__(self, config: HttpDirectoryConfig) -> None:
        self.config = config
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.config.token:
                headers["Authorization"] = f"Bearer {self.config.token}"
            self._client = httpx.Client(
                base_url=self.config.base_url,
                timeout=self.config.timeout_seconds,
                headers=headers,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def list_realms(self) -> list[str]:
        data = self._get_with_retries("/admin/realms")
        realms = []
        for entry in self._expect_list(data, None):
            realm = None
            if isinstance(entry, dict):
                realm = entry.get("realm") or entry.get("id")
            if not realm:
                raise DirectoryResponseError(
                    raw_response=str(entry)[:500],
                    parse_error="Realm entry without 'realm' or 'id'",
                )
            realms.append(realm)
        return realms

    def list_groups(self, realm_id: str) -> list[DirectoryGroup]:
        path = f"/admin/realms/{quote(realm_id, safe='')}/groups"
        data = self._get_with_retries(path, realm_id)
        groups = []
        for entry in self._expect_list(data, realm_id):
            if not isinstance(entry, dict) or not entry.get("id") or not entry.get("name"):
                raise DirectoryResponseError(
                    realm_id=realm_id,
                    raw_response=str(entry)[:500],
                    parse_error="Group entry without 'id' or 'name'",
                )
            groups.append(DirectoryGroup(id=entry["id"], name=entry["name"]))
        return groups

    def _expect_list(self, data: Any, realm_id: str | None) -> list[Any]:
        if not isinstance(data, list):
            raise DirectoryResponseError(
                realm_id=realm_id,
                raw_response=str(data)[:500],
                parse_error="Expected a JSON array",
            )
        return data

    def _get_with_retries(self, path: str, realm_id: str | None = None) -> Any:
        """GET a path, retrying connection errors and timeouts."""
        last_error: Exception | None = None

        for attempt in range(self.config.max_retries + 1):
            try:
                return self._get(path, realm_id)
            except (DirectoryConnectionError, DirectoryTimeoutError) as e:
                last_error = e
                if attempt < self.config.max_retries:
                    logger.warning(
                        "Directory request %s failed (attempt %d/%d): %s",
                        path,
                        attempt + 1,
                        self.config.max_retries + 1,
                        e.message,
                    )
                    time.sleep(self.config.retry_delay_seconds)

        if last_error:
            raise last_error
        raise DirectoryConnectionError(realm_id=realm_id, url=self.config.base_url)

    def _get(self, path: str, realm_id: str | None) -> Any:
        """Make a single GET request."""
        client = self._get_client()
        logger.debug("GET %s%s", self.config.base_url, path)

        try:
            response = client.get(path)
        except httpx.TimeoutException as e:
            raise DirectoryTimeoutError(
                realm_id=realm_id,
                timeout_seconds=self.config.timeout_seconds,
            ) from e
        except httpx.RequestError as e:
            raise DirectoryConnectionError(
                realm_id=realm_id,
                url=self.config.base_url,
                underlying_error=str(e),
            ) from e

        if response.status_code == 404 and realm_id is not None:
            raise DirectoryRealmNotFoundError(realm_id=realm_id)

        if response.status_code != 200:
            raise DirectoryConnectionError(
                realm_id=realm_id,
                url=self.config.base_url,
                underlying_error=f"HTTP {response.status_code}: {response.text[:200]}",
            )

        try:
            return response.json()
        except ValueError as e:
            raise DirectoryResponseError(
                realm_id=realm_id,
                raw_response=response.text[:500],
                parse_error=f"Invalid JSON: {e}",
            ) from e

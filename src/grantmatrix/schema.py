"""
Schema definitions for grantmatrix.

This module defines the Pydantic models used throughout grantmatrix:
- Authorization: The atomic grant (group -> action -> target realm/group)
- GroupAuthorizations: The administrator-facing nested matrix of one group
- RuleSet/AllowList: The rule set and allow-list files
- DirectoryGroup/DirectoryConfig: The identity-provider directory boundary

Design Decisions:
    - Records are frozen so they hash and compare by value
    - Target fields are optional and None means "no target dimension";
      the wildcard "*" is an ordinary string value
    - Models do not enforce cross-field rules such as "target group needs
      a target realm": the validator reports those with a precise error
"""

from pathlib import Path
from typing import Any, Iterable, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from grantmatrix.errors import RuleSetLoadError

# Sentinel meaning "any realm" or "any group" in a target position
WILDCARD = "*"


# =============================================================================
# Authorization Models
# =============================================================================


class Authorization(BaseModel):
    """
    A single grant.

    Members of group ``group_id`` (owned by realm ``realm_id``) may perform
    ``action`` against the target scope. A missing target realm means the
    grant is unscoped; ``"*"`` in either target position means "any".

    Attributes:
        realm_id: Realm owning the granting group
        group_id: Grantee group identifier (or name, in name-space)
        action: Opaque action name
        target_realm_id: Realm the action applies to, if any
        target_group_id: Group within target_realm_id the action applies to, if any
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    realm_id: str = Field(..., description="Realm owning the granting group", min_length=1)
    group_id: str = Field(..., description="Grantee group identifier", min_length=1)
    action: str = Field(..., description="Action name", min_length=1)
    target_realm_id: str | None = Field(
        default=None,
        description="Target realm ('*' for any realm)",
        min_length=1,
    )
    target_group_id: str | None = Field(
        default=None,
        description="Target group within the target realm ('*' for any group)",
        min_length=1,
    )

    @property
    def target(self) -> tuple[str | None, str | None]:
        """The (target_realm_id, target_group_id) pair."""
        return (self.target_realm_id, self.target_group_id)

    def with_target_group(self, target_group_id: str | None) -> "Authorization":
        """Return a copy with only the target group replaced."""
        return self.model_copy(update={"target_group_id": target_group_id})


class GroupAuthorizations(BaseModel):
    """
    Administrator-facing view of the grants of one group.

    The matrix is nested as ``action -> target realm -> target group -> {}``.
    An action with an empty realm map is an unscoped grant; a realm with an
    empty group map is a grant on the realm without a target group.

    Attributes:
        realm_id: Realm owning the group
        group_id: The granting group
        matrix: Nested action/target map
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    realm_id: str = Field(..., min_length=1)
    group_id: str = Field(..., min_length=1)
    matrix: dict[str, dict[str, dict[str, dict[str, Any]]]] = Field(default_factory=dict)

    @classmethod
    def from_records(
        cls,
        realm_id: str,
        group_id: str,
        records: Iterable[Authorization],
    ) -> "GroupAuthorizations":
        """
        Fold the records of one group into the nested representation.

        Records of other groups are ignored. When an action holds both an
        unscoped record and scoped records, the nested form keeps only the
        scoped ones.
        """
        matrix: dict[str, dict[str, dict[str, dict[str, Any]]]] = {}
        for record in records:
            if record.realm_id != realm_id or record.group_id != group_id:
                continue
            realms = matrix.setdefault(record.action, {})
            if record.target_realm_id is None:
                continue
            groups = realms.setdefault(record.target_realm_id, {})
            if record.target_group_id is None:
                continue
            groups[record.target_group_id] = {}
        return cls(realm_id=realm_id, group_id=group_id, matrix=matrix)

    def to_records(self) -> list[Authorization]:
        """Expand the nested representation back into records."""
        records = []
        for action, realms in self.matrix.items():
            if not realms:
                records.append(
                    Authorization(realm_id=self.realm_id, group_id=self.group_id, action=action)
                )
                continue
            for target_realm_id, groups in realms.items():
                if not groups:
                    records.append(
                        Authorization(
                            realm_id=self.realm_id,
                            group_id=self.group_id,
                            action=action,
                            target_realm_id=target_realm_id,
                        )
                    )
                    continue
                for target_group_id in groups:
                    records.append(
                        Authorization(
                            realm_id=self.realm_id,
                            group_id=self.group_id,
                            action=action,
                            target_realm_id=target_realm_id,
                            target_group_id=target_group_id,
                        )
                    )
        return records


class RuleSet(BaseModel):
    """A rule set file: an ordered list of authorization records."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    authorizations: list[Authorization] = Field(
        default_factory=list,
        description="Authorization records, in submission order",
    )


class AllowList(BaseModel):
    """
    The targets a caller is entitled to reference.

    Attributes:
        targets: target realm ID -> allowed target group IDs. Wildcard
            targeting is only permitted when "*" is listed explicitly.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    targets: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Target realm ID -> allowed target group IDs",
    )

    def as_mapping(self) -> dict[str, set[str]]:
        """Return the allow-list in the shape the validator expects."""
        return {realm: set(groups) for realm, groups in self.targets.items()}


# =============================================================================
# Directory Models
# =============================================================================


class DirectoryGroup(BaseModel):
    """A group as listed by the identity-provider directory."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Group identifier")
    name: str = Field(..., min_length=1, description="Group display name")


class HttpDirectoryConfig(BaseModel):
    """
    Settings for the HTTP directory adapter.

    Attributes:
        base_url: Root URL of the identity provider (admin API lives below it)
        token: Optional bearer token sent with every request
        timeout_seconds: Per-request timeout
        max_retries: Retries on connection errors and timeouts
        retry_delay_seconds: Delay between retries
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = Field(..., min_length=1, description="Identity provider root URL")
    token: str | None = Field(default=None, description="Bearer token")
    timeout_seconds: float = Field(default=10.0, gt=0, le=300)
    max_retries: int = Field(default=2, ge=0, le=10)
    retry_delay_seconds: float = Field(default=0.5, ge=0)


class DirectoryConfig(BaseModel):
    """
    Directory configuration file.

    Attributes:
        backend: Which adapter to build ("static" or "http")
        realms: Static directory content, realm ID -> groups
        http: HTTP adapter settings (required for the http backend)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    backend: Literal["static", "http"] = Field(default="static")
    realms: dict[str, list[DirectoryGroup]] = Field(default_factory=dict)
    http: HttpDirectoryConfig | None = Field(default=None)

    @model_validator(mode="after")
    def check_backend_settings(self) -> "DirectoryConfig":
        """The http backend needs its settings block."""
        if self.backend == "http" and self.http is None:
            msg = "backend 'http' requires an 'http' settings block"
            raise ValueError(msg)
        return self


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def _load_yaml_file(path: Path | str) -> tuple[Path, Any]:
    path = Path(path)
    try:
        with path.open() as f:
            return path, yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise RuleSetLoadError(path=str(path), underlying_error=str(e)) from e


def _validate(model: type[BaseModel], data: Any, path: str = "") -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RuleSetLoadError(path=path, underlying_error=str(e)) from e


def _parse_yaml_string(content: str) -> Any:
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise RuleSetLoadError(underlying_error=str(e)) from e


def load_rule_set(path: Path | str) -> RuleSet:
    """
    Load a rule set from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated RuleSet

    Raises:
        RuleSetLoadError: If the file is missing, not YAML, or off-schema
    """
    path, data = _load_yaml_file(path)
    return _validate(RuleSet, data, str(path))


def load_allow_list(path: Path | str) -> AllowList:
    """
    Load an allow-list from a YAML file.

    Raises:
        RuleSetLoadError: If the file is missing, not YAML, or off-schema
    """
    path, data = _load_yaml_file(path)
    return _validate(AllowList, data, str(path))


def load_directory_config(path: Path | str) -> DirectoryConfig:
    """
    Load a directory configuration from a YAML file.

    Raises:
        RuleSetLoadError: If the file is missing, not YAML, or off-schema
    """
    path, data = _load_yaml_file(path)
    return _validate(DirectoryConfig, data, str(path))


def load_rule_set_from_string(content: str) -> RuleSet:
    """Load a rule set from a YAML string."""
    return _validate(RuleSet, _parse_yaml_string(content))


def load_allow_list_from_string(content: str) -> AllowList:
    """Load an allow-list from a YAML string."""
    return _validate(AllowList, _parse_yaml_string(content))


def load_directory_config_from_string(content: str) -> DirectoryConfig:
    """Load a directory configuration from a YAML string."""
    return _validate(DirectoryConfig, _parse_yaml_string(content))

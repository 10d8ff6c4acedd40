"""
Exception hierarchy for grantmatrix.

All grantmatrix exceptions inherit from GrantMatrixError, allowing callers to
catch every grantmatrix-specific failure with a single except clause.

Exception Categories:
    - AuthorizationValidationError: A submitted rule set is not well-formed
    - DirectoryError: The identity-provider directory could not be read
    - RuleSetLoadError: A rule set, allow-list or directory file is unusable

Validation errors are returned by ``validate()`` rather than raised: they
describe input-data problems that callers surface verbatim to the
administrator. They are still exceptions so that ``ensure_valid()`` (and
any caller that prefers it) can raise them unchanged.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from grantmatrix.schema import Authorization


# =============================================================================
# Error Codes
# =============================================================================

# Validation errors: 1xxx
ERROR_MISSING_TARGET_REALM = 1001
ERROR_INVALID_TARGET_REALM = 1002
ERROR_INVALID_TARGET_GROUP = 1003
ERROR_AMBIGUOUS_WILDCARD_REALM = 1004
ERROR_AMBIGUOUS_WILDCARD_GROUP = 1005

# Directory errors: 2xxx
ERROR_DIRECTORY_CONNECTION = 2001
ERROR_DIRECTORY_TIMEOUT = 2002
ERROR_DIRECTORY_REALM_NOT_FOUND = 2003
ERROR_DIRECTORY_RESPONSE = 2004

# Input errors: 3xxx
ERROR_RULE_SET_LOAD = 3001


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class GrantMatrixError(Exception):
    """
    Base exception for all grantmatrix errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Validation Errors
# =============================================================================


def _describe(record: "Authorization | None") -> dict[str, Any] | None:
    if record is None:
        return None
    return record.model_dump()


@dataclass
class AuthorizationValidationError(GrantMatrixError):
    """
    Base class for rule set validation failures.

    Attributes:
        record: The offending authorization record
        record_index: Position of the record in the submitted list
        rule: Short name of the rule that failed
    """

    record: "Authorization | None" = None
    record_index: int | None = None
    rule: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context.update({
            "record": _describe(self.record),
            "record_index": self.record_index,
            "rule": self.rule,
        })


@dataclass
class MissingTargetRealmError(AuthorizationValidationError):
    """Raised when a record names a target group but no target realm."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.rule:
            self.rule = "target_group_requires_target_realm"
        if not self.message:
            group = self.record.target_group_id if self.record else None
            self.message = f"Target group {group!r} has no target realm"
        if self.code == 0:
            self.code = ERROR_MISSING_TARGET_REALM
        if not self.suggestion:
            self.suggestion = "Set target_realm_id or remove target_group_id"
        super().__post_init__()


@dataclass
class InvalidTargetRealmError(AuthorizationValidationError):
    """Raised when a target realm is not in the allow-list."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.rule:
            self.rule = "target_realm_allowed"
        if not self.message:
            realm = self.record.target_realm_id if self.record else None
            self.message = f"Invalid target realm: {realm}"
        if self.code == 0:
            self.code = ERROR_INVALID_TARGET_REALM
        super().__post_init__()


@dataclass
class InvalidTargetGroupError(AuthorizationValidationError):
    """Raised when a target group is not allowed in its target realm."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.rule:
            self.rule = "target_group_allowed"
        if not self.message:
            if self.record is not None:
                self.message = (
                    f"Invalid target group: {self.record.target_group_id} "
                    f"in realm {self.record.target_realm_id}"
                )
            else:
                self.message = "Invalid target group"
        if self.code == 0:
            self.code = ERROR_INVALID_TARGET_GROUP
        super().__post_init__()


@dataclass
class AmbiguousWildcardRealmError(AuthorizationValidationError):
    """Raised when '*' and concrete target realms share a (group, action) bucket."""

    group_id: str = ""
    action: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.rule:
            self.rule = "wildcard_realm_exclusive"
        if not self.message:
            self.message = (
                f"If '*' is used as target realm for group {self.group_id} "
                f"and action {self.action}, no other target realm is allowed"
            )
        if self.code == 0:
            self.code = ERROR_AMBIGUOUS_WILDCARD_REALM
        if not self.suggestion:
            self.suggestion = "Keep either the '*' rule or the concrete realm rules"
        super().__post_init__()
        self.context.update({
            "group_id": self.group_id,
            "action": self.action,
        })


@dataclass
class AmbiguousWildcardGroupError(AuthorizationValidationError):
    """Raised when '*' and concrete target groups share a target realm bucket."""

    group_id: str = ""
    action: str = ""
    target_realm_id: str | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.rule:
            self.rule = "wildcard_group_exclusive"
        if not self.message:
            self.message = (
                f"If '*' is used as target group in realm {self.target_realm_id} "
                f"for group {self.group_id} and action {self.action}, "
                "no other target group is allowed"
            )
        if self.code == 0:
            self.code = ERROR_AMBIGUOUS_WILDCARD_GROUP
        if not self.suggestion:
            self.suggestion = "Keep either the '*' rule or the concrete group rules"
        super().__post_init__()
        self.context.update({
            "group_id": self.group_id,
            "action": self.action,
            "target_realm_id": self.target_realm_id,
        })


# =============================================================================
# Directory Errors
# =============================================================================


@dataclass
class DirectoryError(GrantMatrixError):
    """
    Base class for directory adapter errors.

    These errors occur while fetching realms or groups from the identity
    provider, before any translation or validation happens.

    Attributes:
        realm_id: The realm being read (if applicable)
    """

    realm_id: str | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["realm_id"] = self.realm_id


@dataclass
class DirectoryConnectionError(DirectoryError):
    """Raised when the directory cannot be reached or answers with an error."""

    url: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Cannot reach directory at {self.url}"
            if self.underlying_error:
                self.message += f": {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_DIRECTORY_CONNECTION
        if not self.suggestion:
            self.suggestion = "Check base_url and that the identity provider is running"
        super().__post_init__()
        self.context.update({
            "url": self.url,
            "underlying_error": self.underlying_error,
        })


@dataclass
class DirectoryTimeoutError(DirectoryError):
    """Raised when a directory request times out."""

    timeout_seconds: float = 0.0

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Directory request timed out after {self.timeout_seconds}s"
        if self.code == 0:
            self.code = ERROR_DIRECTORY_TIMEOUT
        if not self.suggestion:
            self.suggestion = "Increase timeout_seconds in the directory config"
        super().__post_init__()
        self.context["timeout_seconds"] = self.timeout_seconds


@dataclass
class DirectoryRealmNotFoundError(DirectoryError):
    """Raised when the directory does not know the requested realm."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Realm not found in directory: {self.realm_id}"
        if self.code == 0:
            self.code = ERROR_DIRECTORY_REALM_NOT_FOUND
        super().__post_init__()


@dataclass
class DirectoryResponseError(DirectoryError):
    """Raised when the directory answers with a body we cannot interpret."""

    raw_response: str = ""
    parse_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Unexpected directory response: {self.parse_error}"
        if self.code == 0:
            self.code = ERROR_DIRECTORY_RESPONSE
        super().__post_init__()
        self.context.update({
            "raw_response": self.raw_response,
            "parse_error": self.parse_error,
        })


# =============================================================================
# Input Errors
# =============================================================================


@dataclass
class RuleSetLoadError(GrantMatrixError):
    """Raised when a rule set, allow-list or directory file cannot be loaded."""

    path: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            source = self.path or "<string>"
            self.message = f"Cannot load {source}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_RULE_SET_LOAD
        self.context.update({
            "path": self.path,
            "underlying_error": self.underlying_error,
        })

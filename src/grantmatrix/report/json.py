"""
JSON report generator for grantmatrix.

Generates structured JSON output for programmatic consumption: record
lists, built matrices, validation outcomes and translation summaries.

Design Principles:
    - Consistent schema: Same structure for every invocation
    - Human-readable keys: Use descriptive snake_case names
    - Absent targets are rendered with explicit labels, never dropped
"""

import json
from typing import Any, Iterable

from grantmatrix.errors import AuthorizationValidationError
from grantmatrix.matrix import UNSCOPED, AuthorizationMatrix
from grantmatrix.schema import Authorization

REPORT_VERSION = "1.0"

# Labels for absent target realm / target group in rendered matrices
UNSCOPED_REALM_LABEL = "<unscoped>"
NO_GROUP_LABEL = "<none>"


def records_to_dicts(records: Iterable[Authorization]) -> list[dict[str, Any]]:
    """Serialize records, keeping absent targets as null."""
    return [record.model_dump() for record in records]


def build_matrix_dict(matrix: AuthorizationMatrix) -> dict[str, Any]:
    """
    Build a dictionary view of a matrix.

    Returns:
        {"grant_count": n, "buckets": [{"group_id", "action", "targets"}]}
        where targets maps realm label -> sorted group labels.
    """
    buckets = []
    for (group_id, action), realms in matrix.buckets():
        targets = {}
        for realm, groups in realms.items():
            realm_label = UNSCOPED_REALM_LABEL if realm is UNSCOPED else realm
            targets[realm_label] = sorted(
                NO_GROUP_LABEL if group is UNSCOPED else group for group in groups
            )
        buckets.append({
            "group_id": group_id,
            "action": action,
            "targets": targets,
        })

    return {
        "report_version": REPORT_VERSION,
        "grant_count": len(matrix),
        "buckets": buckets,
    }


def build_validation_dict(
    records: list[Authorization],
    error: AuthorizationValidationError | None,
) -> dict[str, Any]:
    """Build a dictionary describing a validation outcome."""
    return {
        "report_version": REPORT_VERSION,
        "valid": error is None,
        "record_count": len(records),
        "error": error.to_dict() if error is not None else None,
    }


def build_translation_dict(
    before: list[Authorization],
    after: list[Authorization],
    direction: str,
) -> dict[str, Any]:
    """Build a dictionary describing a translation and what it dropped."""
    return {
        "report_version": REPORT_VERSION,
        "direction": direction,
        "input_count": len(before),
        "output_count": len(after),
        "dropped_count": len(before) - len(after),
        "authorizations": records_to_dicts(after),
    }


def build_decision_dict(
    granted: bool,
    group_id: str,
    action: str,
    target_realm_id: str | None,
    target_group_id: str | None,
) -> dict[str, Any]:
    """Build a dictionary describing an is_granted answer."""
    return {
        "granted": granted,
        "query": {
            "group_id": group_id,
            "action": action,
            "target_realm_id": target_realm_id,
            "target_group_id": target_group_id,
        },
    }


def to_json(report: dict[str, Any], indent: int = 2) -> str:
    """Serialize a report dictionary."""
    return json.dumps(report, indent=indent, default=_json_serializer)


def _json_serializer(obj: Any) -> Any:
    """Custom JSON serializer for non-standard types."""
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

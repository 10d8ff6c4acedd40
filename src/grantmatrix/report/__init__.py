"""
Reporting module for grantmatrix.

Output formats:
    - Console: Rich tables and panels for administrators
    - JSON: Structured output for programmatic consumption

Example:
    from grantmatrix.report import build_validation_dict, to_json

    print(to_json(build_validation_dict(records, validate(records, allowed))))
"""

from grantmatrix.report.console import (
    print_decision,
    print_matrix,
    print_records,
    print_validation,
)
from grantmatrix.report.json import (
    build_decision_dict,
    build_matrix_dict,
    build_translation_dict,
    build_validation_dict,
    records_to_dicts,
    to_json,
)

__all__ = [
    "build_decision_dict",
    "build_matrix_dict",
    "build_translation_dict",
    "build_validation_dict",
    "print_decision",
    "print_matrix",
    "print_records",
    "print_validation",
    "records_to_dicts",
    "to_json",
]

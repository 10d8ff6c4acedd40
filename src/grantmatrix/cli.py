"""
CLI entry point for grantmatrix.

This module provides the Typer-based command-line interface for grantmatrix.

Commands:
    validate    Check a rule set against an allow-list or a directory
    translate   Convert a rule set between ID-space and name-space
    matrix      Show the authorization matrix built from a rule set
    check       Answer whether a (group, action, target) tuple is granted

Architecture Note:
    The CLI only loads files, takes directory snapshots and renders results.
    All decisions are made by grantmatrix.matrix so the same logic can be
    embedded in a request-handling service without the CLI.
"""

import json
import logging
import traceback
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from grantmatrix import __version__
from grantmatrix.directory import DirectorySnapshot, create_directory
from grantmatrix.errors import GrantMatrixError
from grantmatrix.matrix import (
    build_matrix,
    translate_to_ids,
    translate_to_names,
    validate as validate_records,
)
from grantmatrix.report import (
    build_decision_dict,
    build_matrix_dict,
    build_translation_dict,
    build_validation_dict,
    print_decision,
    print_matrix,
    print_records,
    print_validation,
    to_json,
)
from grantmatrix.schema import load_allow_list, load_directory_config, load_rule_set

app = typer.Typer(
    name="grantmatrix",
    help="Translate, validate and query group authorization matrices.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


class Direction(str, Enum):
    """Translation direction."""

    NAMES = "names"
    IDS = "ids"


RulesArgument = Annotated[
    Path,
    typer.Argument(
        help="Path to the rule set YAML file.",
        exists=True,
        readable=True,
        resolve_path=True,
    ),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output results in JSON format."),
]
DebugOption = Annotated[
    bool,
    typer.Option("--debug", help="Include full tracebacks on errors."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]grantmatrix[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log directory requests and retries."),
    ] = False,
) -> None:
    """
    grantmatrix - group authorization matrices for realm-scoped grants.

    Rule sets are translated between group IDs and group names, validated
    against the targets a caller may reference, and queried for grants.
    """
    _configure_logging(verbose)


def _configure_logging(verbose: bool) -> None:
    """Send log records to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command()
def validate(
    rules_path: RulesArgument,
    allow_path: Annotated[
        Optional[Path],
        typer.Option(
            "--allow",
            "-a",
            help="Path to the allow-list YAML file.",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ] = None,
    directory_path: Annotated[
        Optional[Path],
        typer.Option(
            "--directory",
            "-d",
            help="Path to a directory config; every realm and group it lists is allowed.",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ] = None,
    json_output: JsonOption = False,
    debug: DebugOption = False,
) -> None:
    """
    Validate a rule set.

    Exits with code 0 when the rule set is valid and 1 otherwise.

    Example:
        $ grantmatrix validate rules.yaml --allow allowed.yaml
    """
    if (allow_path is None) == (directory_path is None):
        _fail("usage_error", "Pass exactly one of --allow or --directory", json_output, debug)

    try:
        rule_set = load_rule_set(rules_path)
        if allow_path is not None:
            allowed = load_allow_list(allow_path).as_mapping()
        else:
            allowed = _snapshot(directory_path).allowed_targets()
    except GrantMatrixError as e:
        _fail(type(e).__name__, str(e), json_output, debug)

    records = rule_set.authorizations
    error = validate_records(records, allowed)

    if json_output:
        print(to_json(build_validation_dict(records, error)))
    else:
        print_validation(console, records, error)

    raise typer.Exit(code=0 if error is None else 1)


@app.command()
def translate(
    rules_path: RulesArgument,
    directory_path: Annotated[
        Path,
        typer.Option(
            "--directory",
            "-d",
            help="Path to the directory config YAML file.",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ],
    to: Annotated[
        Direction,
        typer.Option("--to", help="Target space: names or ids."),
    ],
    realm: Annotated[
        Optional[str],
        typer.Option("--realm", "-r", help="Realm whose group names are used (--to names)."),
    ] = None,
    json_output: JsonOption = False,
    debug: DebugOption = False,
) -> None:
    """
    Translate target groups between IDs and names.

    Records whose target group cannot be resolved are dropped and counted.

    Example:
        $ grantmatrix translate rules.yaml -d directory.yaml --to names --realm R1
    """
    if to == Direction.NAMES and realm is None:
        _fail("usage_error", "--to names requires --realm", json_output, debug)

    try:
        records = load_rule_set(rules_path).authorizations
        snapshot = _snapshot(directory_path)
    except GrantMatrixError as e:
        _fail(type(e).__name__, str(e), json_output, debug)

    if to == Direction.NAMES:
        translated = translate_to_names(records, snapshot.names_by_id(realm))
    else:
        translated = translate_to_ids(records, snapshot.name_mapper())

    if json_output:
        print(to_json(build_translation_dict(records, translated, to.value)))
        return

    print_records(console, translated, title=f"Authorizations ({to.value})")
    dropped = len(records) - len(translated)
    if dropped:
        console.print(f"[yellow]Dropped {dropped} record(s) with unresolved target groups[/yellow]")


@app.command()
def matrix(
    rules_path: RulesArgument,
    json_output: JsonOption = False,
    debug: DebugOption = False,
) -> None:
    """
    Show the authorization matrix built from a rule set.

    Example:
        $ grantmatrix matrix rules.yaml
    """
    try:
        records = load_rule_set(rules_path).authorizations
    except GrantMatrixError as e:
        _fail(type(e).__name__, str(e), json_output, debug)

    built = build_matrix(records)
    if json_output:
        print(to_json(build_matrix_dict(built)))
    else:
        print_matrix(console, built)


@app.command()
def check(
    rules_path: RulesArgument,
    group: Annotated[str, typer.Argument(help="Grantee group ID.")],
    action: Annotated[str, typer.Argument(help="Action name.")],
    target_realm: Annotated[
        Optional[str],
        typer.Option("--target-realm", "-R", help="Target realm of the query."),
    ] = None,
    target_group: Annotated[
        Optional[str],
        typer.Option("--target-group", "-G", help="Target group of the query."),
    ] = None,
    json_output: JsonOption = False,
    debug: DebugOption = False,
) -> None:
    """
    Check whether a grant covers the given tuple.

    Exits with code 0 when granted and 1 when denied.

    Example:
        $ grantmatrix check rules.yaml g1 read --target-realm R1 --target-group G1
    """
    try:
        records = load_rule_set(rules_path).authorizations
    except GrantMatrixError as e:
        _fail(type(e).__name__, str(e), json_output, debug)

    granted = build_matrix(records).is_granted(group, action, target_realm, target_group)

    if json_output:
        print(to_json(build_decision_dict(granted, group, action, target_realm, target_group)))
    else:
        print_decision(console, granted, group, action, target_realm, target_group)

    raise typer.Exit(code=0 if granted else 1)


def _snapshot(directory_path: Path) -> DirectorySnapshot:
    """Load a directory config and take one snapshot of every realm."""
    config = load_directory_config(directory_path)
    with create_directory(config) as directory:
        return directory.snapshot()


def _fail(error_type: str, message: str, json_output: bool, debug: bool) -> None:
    """Report an error and exit with code 1."""
    if json_output:
        output = {
            "error": True,
            "error_type": error_type,
            "message": message,
        }
        if debug:
            output["traceback"] = traceback.format_exc()
        print(json.dumps(output, indent=2))
    else:
        console.print(f"[red]Error: {escape(message)}[/red]")
        if debug:
            console.print(f"[dim]{traceback.format_exc()}[/dim]")
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

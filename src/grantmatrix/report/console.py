"""
Console report generator for grantmatrix.

Renders records, matrices and validation outcomes with Rich so that an
administrator can scan a rule set quickly.
"""

from typing import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from grantmatrix.errors import AuthorizationValidationError
from grantmatrix.matrix import UNSCOPED, AuthorizationMatrix
from grantmatrix.report.json import NO_GROUP_LABEL, UNSCOPED_REALM_LABEL
from grantmatrix.schema import Authorization

# Status icons
ICON_OK = "[green]✓[/green]"
ICON_ERROR = "[red]✗[/red]"
ICON_DENIED = "[yellow]⊘[/yellow]"


def print_records(
    console: Console,
    records: Iterable[Authorization],
    title: str = "Authorizations",
) -> None:
    """Print records as a table, one row per record."""
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", style="dim", width=4)
    table.add_column("Realm")
    table.add_column("Group", style="cyan")
    table.add_column("Action", style="magenta")
    table.add_column("Target realm")
    table.add_column("Target group")

    for index, record in enumerate(records):
        table.add_row(
            str(index),
            record.realm_id,
            record.group_id,
            record.action,
            record.target_realm_id or "[dim]-[/dim]",
            record.target_group_id or "[dim]-[/dim]",
        )

    console.print(table)


def print_matrix(console: Console, matrix: AuthorizationMatrix) -> None:
    """Print a built matrix grouped by (group, action)."""
    table = Table(title="Authorization matrix", show_header=True, header_style="bold")
    table.add_column("Group", style="cyan")
    table.add_column("Action", style="magenta")
    table.add_column("Target realm")
    table.add_column("Target groups")

    for (group_id, action), realms in matrix.buckets():
        for realm, groups in realms.items():
            labels = sorted(NO_GROUP_LABEL if g is UNSCOPED else g for g in groups)
            table.add_row(
                group_id,
                action,
                UNSCOPED_REALM_LABEL if realm is UNSCOPED else realm,
                ", ".join(labels),
            )

    console.print(table)
    console.print(f"[dim]Grants: {len(matrix)}[/dim]")


def print_validation(
    console: Console,
    records: list[Authorization],
    error: AuthorizationValidationError | None,
) -> None:
    """Print a validation outcome panel."""
    if error is None:
        console.print(f"{ICON_OK} [green]{len(records)} authorizations are valid[/green]")
        return

    body = Text()
    body.append(f"[E{error.code}] ", style="bold red")
    body.append(error.message)
    body.append("\nRule: ", style="dim")
    body.append(error.rule)
    if error.record_index is not None:
        body.append("\nRecord: ", style="dim")
        body.append(f"#{error.record_index} ")
        body.append(_format_record(error.record))
    if error.suggestion:
        body.append("\nSuggestion: ", style="dim")
        body.append(error.suggestion)

    console.print(Panel(body, title=f"{ICON_ERROR} Invalid authorizations", expand=False))


def print_decision(
    console: Console,
    granted: bool,
    group_id: str,
    action: str,
    target_realm_id: str | None,
    target_group_id: str | None,
) -> None:
    """Print an is_granted answer."""
    target = f"{target_realm_id or UNSCOPED_REALM_LABEL}/{target_group_id or NO_GROUP_LABEL}"
    if granted:
        console.print(f"{ICON_OK} [green]granted[/green]: {group_id} may {action} on {target}")
    else:
        console.print(f"{ICON_DENIED} [yellow]denied[/yellow]: {group_id} may not {action} on {target}")


def _format_record(record: Authorization | None) -> str:
    if record is None:
        return ""
    return (
        f"{record.realm_id}/{record.group_id} {record.action} -> "
        f"{record.target_realm_id or '-'}/{record.target_group_id or '-'}"
    )

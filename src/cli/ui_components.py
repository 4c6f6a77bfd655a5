"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from adapters.site_builder import BuildReport
from core.domain.models import UserRecord


def print_banner(console: Console) -> None:
    title = Text("SF-SITE", style="bold cyan")
    subtitle = Text("Salesforce users • Static site build", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_users_table(users: Sequence[UserRecord]) -> Table:
    """Tabla Rich con los usuarios en el orden en que llegaron."""

    table = Table(title=f"Salesforce Users ({len(users)})")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Email", style="green")
    table.add_column("Photo", style="magenta")
    for user in users:
        table.add_row(
            user.id or "-",
            user.full_name or "-",
            user.email or "-",
            user.small_photo_url or "-",
        )
    return table


def build_report_panel(report: BuildReport) -> Panel:
    body = Text()
    body.append(f"Output: {report.output_dir}\n")
    body.append(f"Pages written: {len(report.written)}\n")
    for name, size in report.collection_sizes.items():
        body.append(f"- {name}: {size} items\n", style="dim")
    return Panel(body, title=Text("Build", style="bold green"), border_style="green")

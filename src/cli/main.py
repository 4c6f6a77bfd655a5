"""CLI principal (Typer).

Comandos:
- `build`: ejecuta el build del sitio con la colección de Salesforce.
- `users`: login + búsqueda, muestra la tabla o exporta JSON.
- `doctor`: diagnósticos y setup de credenciales.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from adapters.json_exporter import export_users_json, users_to_json
from cli import doctor
from cli.ui_components import build_report_panel, build_users_table, print_banner
from core.config import AppSettings
from core.errors import BuildError, SalesforceError
from core.log import configure_logging
from core.services.site_pipeline import DEFAULT_LAST_NAME_INITIAL, build_site, fetch_salesforce_users

app = typer.Typer(no_args_is_help=True, help="Build a static site from Salesforce users.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)


@app.command()
def build(
    input_dir: Path | None = typer.Option(None, "--input", "-i", help="Templates directory."),
    output_dir: Path | None = typer.Option(None, "--output", "-o", help="Output directory."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="No banner."),
) -> None:
    """Resolve collections and render every template."""

    settings = AppSettings()
    if not quiet:
        print_banner(_console)

    try:
        report = asyncio.run(build_site(settings=settings, input_dir=input_dir, output_dir=output_dir))
    except BuildError as exc:
        cause = exc.__cause__
        _console.print(f"[red]Build failed:[/red] {exc}")
        if cause is not None:
            _console.print(f"[dim]Cause: {type(cause).__name__}: {cause}[/dim]")
        raise typer.Exit(code=1) from exc

    _console.print(build_report_panel(report))


@app.command()
def users(
    initial: str = typer.Option(DEFAULT_LAST_NAME_INITIAL, "--initial", help="Last name initial."),
    json_output: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write JSON to this path."),
) -> None:
    """Log in and list the users the site build would receive."""

    settings = AppSettings()
    try:
        found = asyncio.run(fetch_salesforce_users(settings=settings, last_name_initial=initial))
    except SalesforceError as exc:
        _console.print(f"[red]{type(exc).__name__}:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if output is not None:
        path = export_users_json(users=found, output_path=output)
        _console.print(f"[green]Saved {len(found)} users to:[/green] {path}")
    elif json_output:
        typer.echo(users_to_json(found), nl=False)
    else:
        _console.print(build_users_table(found))


def run() -> None:
    app()


if __name__ == "__main__":
    run()

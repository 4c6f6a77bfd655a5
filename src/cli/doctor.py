"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.salesforce import SessionManager
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_login(settings: AppSettings) -> tuple[bool, str]:
    async with SessionManager(settings) as manager:
        result = await manager.login()
    if not result.ok:
        return False, str(result.error)
    info = result.session.info
    return True, f"user={info.user_id} org={info.organization_id} instance={info.instance_url}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="SF-SITE Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Login URL", "OK", settings.login_url)
    table.add_row("API version", "OK", settings.api_version)
    table.add_row("Username", "OK" if settings.username else "MISSING", settings.username or "SF_USERNAME")
    table.add_row(
        "Password",
        "OK" if settings.password.get_secret_value() else "MISSING",
        "SF_PASSWORD",
    )
    table.add_row(
        "Security token",
        "OK" if settings.token.get_secret_value() else "OPTIONAL",
        "SF_TOKEN (not needed from trusted IP ranges)",
    )

    if settings.has_credentials:
        ok_login, detail_login = asyncio.run(_check_login(settings))
        table.add_row("Salesforce login", "OK" if ok_login else "FAIL", detail_login)
    else:
        ok_login = False
        table.add_row("Salesforce login", "SKIPPED", "No credentials configured")

    _console.print(table)

    if not ok_login:
        _console.print(
            "\n[yellow]Note:[/yellow] run `sf-site doctor setup` to store credentials in the user config."
        )


@app.command(name="setup")
def setup() -> None:
    """Interactive credentials setup (stores config in the user config .env)."""

    settings = AppSettings()

    login_url = typer.prompt("Login URL", default=settings.login_url, show_default=True).strip()
    username = typer.prompt("Username", default=settings.username or "", show_default=bool(settings.username)).strip()
    password = typer.prompt("Password", hide_input=True, confirmation_prompt=False).strip()
    token = typer.prompt("Security token", default="", hide_input=True, show_default=False).strip()

    if not login_url or not username or not password:
        raise typer.BadParameter("login URL, username and password are required")

    env_path = write_user_env_vars(
        {
            "SF_LOGIN_URL": login_url,
            "SF_USERNAME": username,
            "SF_PASSWORD": password,
            "SF_TOKEN": token or None,
        }
    )

    _console.print(f"[green]Saved Salesforce config to:[/green] {env_path}")

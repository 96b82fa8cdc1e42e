"""
CLI for ``tenantkv``: inspect and clean up tenant namespaces.

Connection settings come from ``TENANTKV_*`` environment variables, a
``.env`` file, or ``--config`` (YAML file with one section per environment).
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from tenantkv.client import NamespacedRedis
from tenantkv.config import RedisConfig, get_redis_config, get_settings, load_redis_config
from tenantkv.connection import build_url
from tenantkv.errors import TenantKVError
from tenantkv.logging import configure_logging
from tenantkv.namespace import fixed_namespace
from tenantkv.readonly import ReadOnlyState

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="tenantkv",
    help="tenantkv: namespaced Redis access for multi-tenant apps.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
config_app = typer.Typer(no_args_is_help=True, help="Configuration inspection.")
app.add_typer(config_app, name="config")

_state: dict[str, str | None] = {"config_file": None, "environment": None}


@app.callback()
def main(
    config_file: str | None = typer.Option(None, "--config", "-c", help="YAML Redis config file"),
    environment: str | None = typer.Option(None, "--env", "-e", help="Section of the config file"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level"),
) -> None:
    """tenantkv CLI: list, delete and flush tenant keys."""
    configure_logging(level=log_level, json_format=False)
    _state["config_file"] = config_file
    _state["environment"] = environment


def _redis_config() -> RedisConfig:
    settings = get_settings()
    config_file = _state["config_file"] or settings.redis_config_file
    if config_file:
        return load_redis_config(config_file, _state["environment"] or settings.environment)
    return get_redis_config(settings)


def _open_store(tenant: str) -> NamespacedRedis:
    try:
        return NamespacedRedis(
            _redis_config(),
            read_only_state=ReadOnlyState(get_settings().read_only_cooldown_seconds),
            namespace=fixed_namespace(tenant),
        )
    except TenantKVError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {e.message}")
        raise typer.Exit(code=1) from e


@app.command("url")
def show_url() -> None:
    """Print the Redis URL in use."""
    try:
        console.print(build_url(_redis_config()))
    except TenantKVError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {e.message}")
        raise typer.Exit(code=1) from e


@app.command("keys")
def list_keys(
    pattern: str = typer.Argument("*", help="Glob pattern within the namespace"),
    tenant: str = typer.Option(..., "--tenant", "-t", help="Tenant namespace"),
) -> None:
    """List the keys of one tenant."""
    store = _open_store(tenant)
    keys = sorted(store.list_keys(pattern))
    if not keys:
        console.print(f"[dim]No keys in namespace {tenant!r}[/dim]")
        return
    table = Table(title=f"{tenant} ({len(keys)} keys)")
    table.add_column("Key")
    for key in keys:
        table.add_row(key)
    console.print(table)


@app.command("delete-prefix")
def delete_prefix(
    prefix: str = typer.Argument(..., help="Key prefix to delete"),
    tenant: str = typer.Option(..., "--tenant", "-t", help="Tenant namespace"),
) -> None:
    """Delete every key of a tenant starting with PREFIX."""
    store = _open_store(tenant)
    count = store.delete_keys_with_prefix(prefix)
    console.print(f"[green]✓[/green] Deleted {count} keys from {tenant!r}")


@app.command("flush")
def flush(
    tenant: str = typer.Option(..., "--tenant", "-t", help="Tenant namespace"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete every key of one tenant. Other tenants are untouched."""
    if not yes:
        typer.confirm(f"Delete all keys of tenant {tenant!r}?", abort=True)
    store = _open_store(tenant)
    count = store.flush_namespace()
    console.print(f"[green]✓[/green] Flushed {count} keys from {tenant!r}")


@config_app.command("show")
def show_config() -> None:
    """Show current settings (password masked)."""
    settings = get_settings()
    table = Table()
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in sorted(settings.model_dump().items()):
        if key == "redis_password" and value:
            value = "****"
        table.add_row(key, str(value))
    console.print(table)


if __name__ == "__main__":
    app()

"""cherrymcp CLI — inspect and edit Cherry Studio's MCP server list.

Cherry Studio must be closed while writing: it holds the LevelDB lock and
would overwrite the value from its own in-memory state on exit.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cherrymcp import codec
from cherrymcp.cli.context import CliContext, setup_logging
from cherrymcp.config import root_key_to_bytes
from cherrymcp.exceptions import CherryMcpError
from cherrymcp.models import MCP_FIELD, ServerEntry, extract_mcp

console = Console()

app = typer.Typer(
    name="cherrymcp",
    help="Manage the MCP servers stored in Cherry Studio's LevelDB.",
    no_args_is_help=True,
)

ERROR_EXIT_CODE = 2


def _fail(error: CherryMcpError) -> typer.Exit:
    console.print(f"[red]{escape(str(error))}[/red]")
    return typer.Exit(code=ERROR_EXIT_CODE)


def _parse_env(pairs: list[str]) -> dict[str, str]:
    env: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--env")
        env[name] = value
    return env


@app.callback()
def main(
    db: Optional[Path] = typer.Option(
        None, "--db", help="LevelDB directory (default: Cherry Studio's Local Storage)",
    ),
    key: Optional[str] = typer.Option(
        None, "--key", help="Root key holding the config (\\x00-style escapes allowed)",
    ),
    scan: bool = typer.Option(False, "--scan", help="Find the root key by scanning the store"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    setup_logging(verbose)
    root_key = root_key_to_bytes(key) if key else None
    CliContext.configure(db_path=db, root_key=root_key, scan=scan)


@app.command("list")
def list_cmd(
    missing_ok: bool = typer.Option(
        True, "--missing-ok/--strict", help="Treat a missing config as empty",
    ),
):
    """List configured MCP servers."""
    ctx = CliContext.get()
    try:
        result = ctx.repository.list_servers(ctx.db_path, missing_ok=missing_ok)
    except CherryMcpError as e:
        raise _fail(e)

    if not result.servers:
        console.print("[dim]No MCP servers configured.[/dim]")
        return

    table = Table(title=f"MCP servers ({result.total_count})")
    table.add_column("", no_wrap=True)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Type", style="blue")
    table.add_column("Command / URL", style="green")

    for s in result.servers:
        target = s.base_url or " ".join([s.command or "-", *s.args])
        table.add_row(
            "[green]●[/green]" if s.is_active else "[red]○[/red]",
            escape(s.id),
            escape(s.name),
            escape(s.server_type),
            escape(target),
        )

    console.print(table)


@app.command("show")
def show(server_id: str = typer.Argument(help="Server ID")):
    """Print one server as stored (JSON)."""
    ctx = CliContext.get()
    try:
        entry = ctx.repository.get_server(ctx.db_path, server_id)
    except CherryMcpError as e:
        raise _fail(e)
    console.print_json(codec.stringify_json(entry.to_wire()))


@app.command("add")
def add(
    server_id: str = typer.Argument(help="Unique server ID"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Display name (default: ID)"),
    command: Optional[str] = typer.Option(None, "--command", "-c", help="Executable to launch"),
    args: list[str] = typer.Option([], "--arg", "-a", help="Argument (repeatable)"),
    server_type: str = typer.Option("stdio", "--type", "-t", help="stdio, sse, streamableHttp"),
    base_url: Optional[str] = typer.Option(None, "--url", help="Base URL for network servers"),
    env: list[str] = typer.Option([], "--env", "-e", help="KEY=VALUE (repeatable)"),
    active: bool = typer.Option(True, "--active/--inactive", help="Enable the server"),
):
    """Add a new MCP server."""
    ctx = CliContext.get()
    try:
        entry = ServerEntry(
            id=server_id,
            name=name or server_id,
            command=command,
            args=list(args),
            server_type=server_type,
            base_url=base_url,
            env=_parse_env(list(env)) or None,
            is_active=active,
        )
    except ValueError as e:
        console.print(f"[red]Invalid server: {escape(str(e))}[/red]")
        raise typer.Exit(code=ERROR_EXIT_CODE)
    if not entry.is_known_type:
        console.print(f"[yellow]Unrecognized server type '{server_type}', keeping it.[/yellow]")

    try:
        ctx.repository.add_server(ctx.db_path, entry)
    except CherryMcpError as e:
        raise _fail(e)
    console.print(f"[green]Added server {server_id}[/green]")


@app.command("remove")
def remove(server_id: str = typer.Argument(help="Server ID to remove")):
    """Remove an MCP server."""
    ctx = CliContext.get()
    try:
        ctx.repository.remove_server(ctx.db_path, server_id)
    except CherryMcpError as e:
        raise _fail(e)
    console.print(f"[green]Removed server {server_id}[/green]")


@app.command("exists")
def exists(server_id: str = typer.Argument(help="Server ID")):
    """Exit 0 if the server is configured, 1 otherwise."""
    ctx = CliContext.get()
    try:
        found = ctx.repository.server_exists(ctx.db_path, server_id)
    except CherryMcpError as e:
        raise _fail(e)
    console.print("yes" if found else "no")
    raise typer.Exit(code=0 if found else 1)


def _set_active(server_id: str, active: bool) -> None:
    ctx = CliContext.get()
    try:
        ctx.repository.set_server_active(ctx.db_path, server_id, active)
    except CherryMcpError as e:
        raise _fail(e)
    state = "[green]enabled[/green]" if active else "[yellow]disabled[/yellow]"
    console.print(f"Server {server_id} {state}")


@app.command("enable")
def enable(server_id: str = typer.Argument(help="Server ID")):
    """Mark a server active."""
    _set_active(server_id, True)


@app.command("disable")
def disable(server_id: str = typer.Argument(help="Server ID")):
    """Mark a server inactive."""
    _set_active(server_id, False)


@app.command("dump")
def dump():
    """Print the decoded root object, with the MCP field expanded."""
    ctx = CliContext.get()
    try:
        root = ctx.repository.read_root(ctx.db_path)
        config = extract_mcp(root)
    except CherryMcpError as e:
        raise _fail(e)
    if config is not None:
        root = {**root, MCP_FIELD: config.to_wire()}
    console.print_json(codec.stringify_json(root))

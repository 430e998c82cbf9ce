"""
Agent Broker CLI

Command-line interface for running and administering the agent broker.
"""

import sys
import json
from pathlib import Path

import click
import httpx
import yaml
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from . import __version__
from .config import load_config, create_default_config


console = Console()

DEFAULT_PORT = 8080


def _base_url(port: int) -> str:
    return f"http://localhost:{port}"


def _fail(message: str) -> None:
    console.print(f"[red]✗[/red] {message}")
    sys.exit(1)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
        return f"{data.get('code', response.status_code)}: {data.get('message', '')}"
    except ValueError:
        return f"HTTP {response.status_code}"


@click.group()
@click.version_option(__version__, prog_name="agent-broker")
@click.option("--config", "-c", "config_path", type=click.Path(), help="Path to config file")
@click.pass_context
def cli(ctx, config_path: str):
    """Agent Broker - Registry and Discovery for A2A Agents"""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# =============================================================================
# Server Commands
# =============================================================================

@cli.command()
@click.option("--host", "-h", default=None, help="Host to bind to")
@click.option("--port", "-p", default=None, type=int, help="Port to bind to")
@click.pass_context
def start(ctx, host: str, port: int):
    """Start the Agent Broker server."""
    config_path = ctx.obj.get("config_path")
    if config_path and not Path(config_path).exists():
        _fail(f"Config file not found: {config_path}")

    config = load_config(config_path)
    shown_host = host or config.server.host
    shown_port = port or config.server.port

    console.print(Panel(
        f"[bold]Agent Broker v{__version__}[/bold]\n"
        f"Starting server on [cyan]http://{shown_host}:{shown_port}[/cyan]\n"
        f"Store: [cyan]{config.store.backend}[/cyan]",
        title="🚀 Starting"
    ))

    from .server import main as server_main
    server_main(config_path, host=host, port=port)


@cli.command()
@click.option("--port", "-p", default=None, type=int, help="Server port")
@click.pass_context
def status(ctx, port: int):
    """Show server health."""
    config_path = ctx.obj.get("config_path")
    if port is None:
        port = DEFAULT_PORT
        if config_path and Path(config_path).exists():
            port = load_config(config_path).server.port

    try:
        response = httpx.get(f"{_base_url(port)}/health")
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        _fail(f"Server not running: {e}")
        return

    checks = "\n".join(
        f"{name}: {'✓' if state == 'up' else '✗'}"
        for name, state in data.get("checks", {}).items()
    )
    if data.get("status") == "healthy":
        console.print(Panel(f"[bold green]Healthy[/bold green]\n\n{checks}", title="📊 Agent Broker Status"))
    else:
        console.print(Panel(f"[bold red]Unhealthy[/bold red]\n\n{checks}", title="📊 Agent Broker Status"))
        sys.exit(1)


@cli.command()
@click.option("--output", "-o", default="broker.yaml", type=click.Path(), help="Config file to write")
def init(output: str):
    """Initialize a new configuration file."""
    config_path = Path(output)

    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    config_path.write_text(create_default_config())
    console.print(f"[green]✓[/green] Created {config_path}")
    console.print("\nEdit the file to choose a store backend, then run:")
    console.print(f"  [cyan]agent-broker -c {config_path} start[/cyan]")


# =============================================================================
# Agent Commands
# =============================================================================

@cli.group()
def agents():
    """Manage registered agents."""
    pass


@agents.command("list")
@click.option("--tags", "-t", help="Comma-separated tags (any match)")
@click.option("--skills", "-s", help="Comma-separated skill IDs (any match)")
@click.option("--query", "-q", help="Search name and description")
@click.option("--limit", "-n", default=20, type=int, help="Max agents")
@click.option("--offset", default=0, type=int, help="Agents to skip")
@click.option("--port", "-p", default=DEFAULT_PORT, type=int, help="Server port")
def agents_list(tags: str, skills: str, query: str, limit: int, offset: int, port: int):
    """List registered agents."""
    params = {"limit": limit, "offset": offset}
    if tags:
        params["tags"] = tags
    if skills:
        params["skills"] = skills
    if query:
        params["q"] = query

    try:
        response = httpx.get(f"{_base_url(port)}/v1/admin/agents", params=params)
    except httpx.HTTPError as e:
        _fail(f"Failed to list agents: {e}")
        return
    if response.status_code != 200:
        _fail(f"Failed: {_error_message(response)}")

    data = response.json()
    if not data.get("agents"):
        console.print("[yellow]No agents registered[/yellow]")
        return

    table = Table(title="Registered Agents")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("Skills")
    table.add_column("Tags")
    table.add_column("Created", style="dim")

    for agent in data["agents"]:
        card = agent.get("agent_card", {})
        table.add_row(
            agent["agent_id"],
            card.get("name", ""),
            card.get("version", ""),
            ", ".join(agent.get("skills", [])),
            ", ".join(agent.get("tags", [])),
            agent.get("created_at", "")[:19],
        )

    console.print(table)
    page = data.get("pagination", {})
    more = " (more available)" if page.get("has_more") else ""
    console.print(f"\nShowing {len(data['agents'])} of {page.get('total', 0)}{more}")


@agents.command("get")
@click.argument("agent_id")
@click.option("--port", "-p", default=DEFAULT_PORT, type=int, help="Server port")
def agents_get(agent_id: str, port: int):
    """Show an agent's registration record."""
    try:
        response = httpx.get(f"{_base_url(port)}/v1/admin/agents/{agent_id}")
    except httpx.HTTPError as e:
        _fail(f"Failed: {e}")
        return
    if response.status_code != 200:
        _fail(f"Failed: {_error_message(response)}")
    console.print_json(data=response.json())


@agents.command("card")
@click.argument("agent_id")
@click.option("--port", "-p", default=DEFAULT_PORT, type=int, help="Server port")
def agents_card(agent_id: str, port: int):
    """Show an agent's public A2A card."""
    try:
        response = httpx.get(f"{_base_url(port)}/v1/agents/{agent_id}/card")
    except httpx.HTTPError as e:
        _fail(f"Failed: {e}")
        return
    if response.status_code != 200:
        _fail(f"Failed: {_error_message(response)}")
    console.print_json(data=response.json())


@agents.command("register")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--port", "-p", default=DEFAULT_PORT, type=int, help="Server port")
def agents_register(path: str, port: int):
    """
    Register an agent from a JSON or YAML file.

    The file holds the request body: agent_id, agent_card and optional tags.
    """
    text = Path(path).read_text()
    try:
        body = json.loads(text) if path.endswith(".json") else yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as e:
        _fail(f"Cannot parse {path}: {e}")
        return

    try:
        response = httpx.post(f"{_base_url(port)}/v1/admin/agents", json=body)
    except httpx.HTTPError as e:
        _fail(f"Failed to register agent: {e}")
        return
    if response.status_code != 201:
        _fail(f"Failed: {_error_message(response)}")

    data = response.json()
    console.print(f"[green]✓[/green] Registered agent: {data['agent_id']}")
    console.print(f"  Endpoint: {data.get('endpoint', '')}")
    console.print(f"  Skills: {', '.join(data.get('skills', []))}")


@agents.command("delete")
@click.argument("agent_id")
@click.option("--port", "-p", default=DEFAULT_PORT, type=int, help="Server port")
def agents_delete(agent_id: str, port: int):
    """Delete a registered agent."""
    try:
        response = httpx.delete(f"{_base_url(port)}/v1/admin/agents/{agent_id}")
    except httpx.HTTPError as e:
        _fail(f"Failed to delete agent: {e}")
        return
    if response.status_code != 204:
        _fail(f"Failed: {_error_message(response)}")
    console.print(f"[green]✓[/green] Deleted: {agent_id}")


# =============================================================================
# Main
# =============================================================================

def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()

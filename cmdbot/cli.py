import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import typer

from config.settings import settings
from cmdbot.core import DiscordBot
from cmdbot.exceptions import StorageUnavailable
from cmdbot.registry import CommandRegistry
from cmdbot.storage import StorageManager

app = typer.Typer(
    name="cmdbot",
    help="Custom command Discord bot",
    add_completion=False,
)
commands_app = typer.Typer(help="Inspect and manage registered custom commands.")
app.add_typer(commands_app, name="commands")


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


async def _with_registry(action):
    storage = StorageManager()
    try:
        await storage.connect()
        return await action(CommandRegistry(storage))
    finally:
        await storage.close()


def _run_storage_action(action):
    try:
        return asyncio.run(_with_registry(action))
    except StorageUnavailable as e:
        typer.echo(f"❌ Command store unavailable: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def run(
    dev: bool = typer.Option(False, "--dev", help="Run in development mode"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Set log level"),
) -> None:
    """Run the Discord bot."""
    if dev:
        os.environ["ENVIRONMENT"] = "development"

    setup_logging(log_level or ("DEBUG" if dev else settings.log_level))

    bot = DiscordBot()
    bot.run()


@app.command()
def init(
    directory: Optional[str] = typer.Option(None, help="Directory to initialize")
) -> None:
    """Write a starter .env file."""
    target_dir = Path(directory) if directory else Path.cwd()
    target_dir.mkdir(parents=True, exist_ok=True)

    env_file = target_dir / ".env"
    if env_file.exists():
        typer.echo(f"⚠️  {env_file} already exists, leaving it untouched")
        return

    env_file.write_text(
        """# Discord Bot Configuration
DISCORD_TOKEN=your_discord_bot_token_here
REDIS_URL=redis://localhost:6379/0
COMMAND_PERMISSION=MANAGE_MESSAGES
ENVIRONMENT=development
LOG_LEVEL=INFO
"""
    )
    typer.echo(f"✅ Bot project initialized in {target_dir}")


@app.command()
def health() -> None:
    """Check that the command store is reachable."""

    async def check() -> bool:
        storage = StorageManager()
        try:
            return await storage.health_check()
        finally:
            await storage.close()

    if not asyncio.run(check()):
        typer.echo("❌ Command store unreachable", err=True)
        raise typer.Exit(code=1)
    typer.echo("✅ Command store reachable")


@commands_app.command("list")
def list_commands(guild_id: str = typer.Argument(help="Guild (server) id")) -> None:
    """List the custom commands of a guild."""
    entries = _run_storage_action(lambda registry: registry.list(guild_id))

    if not entries:
        typer.echo("No command is registered on this server :(")
        return

    for trigger, record in entries:
        typer.echo(f"{trigger}\tauthor={record.author_id}\tinvocations={record.invocation_count}\t{record.output}")


@commands_app.command("show")
def show_command(
    guild_id: str = typer.Argument(help="Guild (server) id"),
    trigger: str = typer.Argument(help="The command to show"),
) -> None:
    """Show one custom command of a guild without invoking it."""
    record = _run_storage_action(lambda registry: registry.get(guild_id, trigger))

    if record is None:
        typer.echo("No such command exists")
        raise typer.Exit(code=1)
    typer.echo(f"Command: {trigger}")
    typer.echo(f"Author: {record.author_id}")
    typer.echo(f"Invocations: {record.invocation_count}")
    typer.echo(f"Output: {record.output}")


@commands_app.command("remove")
def remove_command(
    guild_id: str = typer.Argument(help="Guild (server) id"),
    trigger: str = typer.Argument(help="The command to remove"),
) -> None:
    """Remove one custom command from a guild."""
    removed = _run_storage_action(lambda registry: registry.remove(guild_id, trigger))

    if not removed:
        typer.echo("No such command exists")
        raise typer.Exit(code=1)
    typer.echo(f"Removed `{trigger}` command")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

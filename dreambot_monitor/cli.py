#!/usr/bin/env python3
"""
Command-line interface for the DreamBot log monitor.
"""

import sys
import asyncio
import logging
from dataclasses import replace

import click
from rich.console import Console
from rich.table import Table
from rich.logging import RichHandler
from rich.markup import escape

from .config.loader import load_monitor_config
from .config.settings import get_settings
from .monitoring.hooks import EventHooks, MonitorEvent
from .monitoring.monitor import LogMonitor
from .notifications.webhook import WebhookDispatcher
from .parser.patterns import PatternRuleSet


# Set up rich console for pretty output
console = Console()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(console=console, rich_tracebacks=True)],
)
logger = logging.getLogger(__name__)

LEVEL_STYLES = {
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "info": "cyan",
}


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, verbose):
    """DreamBot Log Monitor - log events to Discord webhooks"""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    get_settings().setup_logging(verbose)


def load_settings(poll_interval=None):
    """Get runtime settings, apply CLI overrides and validate them."""
    settings = get_settings()
    if poll_interval is not None:
        settings = replace(settings, watcher=replace(settings.watcher, poll_interval=poll_interval))

    try:
        settings.validate()
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)
    return settings


def print_event(event: MonitorEvent):
    """Log console subscriber that echoes monitor events to the terminal."""
    style = LEVEL_STYLES.get(event.level, "white")
    bot = f"[bold]{event.bot}[/bold] " if event.bot else ""
    console.print(f"[dim]{event.timestamp}[/dim] [{style}]{event.type}[/{style}] {bot}{escape(event.content)}")


@cli.command()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Monitor config file")
@click.option("--root", type=click.Path(file_okay=False), help="Log directory (overrides BASE_LOG_DIR)")
@click.option("--poll-interval", type=float, default=None, help="Seconds between directory polls")
@click.pass_context
def watch(ctx, config_path, root, poll_interval):
    """Watch bot log files and send notifications until interrupted."""
    if poll_interval is not None and poll_interval <= 0:
        raise click.BadParameter("must be greater than zero", param_hint="--poll-interval")

    settings = load_settings(poll_interval)
    if ctx.obj.get("verbose") or settings.debug:
        settings.log_configuration()

    config = load_monitor_config(config_path or settings.config_path)
    root = root or config.base_log_dir
    if not root:
        console.print("[red]No log directory configured. Set BASE_LOG_DIR or pass --root.[/red]")
        sys.exit(1)

    try:
        asyncio.run(_watch(config, root, settings.watcher, settings.webhook))
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")
    except (FileNotFoundError, NotADirectoryError) as e:
        console.print(f"[red]✗ Could not start monitoring: {e}[/red]")
        sys.exit(1)


async def _watch(config, root, watcher_settings, webhook_settings):
    hooks = EventHooks()
    hooks.subscribe(print_event)

    dispatcher = WebhookDispatcher(
        username=webhook_settings.username,
        timeout=webhook_settings.timeout,
    )
    async with dispatcher:
        monitor = LogMonitor(
            config,
            dispatcher=dispatcher,
            watcher_settings=watcher_settings,
            hooks=hooks,
        )
        await monitor.start(root)
        try:
            await monitor.wait_until_ready()
            console.print(f"[bold green]Watching[/bold green] {root} [dim](Ctrl-C to stop)[/dim]")
            await asyncio.Event().wait()
        finally:
            await monitor.stop()
            stats = monitor.get_monitoring_status()
            console.print(
                f"[cyan]Lines:[/cyan] {stats['lines_processed']:,}  "
                f"[cyan]Sent:[/cyan] {stats['webhooks']['sent']}  "
                f"[cyan]Failed:[/cyan] {stats['webhooks']['failed']}"
            )


@cli.command("check-config")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Monitor config file")
def check_config(config_path):
    """Validate the monitor configuration and show a summary."""
    config = load_monitor_config(config_path or get_settings().config_path)
    result = config.validate_config()
    summary = config.summary()

    table = Table(title="Monitor Configuration", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Log directory", summary["base_log_dir"] or "[red]not set[/red]")
    table.add_row("Chat webhook", "configured" if summary["bot_chat_webhook_configured"] else "[yellow]not set[/yellow]")
    table.add_row("Bots", str(summary["bot_count"]))
    console.print(table)

    if config.bots:
        bot_table = Table(title="Bots")
        bot_table.add_column("Bot", style="green")
        bot_table.add_column("Webhook", width=10)
        bot_table.add_column("Launch command")
        for name in summary["bot_names"]:
            bot = config.bots[name]
            bot_table.add_row(
                name,
                "✓" if bot.webhook_url else "[yellow]-[/yellow]",
                bot.launch_command or "",
            )
        console.print(bot_table)

    for warning in result.warnings:
        console.print(f"[yellow]! {warning}[/yellow]")
    for error in result.errors:
        console.print(f"[red]✗ {error}[/red]")

    if not result.success:
        sys.exit(1)
    console.print("[bold green]✓ Configuration is valid[/bold green]")


@cli.command("test-webhook")
@click.argument("bot_name")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Monitor config file")
@click.option("--message", default="Test notification from DreamBot Log Monitor", help="Message text")
def test_webhook(bot_name, config_path, message):
    """Send a test message to a bot's webhook ("chat" for the chat webhook)."""
    settings = load_settings()
    config = load_monitor_config(config_path or settings.config_path)

    if bot_name == "chat":
        url = config.bot_chat_webhook_url
    else:
        url = config.get_destination_url(bot_name)

    if not url:
        console.print(f"[red]✗ No webhook configured for {bot_name}[/red]")
        sys.exit(1)

    async def send():
        async with WebhookDispatcher(
            username=settings.webhook.username,
            timeout=settings.webhook.timeout,
        ) as dispatcher:
            return await dispatcher.send(url, message, f"test ({bot_name})")

    if asyncio.run(send()):
        console.print(f"[bold green]✓ Test message delivered for {bot_name}[/bold green]")
    else:
        console.print(f"[red]✗ Test message failed for {bot_name}[/red]")
        sys.exit(1)


@cli.command()
@click.argument("line")
def classify(line):
    """Show which event a single log line produces."""
    event = PatternRuleSet().classify(line)
    if event is None:
        console.print("[dim]No match[/dim]")
        return

    console.print(f"[bold cyan]{event.kind.label}[/bold cyan]")
    for key, value in event.to_dict().items():
        if key == "kind":
            continue
        console.print(f"  [cyan]{key}:[/cyan] {escape(repr(value))}")


def main():
    """Entry point for the dreambot-monitor command."""
    cli()


if __name__ == "__main__":
    main()

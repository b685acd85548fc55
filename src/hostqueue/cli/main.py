"""
Rich CLI interface for hostqueue.

Inspect configuration and watch the scheduler admit simulated requests.
"""

from __future__ import annotations

import asyncio
import time

import typer
from rich.console import Console
from rich.table import Table

from hostqueue import __version__
from hostqueue.core.config import get_settings
from hostqueue.core.models import QueueOptions, RequestOptions
from hostqueue.queue.router import QueueRouter
from hostqueue.utils.logging import get_logger, setup_logging

app = typer.Typer(
    name="hostqueue",
    help="Per-host admission control for outbound requests",
    no_args_is_help=True,
)
console = Console()


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold cyan]hostqueue[/bold cyan] v{__version__}")


@app.command()
def config():
    """Show current configuration."""
    settings = get_settings()

    table = Table(title="hostqueue Configuration", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Max Concurrent", str(settings.queue.max_concurrent))
    table.add_row("Delay", f"{settings.queue.delay_ms}ms")
    table.add_row("Debug", str(settings.queue.debug))
    table.add_row("Log Level", settings.log.level)
    table.add_row("Log Format", settings.log.format)

    console.print(table)


async def run_simulation(
    router: QueueRouter,
    requests: int,
    groups: int,
    work_ms: int = 0,
    priority_desc: bool = False,
) -> list[tuple[int, str, int, int | None, float]]:
    """
    Push simulated requests through a router.

    Returns:
        (arrival, group, request_id, priority, admitted_ms) per request,
        in admission order
    """
    admissions: list[tuple[int, str, int, int | None, float]] = []
    start = time.monotonic()

    async def one(arrival: int) -> None:
        group_key = f"host-{arrival % groups}"
        priority = requests - arrival if priority_desc else None
        async with router.slot(group_key, RequestOptions(priority=priority)) as request_id:
            elapsed_ms = (time.monotonic() - start) * 1000
            admissions.append((arrival, group_key, request_id, priority, elapsed_ms))
            if work_ms:
                await asyncio.sleep(work_ms / 1000)

    await asyncio.gather(*(one(i) for i in range(requests)))
    return admissions


@app.command()
def simulate(
    requests: int = typer.Option(10, "--requests", "-n", min=1, help="Number of requests"),
    groups: int = typer.Option(1, "--groups", "-g", min=1, help="Number of destination groups"),
    max_concurrent: int = typer.Option(None, "--max-concurrent", "-c", min=1, help="Slots per group"),
    delay_ms: int = typer.Option(None, "--delay-ms", "-d", min=0, help="Cooldown in milliseconds"),
    work_ms: int = typer.Option(0, "--work-ms", min=0, help="Simulated request duration"),
    priority_desc: bool = typer.Option(False, "--priority-desc", help="Give later arrivals higher priority"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every admission"),
):
    """Simulate simultaneous requests and show when each is admitted."""
    setup_logging(level="INFO" if verbose else "WARNING", json_format=False)
    logger = get_logger("hostqueue.cli")

    defaults = QueueOptions.from_settings()
    options = QueueOptions(
        max_concurrent=max_concurrent or defaults.max_concurrent,
        delay_ms=delay_ms if delay_ms is not None else defaults.delay_ms,
        debug=verbose,
    )
    router = QueueRouter(options)
    logger.info("Starting simulation", requests=requests, groups=groups)

    admissions = asyncio.run(
        run_simulation(router, requests, groups, work_ms, priority_desc)
    )
    router.teardown()

    table = Table(
        title=f"Admissions (max_concurrent={options.max_concurrent}, delay={options.delay_ms}ms)",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Arrival", justify="right")
    table.add_column("Group", style="cyan")
    table.add_column("Request ID", justify="right")
    table.add_column("Priority", justify="right")
    table.add_column("Admitted At", justify="right", style="green")

    for arrival, group_key, request_id, priority, elapsed_ms in admissions:
        table.add_row(
            str(arrival),
            group_key,
            str(request_id),
            "-" if priority is None else str(priority),
            f"{elapsed_ms:.0f}ms",
        )

    console.print(table)

    total_ms = admissions[-1][4] if admissions else 0.0
    console.print(f"\n[dim]Last admission after {total_ms:.0f}ms across {groups} group(s)[/dim]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()

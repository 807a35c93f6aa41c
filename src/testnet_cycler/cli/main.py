"""
Testnet Cycler CLI

Command-line interface for the cycle scripts:
- Interactive menu to pick a script and start it
- Direct runs of a named script
- Listing of the available presets
"""

import asyncio
import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from web3 import Web3

from testnet_cycler.config.environment import get_env_manager
from testnet_cycler.config.scripts import SCRIPTS, ScriptConfig, get_all_scripts
from testnet_cycler.core.error_handling import CyclerError
from testnet_cycler.core.runner import run_script
from testnet_cycler.core.types import RunSummary, SchedulingMode
from testnet_cycler.monitoring.logging_config import configure_logging

EXIT_INVALID = 1
EXIT_INTERRUPTED = 130

# Initialize rich console
console = Console()

# -----------------------------------------------------------------------------
# Helper Functions
# -----------------------------------------------------------------------------

def parse_cycle_count(value: Optional[str]) -> int:
    """Cycle count from user input, empty input means one cycle"""
    if value is None or not value.strip():
        return 1
    try:
        count = int(value.strip())
    except ValueError:
        raise ValueError(f"Invalid number of cycles: {value!r}") from None
    if count <= 0:
        raise ValueError("Number of cycles must be a positive number")
    return count

def parse_interval_hours(value: Optional[str]) -> Optional[float]:
    """Interval in hours from user input, empty input means random delays"""
    if value is None or not value.strip():
        return None
    try:
        hours = float(value.strip())
    except ValueError:
        raise ValueError(f"Invalid interval: {value!r}") from None
    if hours <= 0:
        raise ValueError("Interval must be a positive number of hours")
    return hours

def format_ether(wei: int) -> str:
    return f"{Web3.from_wei(wei, 'ether'):f}"

def display_scripts():
    """Display the available script presets"""
    table = Table(title="Available Scripts")
    table.add_column("Name", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Chain", style="blue")
    table.add_column("Flow", style="magenta")
    table.add_column("Amount", style="yellow")
    table.add_column("Delay (s)", style="dim")

    for script in get_all_scripts():
        low, high = script.amount_range
        table.add_row(
            script.name,
            script.title,
            script.chain,
            script.flow,
            f"{low} - {high}",
            f"{script.delay_range[0]:g} - {script.delay_range[1]:g}"
        )

    console.print(table)

def display_summary(summary: RunSummary):
    """Display the cycles of a finished run"""
    table = Table(title="Run Summary")
    table.add_column("Cycle", style="dim")
    table.add_column("Amount", style="cyan")
    table.add_column("Steps", style="green")
    table.add_column("Fee Paid", style="yellow")
    table.add_column("Outcome", style="magenta")

    for cycle in summary.cycles:
        steps = ", ".join(f"{step.operation}:{step.status.value}" for step in cycle.steps)
        table.add_row(
            str(cycle.index),
            format_ether(cycle.amount),
            steps or "-",
            format_ether(cycle.fee_paid),
            cycle.outcome.value
        )

    console.print(table)
    if summary.succeeded:
        console.print(
            f"[bold green]All {summary.requested_cycles} cycles completed successfully[/bold green]"
        )
    else:
        console.print(
            f"[bold red]Run aborted after {summary.completed_cycles} of "
            f"{summary.requested_cycles} cycles:[/bold red] {summary.error}"
        )

def start_script(script: ScriptConfig, cycles: Optional[str], interval_hours: Optional[str], log_level: Optional[str]):
    """Prompt for missing run options, run the script and exit with its status"""
    try:
        if cycles is None:
            cycles = click.prompt(
                "How many cycles would you like to run? (Press enter for 1)",
                default="", show_default=False
            )
        cycle_count = parse_cycle_count(cycles)

        if interval_hours is None:
            interval_hours = click.prompt(
                "How often (in hours) would you like the cycle to run? (Press enter for random delay)",
                default="", show_default=False
            )
        hours = parse_interval_hours(interval_hours)
    except click.Abort:
        console.print("\n[yellow]Stopped by user[/yellow]")
        sys.exit(EXIT_INTERRUPTED)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        sys.exit(EXIT_INVALID)

    env = get_env_manager()
    configure_logging(log_level or env.log_level())

    if hours is None:
        mode, interval_seconds = SchedulingMode.SEQUENTIAL, None
        console.print(f"[bold]Running {script.title}: {cycle_count} cycle(s) with random delays[/bold]")
    else:
        mode, interval_seconds = SchedulingMode.FIXED_INTERVAL, hours * 3600
        console.print(f"[bold]Running {script.title}: {cycle_count} cycle(s) every {hours:g} hour(s)[/bold]")

    try:
        summary = asyncio.run(run_script(
            script,
            cycle_count,
            env.private_key(),
            rpc_url=env.rpc_url_override(script.chain),
            mode=mode,
            interval_seconds=interval_seconds
        ))
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped by user[/yellow]")
        sys.exit(EXIT_INTERRUPTED)
    except (CyclerError, ConnectionError) as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        sys.exit(EXIT_INVALID)

    display_summary(summary)
    sys.exit(summary.exit_code)

# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@click.group()
def cli():
    """Repeat wrap/unwrap and staking transaction cycles on EVM testnets"""
    pass

@cli.command(name="list")
def list_scripts():
    """List the available scripts"""
    display_scripts()

@cli.command()
@click.argument("script", type=click.Choice(list(SCRIPTS)))
@click.option("--cycles", default=None, help="Number of cycles to run")
@click.option("--interval-hours", default=None, help="Run a cycle every H hours instead of after a random delay")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
def run(script, cycles, interval_hours, log_level):
    """Run SCRIPT for a number of cycles"""
    start_script(SCRIPTS[script], cycles, interval_hours, log_level)

@cli.command()
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
def menu(log_level):
    """Pick a script from a menu and run it"""
    scripts = get_all_scripts()

    console.print("[bold]Select a script to run:[/bold]")
    for number, script in enumerate(scripts, start=1):
        console.print(f"  {number}. {script.title}")
    console.print(f"  {len(scripts) + 1}. Exit")

    try:
        choice = click.prompt("Enter your choice", default="", show_default=False)
    except click.Abort:
        console.print("\n[yellow]Stopped by user[/yellow]")
        sys.exit(EXIT_INTERRUPTED)

    try:
        selected = int(choice.strip())
    except ValueError:
        selected = 0

    if selected == len(scripts) + 1:
        console.print("Exiting...")
        sys.exit(0)
    if not 1 <= selected <= len(scripts):
        console.print(f"[bold red]Error:[/bold red] Invalid choice: {choice!r}")
        sys.exit(EXIT_INVALID)

    start_script(scripts[selected - 1], None, None, log_level)

# -----------------------------------------------------------------------------
# Main
# -----------------------------------------------------------------------------

def main():
    """Run the CLI"""
    cli(prog_name="testnet-cycler")

if __name__ == "__main__":
    main()

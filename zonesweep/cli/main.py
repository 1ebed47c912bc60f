"""
ZoneSweep CLI - Command Line Interface
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from zonesweep.core.config import ConfigError, ConfigManager, ZoneSweepConfig
from zonesweep.core.orchestrator import Orchestrator
from zonesweep.core.records import ZoneTransferResult
from zonesweep.core.utils import read_domains_from_file
from zonesweep.reports import (
    default_report_path,
    format_transfer_report,
    generate_csv_report,
    generate_json_report,
)


app = typer.Typer(
    name="zonesweep",
    help="ZoneSweep - DNS zone transfer (AXFR) auditing",
    add_completion=False,
    no_args_is_help=True
)

console = Console()

COMMANDS = ['transfer', 'version', 'config', '--help', '-h']


def log_info(msg: str) -> None:
    console.print(f"[blue]{escape('[*]')}[/blue] {escape(msg)}")


def log_error(msg: str) -> None:
    console.print(f"[red]{escape('[!]')}[/red] {escape(msg)}")


def log_success(msg: str) -> None:
    console.print(f"[green]{escape('[+]')}[/green] {escape(msg)}")


def log_unsuccess(msg: str) -> None:
    console.print(f"[red]{escape('[-]')}[/red] {escape(msg)}")


def setup_logging(level: str, log_file: Optional[str] = None) -> None:
    """Configure library logging to stderr, plus an optional log file."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def load_config(config_file: Optional[Path] = None) -> ConfigManager:
    """Load configuration, exiting on errors."""
    manager = ConfigManager(project_config_path=config_file)
    try:
        manager.load()
        return manager
    except ConfigError as e:
        log_error(str(e))
        sys.exit(1)


def print_records(result: ZoneTransferResult) -> None:
    """Print every record of a successful transfer between banners."""
    header = f"=== {result.domain}@{result.nameserver} ======================================="
    log_success(header)
    for record in result.records:
        log_success(
            f"Name: {record.name}, Type: {record.type}, TTL: {record.ttl}, Value: {record.value}"
        )
    log_success("=" * len(header))


def print_summary(results: List[ZoneTransferResult]) -> None:
    """Print a table of all transfer attempts."""
    table = Table(show_header=True, header_style="bold magenta", title="Zone Transfer Attempts")
    table.add_column("Domain")
    table.add_column("Nameserver")
    table.add_column("Status")
    table.add_column("Records", justify="right")

    for result in results:
        status = "[green]SUCCESS[/green]" if result.success else "[red]FAILED[/red]"
        table.add_row(
            escape(result.domain),
            escape(result.nameserver),
            status,
            str(len(result.records)) if result.success else "-",
        )

    console.print(table)

    succeeded = sum(1 for r in results if r.success)
    console.print(f"[bold]Attempts:[/bold] {len(results)}  [bold]Successful:[/bold] {succeeded}")


def resolve_output_paths(
    config: ZoneSweepConfig,
    json_output: Optional[Path],
    csv_output: Optional[Path],
    text_output: Optional[Path],
) -> Dict[str, Path]:
    """
    Work out which reports to write and where.

    An explicit file for a format enables that format. Enabled formats
    without a file get a timestamped default name.
    """
    explicit = {
        "json": json_output or (Path(config.output.json_file) if config.output.json_file else None),
        "csv": csv_output or (Path(config.output.csv_file) if config.output.csv_file else None),
        "txt": text_output or (Path(config.output.text_file) if config.output.text_file else None),
    }

    paths = {}
    for fmt, path in explicit.items():
        if path is not None or fmt in config.output.formats:
            paths[fmt] = path or default_report_path(fmt)
    return paths


@app.command(name="transfer", help="Attempt DNS zone transfers (AXFR) for one or more domains")
def transfer(
    domains: Optional[List[str]] = typer.Argument(None, help="Domains to transfer (domain or domain@nameserver)"),
    domain_options: Optional[List[str]] = typer.Option(None, "-d", "--domains", help="Domain to transfer (repeatable)"),
    domains_file: Optional[Path] = typer.Option(None, "-f", "--file", help="File containing domain names to transfer"),
    nameserver: Optional[str] = typer.Option(None, "-n", "--nameserver", help="DNS server for resolving domain nameservers"),

    # Transfer options
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Zone transfer read timeout in seconds"),
    lifetime: Optional[float] = typer.Option(None, "--lifetime", help="Total time limit per zone transfer in seconds"),
    workers: Optional[int] = typer.Option(None, "--workers", help="Parallel transfers per domain"),
    last_envelope_only: Optional[bool] = typer.Option(
        None, "--last-envelope-only/--all-envelopes",
        help="Keep only the records of the last transfer message"
    ),

    # Output
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Output formats (comma-separated: json,csv,txt)"),
    json_output: Optional[Path] = typer.Option(None, "-j", "--json", help="Output file for json format"),
    csv_output: Optional[Path] = typer.Option(None, "-c", "--csv", help="Output file for csv format"),
    text_output: Optional[Path] = typer.Option(None, "--text", help="Output file for text format"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Project config file"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """
    Attempt zone transfers for each domain against each of its nameservers.

    Examples:

      # Transfer against every advertised nameserver
      zonesweep transfer zonetransfer.me

      # Transfer against one specific nameserver
      zonesweep transfer zonetransfer.me@nsztm1.digi.ninja

      # Domains from a file, JSON and CSV output
      zonesweep transfer -f domains.txt -o json,csv
    """
    manager = load_config(config_file)
    config = manager.get_config()

    # CLI options take precedence over config files and environment
    if nameserver:
        config.resolver.nameserver = nameserver
    if timeout is not None:
        config.transfer.timeout = timeout
    if lifetime is not None:
        config.transfer.lifetime = lifetime
    if workers is not None:
        config.transfer.workers = workers
    if last_envelope_only is not None:
        config.transfer.keep_last_envelope = last_envelope_only
    if output:
        config.output.formats = [f.strip().lower() for f in output.split(",") if f.strip()]
    if verbose:
        config.output.verbose = True
    if no_color:
        config.output.color_enabled = False

    console.no_color = not config.output.color_enabled

    errors = manager.validate()
    if errors:
        for error in errors:
            log_error(error)
        sys.exit(1)

    try:
        setup_logging(config.advanced.log_level, config.advanced.log_file)
    except OSError as e:
        log_error(f"Could not open log file {config.advanced.log_file}: {e}")
        sys.exit(1)

    tokens = list(domains or []) + list(domain_options or [])
    if domains_file:
        log_info("Reading domains from file")
        try:
            tokens.extend(read_domains_from_file(domains_file))
        except (OSError, ValueError) as e:
            log_error(str(e))
            sys.exit(1)

    output_paths = resolve_output_paths(config, json_output, csv_output, text_output)
    for fmt, path in output_paths.items():
        log_info(f"Using {fmt} output file: {path}")

    def progress_callback(event_type: str, data: Any):
        if event_type == "status":
            log_info(data)
        elif event_type == "nameservers" and config.output.verbose:
            log_info(f"Nameservers for {data['domain']}: {', '.join(data['nameservers'])}")
        elif event_type == "lookup_failed":
            log_error(f"Failed to get nameservers for {data['domain']}: {data['error']}")
        elif event_type == "attempt" and config.output.verbose:
            log_info(f"Performing zone transfer for {data['domain']} against {data['nameserver']}")
        elif event_type == "zone_transfer":
            if data.success:
                log_success(
                    f"Zone transfer successful for {data.domain} against {data.nameserver}, "
                    f"identified {len(data.records)} records"
                )
                if config.output.verbose:
                    print_records(data)
            else:
                log_unsuccess(
                    f"Zone transfer failed for {data.domain} against {data.nameserver}: {data.error}"
                )

    orchestrator = Orchestrator(config, callback=progress_callback)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True
        ) as progress:
            progress.add_task("Transferring...", total=None)
            results = orchestrator.run(tokens)
    except ConfigError as e:
        log_error(str(e))
        if not tokens:
            console.print("Run [bold]zonesweep transfer --help[/bold] for usage.")
        sys.exit(1)

    console.print()
    print_summary(results)

    writers = {
        "json": generate_json_report,
        "csv": generate_csv_report,
    }
    for fmt, path in output_paths.items():
        try:
            if fmt == "txt":
                path.write_text(format_transfer_report(results), encoding="utf-8")
            else:
                writers[fmt](results, path)
        except OSError as e:
            log_error(f"Could not write {fmt} report {path}: {e}")
            sys.exit(1)
        console.print(f"[green]✓[/green] {fmt.upper()} report saved to: {escape(str(path))}")


@app.command(name="version")
def show_version():
    """Show version information."""
    from zonesweep import __version__
    console.print(f"[bold cyan]ZoneSweep[/bold cyan] version [yellow]{__version__}[/yellow]")


@app.command(name="config")
def manage_config(
    action: str = typer.Argument(..., help="Action: show, init, get, set, validate"),
    key: Optional[str] = typer.Argument(None, help="Config key (e.g., transfer.timeout)"),
    value: Optional[str] = typer.Argument(None, help="Value to set"),
    section: Optional[str] = typer.Option(None, "--section", "-s", help="Show specific section"),
    file_path: Optional[Path] = typer.Option(None, "--file", "-f", help="Config file path"),
    project: bool = typer.Option(False, "--project", "-p", help="Create/use project-level config"),
):
    """
    Manage ZoneSweep configuration.

    Configuration priority (highest to lowest):
      1. CLI arguments
      2. Environment variables (ZONESWEEP_*)
      3. Project config (.zonesweep.toml)
      4. User config (~/.zonesweep/config.toml)
      5. Built-in defaults

    Examples:

      zonesweep config show

      zonesweep config show --section transfer

      zonesweep config init

      zonesweep config get transfer.timeout

      zonesweep config set transfer.timeout 10

      zonesweep config validate
    """
    manager = ConfigManager(user_config_path=None if project else file_path)

    if action == "show":
        try:
            manager.load()
            output = manager.show_config(section=section)
        except ConfigError as e:
            log_error(str(e))
            sys.exit(1)

        sources = manager.get_loaded_sources()
        console.print(f"[dim]Loaded from: {', '.join(sources)}[/dim]\n")
        console.print(escape(output))

    elif action == "init":
        config_path = file_path
        if not config_path:
            if project:
                config_path = Path.cwd() / ConfigManager.PROJECT_CONFIG_NAME
            else:
                config_path = manager.user_config_path

        try:
            path = manager.init_config(path=config_path)
        except ConfigError as e:
            log_error(str(e))
            sys.exit(1)

        console.print(f"[green]✓[/green] Configuration file created: {path}")
        console.print("\nEdit the file to customize your settings.")

    elif action == "get":
        if not key:
            log_error("Key required (e.g., transfer.timeout)")
            sys.exit(1)

        try:
            manager.load()
            value_result = manager.get_value(key)
        except (ConfigError, KeyError) as e:
            log_error(str(e))
            sys.exit(1)

        console.print(escape(f"{key} = {value_result}"))

    elif action == "set":
        if not key or value is None:
            log_error("Key and value required")
            sys.exit(1)

        try:
            manager.load()
            manager.set_value(key, value)
            manager.save_user_config()
        except (ConfigError, KeyError, ValueError) as e:
            log_error(str(e))
            sys.exit(1)

        console.print(f"[green]✓[/green] Set {escape(key)} = {escape(value)}")

    elif action == "validate":
        try:
            manager.load()
        except ConfigError as e:
            log_error(str(e))
            sys.exit(1)

        errors = manager.validate()
        if errors:
            console.print("[red]Configuration validation failed:[/red]\n")
            for error in errors:
                console.print(f"  • {error}")
            sys.exit(1)

        console.print("[green]✓[/green] Configuration is valid")
        console.print(f"[dim]Loaded from: {', '.join(manager.get_loaded_sources())}[/dim]")

    else:
        log_error(f"Unknown action '{action}'")
        console.print("Valid actions: show, init, get, set, validate")
        sys.exit(1)


def main():
    """Main entry point."""
    # A bare domain list runs the transfer command
    if len(sys.argv) > 1 and sys.argv[1] not in COMMANDS:
        sys.argv.insert(1, 'transfer')

    app()


if __name__ == "__main__":
    main()

"""
mcspy/cli/app.py - Main CLI entry point

Click based command line for inspecting the keys stored in memcache
servers.

Command structure:
    mcspy report                    # usage report (default analysis)
    mcspy stats                     # runtime and slab statistics
    mcspy keys [--raw]              # list keys
    mcspy dump-files                # write item values to files
    mcspy deep-search <text>        # search item values
    mcspy item <key>                # fetch one item from every server
    mcspy server-config             # stats settings of every server

    Legacy aliases (report:drupal, report:stats, dump:keys, dump:files,
    backup, deep, item:get, get, config:server) are registered as hidden
    commands.

Usage:
    $ mcspy report --servers cache1:11211,cache2 --key-grep views
    $ mcspy keys --cached --raw
    $ python -m mcspy.cli.app --version
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager, nullcontext
from typing import Any

import click
from click import Command, Context

from mcspy.cli.ui import configure_logging, print_error, print_note, print_warning, scan_progress
from mcspy.core.config import ENV_DUMP_FOLDER, ENV_SERVERS, McSpyConfig, get_version, load_config
from mcspy.core.exceptions import McSpyError, format_error_for_user
from mcspy.core.parallel import quiet_mode
from mcspy.core.scan import KeyDumpCollector

logger = logging.getLogger(__name__)

VERSION = get_version()

# primary command -> hidden aliases
COMMAND_ALIASES: dict[str, tuple[str, ...]] = {
    "report": ("report:drupal",),
    "stats": ("report:stats",),
    "keys": ("dump:keys",),
    "dump-files": ("dump:files", "backup"),
    "deep-search": ("deep",),
    "item": ("item:get", "get"),
    "server-config": ("config:server",),
}


# =============================================================================
# Shared options
# =============================================================================


def common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command"""
    options = [
        click.option(
            "--servers",
            "--server",
            "servers",
            default=None,
            help=f"Comma separated host[:port] list (default: ${ENV_SERVERS} or localhost:11211)",
        ),
        click.option(
            "--dump-folder",
            default=None,
            type=click.Path(file_okay=False),
            help=f"Folder for key dumps (default: ${ENV_DUMP_FOLDER} or <tmp>/mcspy-dump)",
        ),
        click.option(
            "--key-grep",
            "--key-search",
            "key_grep",
            default=None,
            help="Only keys containing this text",
        ),
        click.option("--slab", type=int, default=None, help="Only this slab (1-42)"),
        click.option(
            "--refresh/--cached",
            "refresh",
            default=True,
            help="Rescan servers (default) or reuse the existing key dump",
        ),
        click.option("--no-refresh", "no_refresh", is_flag=True, hidden=True),
        click.option("-w", "--workers", type=int, default=1, show_default=True, help="Servers scanned in parallel"),
        click.option("-q", "--quiet", is_flag=True, help="Minimal output"),
        click.option("-v", "--verbose", is_flag=True, help="Show INFO logs"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_config(
    servers: str | None,
    dump_folder: str | None,
    key_grep: str | None,
    slab: int | None,
    refresh: bool,
    no_refresh: bool,
    workers: int,
    quiet: bool,
    verbose: bool,
) -> McSpyConfig:
    return load_config(
        servers=servers,
        dump_folder=dump_folder,
        slab=slab,
        key_grep=key_grep,
        refresh=refresh and not no_refresh,
        max_workers=workers,
        quiet=quiet,
        verbose=verbose,
    )


@contextmanager
def command_context(options: dict[str, Any]) -> Generator[McSpyConfig, None, None]:
    """Build the config and run the command body with logging/quiet set up

    mcspy errors are printed and turned into exit code 1.
    """
    configure_logging(options.get("verbose", False))
    with quiet_mode() if options.get("quiet") else nullcontext():
        try:
            yield build_config(**options)
        except McSpyError as e:
            logger.debug("command failed", exc_info=True)
            print_error(format_error_for_user(e))
            raise SystemExit(1) from e


def with_config(func: Callable[..., Any]) -> Callable[..., Any]:
    """Pass a McSpyConfig built from the shared options as first argument"""

    @common_options
    @functools.wraps(func)
    def wrapper(
        servers: str | None,
        dump_folder: str | None,
        key_grep: str | None,
        slab: int | None,
        refresh: bool,
        no_refresh: bool,
        workers: int,
        quiet: bool,
        verbose: bool,
        **kwargs: Any,
    ) -> None:
        options = {
            "servers": servers,
            "dump_folder": dump_folder,
            "key_grep": key_grep,
            "slab": slab,
            "refresh": refresh,
            "no_refresh": no_refresh,
            "workers": workers,
            "quiet": quiet,
            "verbose": verbose,
        }
        with command_context(options) as config:
            func(config, **kwargs)

    return wrapper


@contextmanager
def scanning_collector(config: McSpyConfig) -> Generator[KeyDumpCollector, None, None]:
    """KeyDumpCollector reporting progress while it scans"""
    with scan_progress("Scanning slabs") as tracker:
        yield KeyDumpCollector(config, notify=print_note, progress_tracker=tracker)


# =============================================================================
# Commands
# =============================================================================


@click.group()
@click.version_option(VERSION, prog_name="mcspy")
def cli() -> None:
    """mcspy - memcache key inspection"""


@cli.command("report")
@click.option("--cleanup", is_flag=True, help="Delete the key dumps afterwards")
@with_config
def report_cmd(config: McSpyConfig, cleanup: bool) -> None:
    """Key usage report: prefixes, bins, slabs and key patterns"""
    from mcspy.reports.usage import run_usage_report

    with scanning_collector(config) as collector:
        collector.refresh_if_needed()
    run_usage_report(config, collector, cleanup=cleanup)


@cli.command("stats")
@with_config
def stats_cmd(config: McSpyConfig) -> None:
    """Runtime and slab statistics"""
    from mcspy.reports.stats import run_stats_report

    run_stats_report(config)


@cli.command("keys")
@click.option("--raw", is_flag=True, help="Raw cachedump lines instead of parsed keys")
@with_config
def keys_cmd(config: McSpyConfig, raw: bool) -> None:
    """List keys"""
    from mcspy.reports.keys import run_keys_listing

    with scanning_collector(config) as collector:
        collector.refresh_if_needed()
    run_keys_listing(collector, raw=raw)


@cli.command("dump-files")
@with_config
def dump_files_cmd(config: McSpyConfig) -> None:
    """Write every item value to <dump-folder>/content-dump"""
    from mcspy.reports.export import run_export

    with scanning_collector(config) as collector:
        collector.refresh_if_needed()
    run_export(config, collector)


@cli.command("deep-search")
@click.argument("text")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@with_config
def deep_search_cmd(config: McSpyConfig, text: str, yes: bool) -> None:
    """Search item values for TEXT (case-insensitive)"""
    from mcspy.reports.search import compile_search, deep_search, print_matches

    compile_search(text)
    if not yes:
        print_warning("This operation traverses ALL memcache items.")
        if not click.confirm("Continue?", default=True, err=True):
            print_note("Cancelled")
            return

    with scan_progress("Searching slabs") as tracker:
        matches = deep_search(config, text, progress_tracker=tracker)
    print_matches(matches)


@cli.command("item")
@click.argument("key")
@with_config
def item_cmd(config: McSpyConfig, key: str) -> None:
    """Fetch KEY from every server"""
    from mcspy.reports.server import get_item

    get_item(config, key)


@cli.command("server-config")
@with_config
def server_config_cmd(config: McSpyConfig) -> None:
    """Show stats settings of every server"""
    from mcspy.reports.server import show_server_config

    show_server_config(config)


def _register_aliases() -> None:
    """Register the legacy command names as hidden commands"""
    for name, aliases in COMMAND_ALIASES.items():
        command = cli.commands[name]
        for alias in aliases:
            cli.add_command(
                Command(
                    name=alias,
                    callback=command.callback,
                    params=command.params,
                    help=f"{command.help} (→ {name})",
                    hidden=True,
                ),
                name=alias,
            )


_register_aliases()


def main() -> None:
    """Entry point for the mcspy console script"""
    cli()


if __name__ == "__main__":
    main()

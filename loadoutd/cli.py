"""Loadout CLI.

Compiles saved profiles into scripts, diffs scripts and lists the catalog
without running the server.
"""

import sys
from pathlib import Path

import click

from loadout_library.compiler import compile_loadout
from loadout_library.compiler import render_verification_script
from loadout_library.compiler.registry import DEFAULT_REGISTRY
from loadout_library.exceptions import LoadoutError
from loadout_library.models.fragments import CompileMode
from loadout_library.models.optimizations import CATALOG
from loadout_library.models.optimizations import Tier
from loadout_library.models.snapshot import DEFAULT_DNS_PROVIDER
from loadout_library.models.snapshot import DNS_PROVIDERS
from loadout_library.profiles import LoadedProfile
from loadout_library.profiles import load_profile_file
from loadout_library.tracking import DiffType
from loadout_library.tracking import LineDiff

DIFF_PREFIXES = {DiffType.ADDED: "+", DiffType.REMOVED: "-", DiffType.UNCHANGED: " "}


def read_profile(profile_path: Path, safe: bool, dns: str) -> LoadedProfile:
    """Load a profile and report ignored keys on stderr."""
    mode = CompileMode.SAFE if safe else CompileMode.FULL
    loaded = load_profile_file(profile_path, mode=mode, dns_provider=dns)
    if loaded.ignored_keys:
        click.echo(f"Warning: ignoring unknown keys: {', '.join(loaded.ignored_keys)}", err=True)
    return loaded


def write_output(text: str, output: Path | None, encoding: str = "utf-8") -> None:
    if output is None:
        click.echo(text, nl=False)
    else:
        output.write_text(text, encoding=encoding)


@click.group()
def cli():
    """Loadout - compile gaming loadout scripts."""
    pass


@cli.command()
def serve():
    """Run the loadoutd API server."""
    from .__main__ import main as run_server

    run_server()


@cli.command()
@click.argument("profile_json", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--safe", is_flag=True, help="Emit only safe-tier changes, no installs")
@click.option("--dns", default=DEFAULT_DNS_PROVIDER, type=click.Choice(list(DNS_PROVIDERS)), help="DNS provider")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Script file (default: stdout)")
@click.option("--guide", type=click.Path(dir_okay=False, path_type=Path), help="Also write the HTML guide here")
def compile(profile_json: Path, safe: bool, dns: str, output: Path | None, guide: Path | None):
    """Compile a saved profile into a script."""
    try:
        loaded = read_profile(profile_json, safe, dns)
        script = compile_loadout(loaded.snapshot)

        # Windows PowerShell 5.1 reads BOM-less files as ANSI
        write_output(script.text, output, encoding="utf-8-sig")
        if output is not None:
            click.echo(f"Wrote {len(script.body)} fragments to {output}", err=True)

        if guide is not None:
            if script.guide_html:
                guide.write_text(script.guide_html, encoding="utf-8")
                click.echo(f"Wrote guide to {guide}", err=True)
            else:
                click.echo("Warning: safe-mode scripts have no guide", err=True)

        if script.requires_reboot:
            click.echo("Note: some changes need a reboot", err=True)
    except (LoadoutError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("old", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("new", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--changes-only", is_flag=True, help="Hide unchanged lines")
def diff(old: Path, new: Path, changes_only: bool):
    """Show the line diff between two scripts."""
    try:
        line_diff = LineDiff(old.read_text(encoding="utf-8-sig"), new.read_text(encoding="utf-8-sig"))
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for line in line_diff:
        if changes_only and not line.is_change:
            continue
        click.echo(f"{DIFF_PREFIXES[line.type]} {line.content}")

    stats = line_diff.stats()
    click.echo(f"{stats.added} added, {stats.removed} removed", err=True)


@cli.command()
@click.option("--tier", type=click.Choice([tier.value for tier in Tier]), help="Only show one tier")
def catalog(tier: str | None):
    """List optimization keys by tier."""
    for current in Tier:
        if tier is not None and current.value != tier:
            continue
        keys = [key for key in DEFAULT_REGISTRY.keys() if CATALOG[key].tier is current]
        if not keys:
            continue
        click.echo(f"{current.value.upper()} ({len(keys)})")
        for key in keys:
            info = CATALOG[key]
            flags = " [reboot]" if info.requires_reboot else ""
            click.echo(f"  {key.value:<28} {info.label}{flags}")


@cli.command()
@click.argument("profile_json", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--safe", is_flag=True, help="Check a safe-mode script")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Script file (default: stdout)")
def verify(profile_json: Path, safe: bool, output: Path | None):
    """Print a script that checks whether a profile was applied."""
    try:
        loaded = read_profile(profile_json, safe, DEFAULT_DNS_PROVIDER)
        write_output(render_verification_script(loaded.snapshot), output, encoding="utf-8-sig")
    except (LoadoutError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def main():
    """Entry point for loadoutd CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nInterrupted")
        sys.exit(0)


if __name__ == "__main__":
    main()

"""
confdoc — CLI entrypoint.

Usage:
    confdoc --help
    confdoc build
    confdoc build src/settings.py --force
    confdoc inspect src/settings.py
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from confdoc import __version__
from confdoc.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="confdoc")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to confdoc.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """confdoc — configuration reference tables from declarations."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("CONFDOC_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("CONFDOC_LOG_FILE"),
        log_file_level=os.environ.get("CONFDOC_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--force", is_flag=True, help="Render still-pending requests with placeholders.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def build(ctx: click.Context, paths: tuple[Path, ...], force: bool, as_json: bool) -> None:
    """Scan sources and update every requested document.

    Examples:

        confdoc build

        confdoc build src/settings.py src/db.py

        confdoc build --force
    """
    from confdoc.core.use_cases.build import run_build

    result = run_build(
        config_path=ctx.obj.get("config_path"),
        paths=list(paths) or None,
        force=force,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    quiet = ctx.obj.get("quiet", False)

    if not quiet:
        click.secho(
            f"\n📚 Scanned {result.files_scanned} file(s), "
            f"{result.declarations} declaration(s)",
            fg="cyan",
            bold=True,
        )

    for outcome in result.written:
        label = " (forced)" if outcome.forced else ""
        click.secho(f"   ✓ {outcome.record}", fg="green", nl=False)
        click.echo(f"{label}  → {outcome.target}")

    for outcome in result.failed:
        click.secho(f"   ✗ {outcome.record}", fg="red", nl=False)
        click.echo(f"  → {outcome.error}")

    if result.pending:
        click.echo()
        click.secho("   ⏳ Waiting for flattened records:", fg="yellow")
        for target, records in result.pending.items():
            click.echo(f"     • {target}: {', '.join(records)}")

    if result.errors:
        click.echo()
        click.secho("❌ Errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if not quiet:
        click.echo()

    if not result.ok:
        sys.exit(1)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def inspect(path: Path, as_json: bool) -> None:
    """Show the declarations found in one source file."""
    from confdoc.core.services.extraction import parse_file

    scan = parse_file(path)

    if as_json:
        click.echo(json.dumps(scan.to_dict(), indent=2))
        sys.exit(0 if not scan.errors else 1)

    click.secho(f"\n🔍 {scan.source}", fg="cyan", bold=True)

    for decl in scan.declarations:
        markers = []
        if decl.registered:
            markers.append("register")
        if decl.output is not None:
            markers.append(f"generate → {decl.output.target} [{decl.output.format.value}]")
        style = f" ({decl.record.case_style.value})" if decl.record.case_style else ""
        click.echo()
        click.secho(f"   {decl.record.name}{style}", fg="white", bold=True, nl=False)
        click.echo(f"  line {decl.lineno}: {', '.join(markers)}")
        for fld in decl.record.fields:
            flatten = f"  ⇢ flatten {fld.reference}" if fld.attrs.flatten else ""
            click.echo(f"     • {fld.name}: {fld.type_name}{flatten}")

    if scan.errors:
        click.echo()
        click.secho("❌ Errors:", fg="red", bold=True)
        for err in scan.errors:
            click.echo(f"   • {err}")
        click.echo()
        sys.exit(1)

    click.echo()


if __name__ == "__main__":
    cli()

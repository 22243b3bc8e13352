"""
Command-line interface for the kpkg tools.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.panel import Panel
from rich.table import Table

from kpkg import __version__
from kpkg.common import console, set_log_level
from kpkg.config import SUPPORTED_ARCHS, ArchFamily, TrackerConfig


def print_banner():
    """Print application banner."""
    console.print(Panel.fit(
        f"[bold blue]Kernel Packaging Helpers[/bold blue] v{__version__}\n"
        "[dim]Bug filing and dtb spec generation[/dim]",
        border_style="blue",
    ))


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def main(ctx, verbose: bool, quiet: bool):
    """
    Kernel packaging helpers.

    File patches in Bugzilla and generate dtb spec files.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    if verbose:
        set_log_level(logging.DEBUG)
    elif quiet:
        set_log_level(logging.WARNING)

    if not quiet:
        print_banner()


@main.command(name="file-bugs")
@click.option("--email", "-e", help="Assignee email (default: $KPKG_BUGZILLA_EMAIL)")
@click.option("--product", "-p", help="Bugzilla product (default: $KPKG_BUGZILLA_PRODUCT)")
@click.option("--arch", "-a", help="Hardware architecture of the bugs")
@click.option("--debug", "-d", is_flag=True, help="Debug mode: set QA contact and log commands")
@click.option("--reference", "-r", "references", multiple=True,
              help="Additional reference appended to References (repeatable)")
@click.argument("patches", nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.pass_context
def file_bugs(
    ctx,
    email: Optional[str],
    product: Optional[str],
    arch: Optional[str],
    debug: bool,
    references: Tuple[str, ...],
    patches: Tuple[str, ...],
):
    """
    Create a bug for each patch, add the bug to its References header and
    attach the patch to the bug.

    Examples:

        kpkg file-bugs -e dev@example.com 0001-fix.patch 0002-fix.patch

        kpkg file-bugs -e dev@example.com -r jsc#PED-1234 0001-fix.patch
    """
    from kpkg.ticket_filer import file_patches

    if debug:
        set_log_level(logging.DEBUG)

    try:
        config = TrackerConfig.from_env()
        if email:
            config.assignee = email
        if product:
            config.product = product
        if arch:
            config.arch = arch
        config.debug = debug
        config.extra_references = list(references)

        results = file_patches([Path(p) for p in patches], config)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if ctx.obj.get("verbose"):
            console.print_exception()
        sys.exit(1)

    if not ctx.obj.get("quiet"):
        table = Table(title="Filed patches")
        table.add_column("Patch")
        table.add_column("Bug", justify="right")
        table.add_column("References")
        for result in results:
            table.add_row(result.path.name, str(result.bug_id), " ".join(result.references))
        console.print(table)
    console.print(f"[green]Filed {len(results)} patch(es)[/green]")


@main.command(name="mkspec-dtb")
@click.option("--template", "-t", type=click.Path(dir_okay=False),
              help="Spec template (default: bundled dtb.spec.in)")
@click.option("--output-dir", "-o", type=click.Path(file_okay=False),
              help="Directory for generated spec files (default: current directory)")
@click.argument("archs", nargs=-1, type=click.Choice(SUPPORTED_ARCHS))
@click.pass_context
def mkspec_dtb(ctx, template: Optional[str], output_dir: Optional[str], archs: Tuple[str, ...]):
    """
    Generate dtb-<arch>.spec files from the dtb subpackage tables.

    Examples:

        # All architecture families
        kpkg mkspec-dtb

        kpkg mkspec-dtb armv7 aarch64 -t rpm/dtb.spec.in
    """
    from kpkg.spec_generator import DEFAULT_TEMPLATE, write_specs

    families = [ArchFamily(a) for a in (archs or SUPPORTED_ARCHS)]

    try:
        paths = write_specs(
            families,
            Path(template) if template else DEFAULT_TEMPLATE,
            Path(output_dir) if output_dir else None,
        )
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if ctx.obj.get("verbose"):
            console.print_exception()
        sys.exit(1)

    for path in paths:
        console.print(f"[green]Generated {path}[/green]")


if __name__ == "__main__":
    main()

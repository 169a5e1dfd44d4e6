"""
Formula Tap CLI — install prebuilt command line tools from formulae.

Usage:
    formula-tap list
    formula-tap info safe-squash
    formula-tap install safe-squash --prefix ~/.local --test
    formula-tap test safe-squash
    formula-tap uninstall safe-squash
    formula-tap bump safe-squash --output-dir ./Formula --format rb
    formula-tap render ./safe-squash.json --format rb --output-dir ./Formula

NAME arguments accept a built-in formula name or a path to a .json/.rb manifest.
"""

import asyncio
import functools
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from formula_tap.config import CACHE_ENV, PREFIX_ENV, TOKEN_ENV
from formula_tap.errors import FormulaTapError, SmokeTestError

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

prefix_option = click.option(
    "--prefix",
    "-p",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=PREFIX_ENV,
    default=None,
    help="Installation prefix; executables go to PREFIX/bin. [default: ~/.local]",
)
cache_option = click.option(
    "--cache-dir",
    "-c",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=CACHE_ENV,
    default=None,
    help="Download cache directory. [default: ~/.cache/formula-tap]",
)


def _handle_errors(func):
    """Turn FormulaTapError into a one-line message and exit status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except FormulaTapError as e:
            err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            if isinstance(e, SmokeTestError) and e.output:
                err_console.print(escape(e.output.rstrip()), style="dim")
            sys.exit(1)

    return wrapper


def _make_fetcher(cache_dir: Path | None):
    from formula_tap.core.fetcher import ArchiveFetcher

    return ArchiveFetcher(cache_dir=cache_dir, console=err_console)


async def _render(formula, fmt: str, output_dir: Path) -> Path:
    from formula_tap.renderers import get_renderer

    renderer = get_renderer(fmt, str(output_dir))
    path = await renderer.render(formula)
    await renderer.finalize()
    return path


@click.group()
@click.version_option(package_name="formula-tap")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
def cli(verbose):
    """Formula Tap — install prebuilt command line tools from formulae."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.command("list")
@prefix_option
def list_formulae_cmd(prefix):
    """List built-in formulae and whether they are installed."""
    from formula_tap.core.receipt import ReceiptStore
    from formula_tap.config import default_prefix
    from formula_tap.formulae import REGISTRY

    installed = {r.name: r for r in ReceiptStore(prefix or default_prefix()).all()}
    for name, formula in sorted(REGISTRY.items()):
        line = f"[bold]{name}[/bold] {formula.resolved_version or ''}  {escape(formula.desc)}"
        if name in installed:
            line += f"  [green](installed {installed[name].version or ''})[/green]"
        console.print(line)


@cli.command()
@click.argument("name")
@_handle_errors
def info(name):
    """Show a formula's metadata and any manifest problems."""
    from formula_tap.formulae import load_formula

    formula = load_formula(name)
    console.print(f"[bold]{formula.name}[/bold]: {escape(formula.desc)}")
    console.print(f"Homepage: {formula.homepage}")
    console.print(f"Version:  {formula.resolved_version or 'unknown'}")
    console.print(f"URL:      {formula.url}")
    for mirror in formula.mirrors:
        console.print(f"Mirror:   {mirror}")
    console.print(f"SHA-256:  {formula.sha256}")
    console.print(f"License:  {formula.license}")
    console.print(f"Installs: {', '.join(formula.bin)}")
    console.print(f"Test:     {' '.join([formula.bin[0], *formula.test_args])} ~ {formula.test_expect!r}")

    for problem in formula.validate():
        console.print(f"[yellow]Warning:[/yellow] {escape(problem)}")


@cli.command()
@click.argument("name")
@cache_option
@_handle_errors
def fetch(name, cache_dir):
    """Download and verify a formula's archive without installing it."""
    from formula_tap.formulae import load_formula

    formula = load_formula(name)
    path = asyncio.run(_make_fetcher(cache_dir).fetch(formula))
    console.print(f"[green]Verified[/green] {path}")


@cli.command()
@click.argument("name")
@prefix_option
@cache_option
@click.option("--test", "run_test", is_flag=True, help="Run the smoke test after installing.")
@_handle_errors
def install(name, prefix, cache_dir, run_test):
    """Fetch, verify and install a formula's executables."""
    from formula_tap.core.installer import FormulaInstaller
    from formula_tap.core.smoke import run_smoke_test
    from formula_tap.formulae import load_formula

    formula = load_formula(name)
    installer = FormulaInstaller(prefix=prefix, fetcher=_make_fetcher(cache_dir))
    receipt = asyncio.run(installer.install(formula))

    console.print(f"[bold green]Installed[/bold green] {formula.name} {receipt.version or ''}")
    for path in receipt.files:
        console.print(f"  {path}")

    if run_test:
        run_smoke_test(formula, installer.bin_dir)
        console.print(f"[green]Smoke test passed[/green] for {formula.name}")


@cli.command()
@click.argument("name")
@prefix_option
@click.option("--timeout", type=float, default=30.0, show_default=True, help="Seconds before the test is aborted.")
@_handle_errors
def test(name, prefix, timeout):
    """Run an installed formula's smoke test."""
    from formula_tap.config import default_prefix
    from formula_tap.core.smoke import run_smoke_test
    from formula_tap.formulae import load_formula

    formula = load_formula(name)
    result = run_smoke_test(formula, (prefix or default_prefix()) / "bin", timeout=timeout)
    console.print(f"[green]Smoke test passed[/green]: {escape(' '.join(result.command))}")


@cli.command()
@click.argument("name")
@prefix_option
@_handle_errors
def uninstall(name, prefix):
    """Remove the files an install placed in the prefix."""
    from formula_tap.core.installer import FormulaInstaller

    receipt = FormulaInstaller(prefix=prefix).uninstall(name)
    console.print(f"[bold]Uninstalled[/bold] {receipt.name} {receipt.version or ''}")


@cli.command()
@click.argument("name")
@click.option("--tag", default=None, help="Release tag or version to move to. [default: latest GitHub release]")
@click.option("--token", "-t", type=str, envvar=TOKEN_ENV, default=None, help="GitHub API token.")
@click.option("--output-dir", "-o", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Write the updated manifest here.")
@click.option("--format", "-f", "fmt", type=click.Choice(["rb", "json"]), default="rb", help="Manifest format.")
@cache_option
@_handle_errors
def bump(name, tag, token, output_dir, fmt, cache_dir):
    """Compute the archive checksum for the current or a new release."""
    from formula_tap.core.bump import FormulaBumper
    from formula_tap.formulae import load_formula

    formula = load_formula(name)
    bumper = FormulaBumper(fetcher=_make_fetcher(cache_dir), token=token)

    async def _bump():
        updated = await bumper.compute(formula, version=tag)
        path = await _render(updated, fmt, output_dir) if output_dir else None
        return updated, path

    updated, path = asyncio.run(_bump())
    console.print(f"url    {updated.url}")
    console.print(f"sha256 {updated.sha256}")
    if path:
        console.print(f"[green]Wrote[/green] {path}")


@cli.command()
@click.argument("name")
@click.option("--format", "-f", "fmt", type=click.Choice(["rb", "json"]), default="rb", help="Manifest format.")
@click.option("--output-dir", "-o", type=click.Path(file_okay=False, path_type=Path), default=Path("./Formula"),
              show_default=True, help="Output directory.")
@_handle_errors
def render(name, fmt, output_dir):
    """Write a formula as a Homebrew .rb file or a JSON manifest."""
    from formula_tap.formulae import load_formula

    formula = load_formula(name)
    path = asyncio.run(_render(formula, fmt, output_dir))
    console.print(f"[green]Wrote[/green] {path}")


if __name__ == "__main__":
    cli()

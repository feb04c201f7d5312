"""Command-line interface for TDDRunner."""

import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tddrunner import __version__
from tddrunner.config import RunnerConfig, create_example_config, get_default_config


# Decorative output goes to stderr; stdout carries only the run report.
console = Console(stderr=True)

MAX_EXIT_CODE = 255


def print_banner() -> None:
    """Print the TDDRunner banner."""
    console.print(
        Panel.fit(
            "[bold blue]TDDRunner[/bold blue] - self-registering test engine",
            subtitle=f"v{__version__}",
        )
    )


def _load_config(ctx: click.Context) -> tuple[RunnerConfig, Path]:
    """Load the configuration named on the command line or found nearby."""
    config_path = ctx.obj.get("config_path")
    verbose = ctx.obj.get("verbose", False)

    try:
        if config_path:
            config = RunnerConfig.from_file(config_path)
            base_dir = Path(config_path).resolve().parent
        else:
            try:
                config = RunnerConfig.find_and_load()
            except FileNotFoundError:
                if verbose:
                    console.print("[dim]No configuration file found, using defaults[/dim]")
                config = get_default_config()
            base_dir = Path.cwd()
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print("Run [bold]tddrunner init[/bold] to create a configuration file")
        sys.exit(1)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)

    if verbose:
        config.verbose = True
    return config, base_dir


def _build_registry(config: RunnerConfig, base_dir: Path, paths: tuple[str, ...]):
    """Discover registration modules and build the registry from them."""
    from tddrunner.core.registry import RegistryBuilder
    from tddrunner.loader import ModuleLoader

    loader = ModuleLoader(config, base_dir, list(paths) or None)
    builder = RegistryBuilder()
    load_result = loader.load(builder)

    for module, error in load_result.errors.items():
        console.print(f"[yellow]Warning: could not load[/yellow] {module}: {error}")

    if config.verbose:
        console.print(f"[dim]Loaded {len(load_result.loaded)} registration modules[/dim]")

    return builder.build(), load_result


@click.group()
@click.version_option(version=__version__, prog_name="tddrunner")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False),
    help="Path to configuration file (default: tddrunner.json)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """TDDRunner - run self-registering tests and report the results.

    Registration modules define a register(builder) function that adds
    tests and suite setup/teardown hooks.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="tddrunner.json",
    help="Output path for configuration file",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing configuration")
@click.pass_context
def init(ctx: click.Context, output: str, force: bool) -> None:
    """Initialize a new TDDRunner configuration file."""
    print_banner()

    output_path = Path(output)
    if output_path.exists() and not force:
        console.print(
            f"[yellow]Configuration file already exists:[/yellow] {output_path}"
        )
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        create_example_config(output_path)
        console.print(f"[green]Created configuration file:[/green] {output_path}")
        console.print("\nNext steps:")
        console.print("  1. Point discovery.paths at your registration modules")
        console.print("  2. Define register(builder) in each tdd_*.py module")
        console.print("  3. Run [bold]tddrunner run[/bold] to execute tests")
    except OSError as e:
        console.print(f"[red]Error creating configuration:[/red] {e}")
        sys.exit(1)


@main.command()
@click.argument("paths", nargs=-1, type=click.Path())
@click.option(
    "--report/--no-report",
    default=None,
    help="Generate HTML report after tests (default: from configuration)",
)
@click.pass_context
def run(ctx: click.Context, paths: tuple[str, ...], report: Optional[bool]) -> None:
    """Register and run tests, exiting with the number of failures."""
    print_banner()

    config, base_dir = _load_config(ctx)
    console.print(f"[dim]Loaded config for project:[/dim] {config.project.name}")

    registry, load_result = _build_registry(config, base_dir, paths)

    from tddrunner.core.runner import Runner

    runner = Runner(output=sys.stdout, verbose=config.verbose)
    result = runner.run_all(registry)

    write_report = config.report.enabled if report is None else report
    if write_report:
        from tddrunner.report.generator import ReportGenerator

        try:
            report_path = ReportGenerator(config, base_dir).generate(result)
            console.print(f"[green]Report generated:[/green] {report_path}")
        except Exception as e:
            console.print(f"[red]Error generating report:[/red] {e}")

    exit_code = min(result.failed, MAX_EXIT_CODE)
    if exit_code == 0 and not load_result.success:
        exit_code = 1
    sys.exit(exit_code)


@main.command(name="list")
@click.argument("paths", nargs=-1, type=click.Path())
@click.pass_context
def list_tests(ctx: click.Context, paths: tuple[str, ...]) -> None:
    """List registered suites, hooks and tests without running them."""
    print_banner()

    config, base_dir = _load_config(ctx)
    registry, load_result = _build_registry(config, base_dir, paths)

    if not registry.suite_names():
        console.print("[yellow]No tests registered[/yellow]")
        sys.exit(0 if load_result.success else 1)

    table = Table(title=f"Registered Tests ({registry.test_count})")
    table.add_column("Suite", style="cyan")
    table.add_column("Hooks", style="dim")
    table.add_column("Test")
    table.add_column("Expects", style="yellow")

    for suite_name in registry.suite_names():
        hooks = ", ".join(s.name for s in registry.suites_for(suite_name)) or "-"
        cases = registry.tests_for(suite_name)
        if not cases:
            table.add_row(suite_name or "Single Tests", hooks, "-", "-")
            continue
        for case in cases:
            expects = case.expected_exception.__name__ if case.expected_exception else "-"
            table.add_row(suite_name or "Single Tests", hooks, case.name, expects)

    console.print(table)


if __name__ == "__main__":
    main()

"""Click-based CLI for the component deduplication analyzer."""

import json
import os
import sys
from functools import partial
from pathlib import Path
from typing import Any, NoReturn

import click

from . import __version__
from .analyzer import DeduplicationAnalyzer
from .config import load_config
from .config.loader import DedupConfig, read_config_file
from .dedup_logging import LogCategory, get_category_logger, setup_logging
from .errors import DedupError
from .filters import should_compare
from .loader import load_components
from .report import assemble_report

logger = get_category_logger(LogCategory.CLI)


def should_use_color(explicit_flag: bool | None = None) -> bool:
    """Color when forced, never with NO_COLOR, otherwise only on a TTY."""
    if explicit_flag is not None:
        return explicit_flag
    if "NO_COLOR" in os.environ:
        return False
    if "FORCE_COLOR" in os.environ:
        return True
    return sys.stdout.isatty()


def fail(error: DedupError, use_color: bool = False) -> NoReturn:
    """Print a structured error and exit with its code."""
    click.echo(error.format(use_color=use_color), err=True)
    sys.exit(error.exit_code)


def common_options(f: Any) -> Any:
    """Options shared by commands that load configuration."""
    f = click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")(f)
    f = click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")(f)
    f = click.option(
        "--config",
        "config_path",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Configuration file path",
    )(f)
    return f


@click.group()
@click.version_option(version=__version__, prog_name="ui-dedup")
def cli() -> None:
    """Find near-duplicate UI components in extracted component records."""


@cli.command()
@click.argument(
    "input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@common_options
@click.option("--min-score", type=float, help="Minimum similarity score to group a pair")
@click.option("--min-complexity", type=float, help="Minimum element tree complexity")
@click.option("--min-ratio", type=float, help="Minimum complexity ratio of a pair")
@click.option(
    "--workers", type=int, help="Comparison threads (0 = one per CPU)"
)
@click.option(
    "--prefilter/--no-prefilter",
    default=None,
    help="Skip pairs rejected by the naming and path pre-filter",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Report format on stdout",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the JSON report to this file",
)
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--log-format", type=click.Choice(["text", "json"]), default=None)
@click.option("--no-color", is_flag=True, help="Disable colored output")
def analyze(
    input_path: Path,
    config_path: Path | None,
    quiet: bool,
    verbose: bool,
    min_score: float | None,
    min_complexity: float | None,
    min_ratio: float | None,
    workers: int | None,
    prefilter: bool | None,
    output_format: str,
    output: Path | None,
    log_file: Path | None,
    log_format: str | None,
    no_color: bool,
) -> None:
    """Analyze INPUT_PATH (JSON or JSON Lines component records).

    Examples:
        ui-dedup analyze components.json
        ui-dedup analyze components.jsonl --min-score 0.85 --format json
        ui-dedup analyze components.json --prefilter --workers 0 -o report.json
    """
    if quiet and verbose:
        click.echo("Error: --quiet and --verbose are mutually exclusive", err=True)
        sys.exit(1)

    use_color = should_use_color(False if no_color else None)
    try:
        config = load_config(config_path)
        if log_file is None and config.logging.log_file:
            log_file = Path(config.logging.log_file)
        setup_logging(
            level=config.logging.level,
            quiet=quiet,
            verbose=verbose,
            log_file=log_file,
            log_format=log_format or config.logging.log_format,
        )

        thresholds = config.thresholds.with_overrides(
            min_similarity_score=min_score,
            min_structure_complexity=min_complexity,
            min_complexity_ratio=min_ratio,
        )
        if workers is not None:
            config.analysis.max_workers = workers
        if prefilter is not None:
            config.analysis.prefilter = prefilter

        pair_filter = None
        if config.analysis.prefilter:
            pair_filter = partial(
                should_compare,
                name_distance_threshold=thresholds.name_distance_threshold,
            )

        logger.debug(f"Analyzing {input_path} with {thresholds!r}")
        components = load_components(input_path)
        analyzer = DeduplicationAnalyzer(
            thresholds, config.analysis, pair_filter=pair_filter
        )
        result = analyzer.run(components)
        report = assemble_report(result.groups, result.stats_dict())

        if output:
            report.write(output)
    except DedupError as e:
        fail(e, use_color)

    if output_format == "json":
        click.echo(report.to_json())
    elif not quiet:
        click.echo(report.format_text(use_color=use_color))


@cli.group("config")
def config_group() -> None:
    """Configuration management commands."""


@config_group.command("show")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file path",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def config_show(config_path: Path | None, as_json: bool) -> None:
    """Show the effective configuration (file plus environment).

    Examples:
        ui-dedup config show
        ui-dedup config show --json
    """
    try:
        config = load_config(config_path)
    except DedupError as e:
        fail(e)

    data = config.to_dict()
    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    click.echo("Effective configuration:")
    for section, values in data.items():
        click.echo(f"  {section}:")
        for key, value in values.items():
            click.echo(f"    {key}: {value}")


@config_group.command("validate")
@click.argument(
    "config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
def config_validate(config_file: Path) -> None:
    """Validate CONFIG_FILE without running an analysis.

    Examples:
        ui-dedup config validate ui-dedup.config.json
    """
    try:
        DedupConfig.from_dict(read_config_file(config_file))
    except DedupError as e:
        fail(e)
    click.echo(f"{config_file} is valid")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()

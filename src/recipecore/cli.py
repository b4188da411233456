"""Command-line interface for recipecore."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, TextIO

import click
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from recipecore import __version__
from recipecore.cleaner import CleanupResult, HtmlCleaner, Strategy
from recipecore.config import Config, MonitoringConfig, load_config
from recipecore.observability import PrometheusMetricsSink, configure_logging

console = Console()

STRATEGY_CHOICES = [s.value for s in Strategy if s is not Strategy.DISABLED]


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """recipecore - reduce recipe pages before LLM extraction."""
    ctx.ensure_object(dict)
    try:
        loaded = load_config(Path(config) if config else None)
    except (ValidationError, yaml.YAMLError) as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    if log_level:
        monitoring = MonitoringConfig(log_level=log_level, log_file=loaded.monitoring.log_file)
        loaded = loaded.model_copy(update={"monitoring": monitoring})
    configure_logging(loaded.monitoring)

    ctx.obj["config"] = loaded


@cli.command()
@click.argument("html_file", type=click.File("r", encoding="utf-8"))
@click.option("--url", default="", help="Source URL, used as the log label")
@click.option(
    "--strategy",
    type=click.Choice(STRATEGY_CHOICES, case_sensitive=False),
    help="Run only this strategy instead of the full cascade",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the cleaned HTML to this file")
@click.pass_context
def clean(
    ctx: click.Context,
    html_file: TextIO,
    url: str,
    strategy: Optional[str],
    as_json: bool,
    output: Optional[str],
) -> None:
    """Clean HTML_FILE ("-" for stdin) and report what was kept."""
    config: Config = ctx.obj["config"]
    html = html_file.read()
    label = url or getattr(html_file, "name", "")

    cleaner = HtmlCleaner(config.cleanup, metrics=PrometheusMetricsSink())
    if strategy:
        result = cleaner.process_with_strategy(html, label, Strategy(strategy.upper()))
    else:
        result = cleaner.process(html, label)

    if output:
        Path(output).write_text(result.cleaned_html, encoding="utf-8")

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    _print_summary(result, label)
    if output:
        console.print(f"[green]Cleaned HTML saved to {output}[/green]")
    else:
        console.print(result.cleaned_html, markup=False, highlight=False)


@cli.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Print the effective configuration as YAML."""
    config: Config = ctx.obj["config"]
    click.echo(yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False))


def _print_summary(result: CleanupResult, label: str) -> None:
    table = Table(title="HTML Cleanup")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("source", label or "-")
    table.add_row("strategy", result.strategy_used.value)
    table.add_row("original_size", f"{result.original_size:,}")
    table.add_row("cleaned_size", f"{result.cleaned_size:,}")
    table.add_row("reduction", f"{result.reduction_ratio:.1%}")

    console.print(table)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()

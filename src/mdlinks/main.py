"""Main CLI entry point for mdlinks.

Usage:
    mdlinks input.paths='[README.md,docs]' output.format=delimited output.delimiter=','
"""

import asyncio
import logging
import sys
from collections import Counter
from typing import BinaryIO, Optional

import hydra
from omegaconf import DictConfig, OmegaConf
from rich.console import Console
from rich.table import Table

from ._logging import configure_logging
from .errors import ConfigurationError, SerializationError
from .models import ExtractionSettings, LinkRecord, OutputFormat
from .pipeline import collect_links, discover_files
from .serializer import write

logger = logging.getLogger(__name__)

console = Console(stderr=True)

EXIT_OK = 0
EXIT_SERIALIZATION_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2

# Keys under `output` that only affect console reporting
_REPORT_KEYS = ("summary", "stats")


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    """Main entry point."""
    configure_logging(cfg.logging.level)
    exit_code = asyncio.run(run_pipeline(cfg))
    if exit_code != EXIT_OK:
        sys.exit(exit_code)


def load_options(cfg: DictConfig) -> tuple[OutputFormat, ExtractionSettings]:
    """
    Validate the output and extraction sections of the config.

    Raises:
        ConfigurationError: If any option is invalid
    """
    output = OmegaConf.to_container(cfg.output, resolve=True)
    for key in _REPORT_KEYS:
        output.pop(key, None)
    extraction = OmegaConf.to_container(cfg.extraction, resolve=True)

    if cfg.input.concurrent_limit < 1:
        raise ConfigurationError("Invalid input: concurrent_limit must be at least 1")

    return OutputFormat.from_options(**output), ExtractionSettings.from_options(**extraction)


def _input_paths(cfg: DictConfig) -> list[str]:
    paths = cfg.input.paths
    if paths is None:
        return []
    if isinstance(paths, str):
        return [paths]
    return [str(p) for p in paths]


async def run_pipeline(cfg: DictConfig, sink: Optional[BinaryIO] = None) -> int:
    """Run extraction and write the result; returns the process exit code."""
    try:
        output_format, settings = load_options(cfg)
    except ConfigurationError as e:
        logger.error("%s", e)
        return EXIT_CONFIGURATION_ERROR

    files = discover_files(
        _input_paths(cfg),
        pattern=cfg.input.file_pattern,
        recursive=cfg.input.recursive,
    )
    if not files:
        logger.warning("No input files")

    aggregator = await collect_links(files, settings, cfg.input.concurrent_limit)
    records = aggregator.finalize()

    try:
        write(records, output_format, sink if sink is not None else sys.stdout.buffer)
    except SerializationError as e:
        logger.error("%s", e)
        return EXIT_SERIALIZATION_ERROR

    if cfg.output.summary:
        console.print(
            f"Found [green]{len(records)}[/green] links in "
            f"[green]{len(aggregator.source_files)}[/green] of {len(files)} files"
        )
        duplicates = aggregator.duplicate_report()
        if duplicates:
            action = "removed" if settings.deduplicate else "kept"
            console.print(
                f"[yellow]Warning:[/yellow] {duplicates.total_duplicates} duplicate links ({action})"
            )
    if cfg.output.stats:
        show_stats(records)

    return EXIT_OK


def show_stats(records: list[LinkRecord]) -> None:
    """Display link counts by kind."""
    by_kind = Counter(record.kind.value for record in records)
    unresolved = sum(1 for record in records if not record.resolved)

    table = Table(title="Link Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Total Links", str(len(records)))
    for kind, count in sorted(by_kind.items()):
        table.add_row(kind, str(count))
    table.add_row("Unresolved", str(unresolved))

    console.print(table)


def _quote(value: str) -> str:
    return "'" + value.replace("'", "\\'") + "'"


def args_to_overrides(args: list[str]) -> list[str]:
    """
    Translate classic command line arguments into Hydra overrides.

    Positional arguments are input files, ``-j/--json`` selects pretty JSON,
    ``-s/--separator X`` selects delimited output with separator X. Arguments
    containing ``=`` are passed through as overrides.

    Args:
        args: Arguments without the program name

    Returns:
        Override strings for the Hydra entry point

    Raises:
        ConfigurationError: If ``-s/--separator`` has no value
    """
    files: list[str] = []
    overrides: list[str] = []
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("-j", "--json"):
            overrides.append("output.format=json")
        elif arg in ("-s", "--separator"):
            if i + 1 >= len(args):
                raise ConfigurationError(f"Invalid arguments: {arg} requires a separator")
            overrides.append("output.format=delimited")
            overrides.append(f"output.delimiter={_quote(args[i + 1])}")
            i += 1
        elif "=" in arg and not arg.startswith("-"):
            overrides.append(arg)
        else:
            files.append(arg)
        i += 1

    if files:
        overrides.insert(0, "input.paths=[" + ",".join(_quote(f) for f in files) + "]")
    return overrides


if __name__ == "__main__":
    main()

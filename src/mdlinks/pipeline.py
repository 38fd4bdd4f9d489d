"""File-level pipeline: discover, parse, walk and aggregate."""

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .aggregator import LinkAggregator
from .extractor import walk
from .models import ExtractionSettings, LinkRecord
from .parser import parse_markdown

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def extract_text(
    markdown: str,
    file_identifier: str,
    settings: Optional[ExtractionSettings] = None,
) -> list[LinkRecord]:
    """
    Extract all links from Markdown text.

    Args:
        markdown: Markdown source
        file_identifier: Identifier recorded on each link
        settings: Parsing options (defaults apply when omitted)

    Returns:
        LinkRecords in document order
    """
    settings = settings or ExtractionSettings()
    tree = parse_markdown(markdown, linkify=settings.linkify, front_matter=settings.front_matter)
    return list(walk(tree, file_identifier))


def extract_file(path: PathLike, settings: Optional[ExtractionSettings] = None) -> list[LinkRecord]:
    """
    Read a Markdown file and extract its links.

    Raises:
        FileNotFoundError: If the file does not exist
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    return extract_text(content, str(path), settings)


def discover_files(paths: Iterable[PathLike], pattern: str = "*.md", recursive: bool = True) -> list[Path]:
    """
    Expand input paths into the list of files to process.

    Files are kept in the order given; each directory is replaced by its
    matching files in sorted order. Missing paths are kept so the failure
    is reported when they are read.
    """
    files: list[Path] = []
    for entry in paths:
        path = Path(entry)
        if path.is_dir():
            matches = path.rglob(pattern) if recursive else path.glob(pattern)
            files.extend(sorted(p for p in matches if p.is_file()))
        else:
            files.append(path)
    return files


async def extract_paths(
    paths: list[PathLike],
    settings: Optional[ExtractionSettings] = None,
    concurrent_limit: int = 4,
) -> list[tuple[Path, list[LinkRecord]]]:
    """
    Extract links from several files concurrently.

    Files are read and walked in worker threads; results come back in the
    order of ``paths`` regardless of completion order. Files that cannot
    be read are logged and left out.

    Args:
        paths: Files to process
        settings: Parsing options
        concurrent_limit: Maximum files processed at once

    Returns:
        (path, records) pairs for every file that was read
    """
    semaphore = asyncio.Semaphore(max(1, concurrent_limit))

    async def extract_with_semaphore(path: Path) -> Optional[list[LinkRecord]]:
        async with semaphore:
            try:
                return await asyncio.to_thread(extract_file, path, settings)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping %s: %s", path, e)
                return None

    targets = [Path(p) for p in paths]
    results = await asyncio.gather(*(extract_with_semaphore(path) for path in targets))
    return [(path, records) for path, records in zip(targets, results) if records is not None]


async def collect_links(
    paths: list[PathLike],
    settings: Optional[ExtractionSettings] = None,
    concurrent_limit: int = 4,
) -> LinkAggregator:
    """Extract links from files and aggregate them in file order."""
    settings = settings or ExtractionSettings()
    aggregator = LinkAggregator(deduplicate=settings.deduplicate)
    for path, records in await extract_paths(paths, settings, concurrent_limit):
        added = aggregator.add(records)
        logger.info("%s: %d links", path, added)
    return aggregator

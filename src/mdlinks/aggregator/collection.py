"""Combining links from several documents."""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from ..models import LinkRecord

DedupKey = tuple[str, str]


def dedup_key(record: LinkRecord) -> DedupKey:
    """Key under which records count as duplicates: (url, file_identifier)."""
    return record.url, record.source.file_identifier


def deduplicate(records: Iterable[LinkRecord]) -> list[LinkRecord]:
    """Return records keeping only the first occurrence of each (url, file)."""
    seen: set[DedupKey] = set()
    unique = []
    for record in records:
        key = dedup_key(record)
        if key not in seen:
            seen.add(key)
            unique.append(record)
    return unique


@dataclass
class DuplicateReport:
    """Links that occur more than once within a file."""

    duplicates: dict[DedupKey, list[LinkRecord]] = field(default_factory=dict)

    @property
    def total_duplicates(self) -> int:
        """Total number of duplicate entries (excluding originals)."""
        return sum(len(records) - 1 for records in self.duplicates.values())

    @property
    def unique_duplicated_count(self) -> int:
        """Number of (url, file) pairs that have duplicates."""
        return len(self.duplicates)

    def __bool__(self) -> bool:
        return bool(self.duplicates)


def detect_duplicates(records: Iterable[LinkRecord]) -> DuplicateReport:
    """
    Group records sharing a (url, file_identifier) key.

    Args:
        records: LinkRecords in output order

    Returns:
        DuplicateReport holding only keys seen more than once
    """
    by_key: dict[DedupKey, list[LinkRecord]] = defaultdict(list)
    for record in records:
        by_key[dedup_key(record)].append(record)

    duplicates = {key: group for key, group in by_key.items() if len(group) > 1}
    return DuplicateReport(duplicates=duplicates)


class LinkAggregator:
    """Collects links file by file, in the order files are added.

    Records are only concatenated, never reordered or merged. With
    ``deduplicate`` set, ``finalize`` keeps the first record per
    (url, file_identifier).
    """

    def __init__(self, deduplicate: bool = False):
        self.deduplicate = deduplicate
        self._records: list[LinkRecord] = []

    def add(self, records: Iterable[LinkRecord]) -> int:
        """Append one file's records; returns how many were added."""
        before = len(self._records)
        self._records.extend(records)
        return len(self._records) - before

    def finalize(self) -> list[LinkRecord]:
        """Return the ordered record set to serialize."""
        if self.deduplicate:
            return deduplicate(self._records)
        return list(self._records)

    @property
    def source_files(self) -> list[str]:
        """File identifiers that contributed links, in first-seen order."""
        return list(dict.fromkeys(record.source.file_identifier for record in self._records))

    def duplicate_report(self) -> DuplicateReport:
        return detect_duplicates(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[LinkRecord]:
        return iter(self._records)

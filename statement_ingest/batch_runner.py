"""Concurrent parsing of many statements for the CLI and service callers."""
from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .models import FailureKind, ParseContext, ParseResult, StatementFile
from .parsers import BaseStatementParser
from .pipeline import dispatch

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


def parse_many(
    files: Iterable[StatementFile],
    parsers: Sequence[BaseStatementParser],
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    context: Optional[ParseContext] = None,
    on_result: Optional[Callable[[int, ParseResult], None]] = None,
) -> List[ParseResult]:
    """
    Dispatch independent files concurrently.

    Parsers are stateless per call, so one list is shared by all workers.

    Args:
        files: Statements to parse
        parsers: Strategies in priority order
        max_workers: Thread pool size
        context: Deadline/cancellation shared by every file
        on_result: Called with (input index, result) as each file finishes,
            in completion order, on the calling thread

    Returns:
        Results in input order
    """
    file_list = list(files)
    if not file_list:
        return []

    workers = max(1, min(max_workers, len(file_list)))
    logger.info(f"Parsing {len(file_list)} files with {workers} workers")

    results: List[Optional[ParseResult]] = [None] * len(file_list)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(dispatch, file, parsers, context): index
            for index, file in enumerate(file_list)
        }
        for future in as_completed(futures):
            index = futures[future]
            results[index] = future.result()
            if on_result:
                on_result(index, results[index])

    return results


@dataclass
class BatchFileResult:
    """One row of a batch manifest."""

    file: str
    json: Optional[str]
    success: bool
    parser: Optional[str] = None
    failure_kind: Optional[str] = None
    transactions: Optional[int] = None
    total_amount: Optional[str] = None
    bank: Optional[str] = None
    notices: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass
class BatchRunSummary:
    """Outcome of one batch run: per-file rows plus success/failure totals."""

    root_directory: Optional[str]
    generated_at: str
    results: List[BatchFileResult]
    totals: dict

    def to_manifest(self) -> dict:
        """Manifest payload with plain JSON types."""
        return {
            'root_directory': self.root_directory,
            'generated_at': self.generated_at,
            'results': [asdict(result) for result in self.results],
            'totals': self.totals,
        }


def _load(path: Path) -> StatementFile | ParseResult:
    try:
        return StatementFile.from_path(path)
    except OSError as exc:
        logger.error(f"Could not read {path}: {exc}")
        return ParseResult.failure([f"Could not read file: {exc}"], failure_kind=FailureKind.INTERNAL_ERROR)


def run_batch(
    paths: Sequence[Path] | Iterable[Path],
    parsers: Sequence[BaseStatementParser],
    *,
    json_output_dir: Optional[Path] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    context: Optional[ParseContext] = None,
    progress_callback: Optional[Callable[[int, int, str], None]] = None,
    root_directory: Optional[Path] = None,
) -> BatchRunSummary:
    """
    Parse statement files from disk and return a structured summary.

    ``progress_callback`` receives (completed, total, file name) as each file
    finishes, not after the whole batch.
    """

    path_list = list(paths)
    total_files = len(path_list)
    if json_output_dir:
        json_output_dir.mkdir(parents=True, exist_ok=True)

    loaded = [_load(path) for path in path_list]
    parsed: List[Optional[ParseResult]] = [None] * total_files
    completed = 0

    def record(position: int, result: ParseResult) -> None:
        nonlocal completed
        parsed[position] = result
        completed += 1
        if progress_callback:
            progress_callback(completed, total_files, path_list[position].name)

    readable_positions = []
    for position, item in enumerate(loaded):
        if isinstance(item, StatementFile):
            readable_positions.append(position)
        else:
            record(position, item)

    parse_many(
        [loaded[position] for position in readable_positions],
        parsers,
        max_workers=max_workers,
        context=context,
        on_result=lambda index, result: record(readable_positions[index], result),
    )

    results: List[BatchFileResult] = []
    successes = failures = 0

    for path, result in zip(path_list, parsed):
        json_path = (json_output_dir / f"{path.stem}.json") if json_output_dir else None

        if json_path:
            json_path.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding='utf-8')

        results.append(
            BatchFileResult(
                file=path.name,
                json=str(json_path) if json_path else None,
                success=result.success,
                parser=result.parser_name,
                failure_kind=None if result.success else result.failure_kind.value,
                transactions=result.transaction_count,
                total_amount=str(result.total_amount) if result.success else None,
                bank=result.metadata.bank_name,
                notices=list(result.notices),
                errors=list(result.errors),
            )
        )

        if result.success:
            successes += 1
        else:
            failures += 1

    return BatchRunSummary(
        root_directory=str(root_directory) if root_directory else None,
        generated_at=datetime.now(timezone.utc).isoformat(),
        results=results,
        totals={
            'processed': total_files,
            'successes': successes,
            'failures': failures,
        },
    )


def write_manifest(summary: BatchRunSummary, manifest_path: Path) -> None:
    """Write the batch manifest as UTF-8 JSON, creating parent directories."""
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    manifest_path.write_text(json.dumps(summary.to_manifest(), indent=2, ensure_ascii=False), encoding='utf-8')

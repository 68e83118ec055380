# abnovobench_ingest/core/coverage.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, Sequence
import pandas as pd

from .errors import MalformedTableError
from .model import ChainLabel, CoverageDataset, RegionSpan
from .normalize import split_csv_line, to_depth

_LOG = logging.getLogger(__name__)

CDR_LABELS: tuple[str, ...] = ("CDR1", "CDR2", "CDR3")
HEAVY_CHAIN_TAGS: tuple[str, ...] = ("HC",)

# row layout of a depth table
_POSITIONS_ROW = 0
_REGIONS_ROW = 2
_FIRST_MODEL_ROW = 3


def _cdr_set(cdr_labels: Iterable[str]) -> frozenset[str]:
    labels = frozenset(str(c).strip() for c in cdr_labels if str(c).strip())
    if not labels:
        raise ValueError("CDR label vocabulary must not be empty")
    return labels


def derive_region_spans(region_labels: Sequence[str],
                        cdr_labels: Iterable[str] = CDR_LABELS) -> list[RegionSpan]:
    """
    Run-length encode the per-column labels and keep only CDR runs.
    Columns are 1-indexed; ends are inclusive. Framework runs only delimit CDRs.
    """
    cdrs = _cdr_set(cdr_labels)
    spans: list[RegionSpan] = []
    if not region_labels:
        return spans

    current = region_labels[0]
    start = 1
    for i in range(1, len(region_labels)):
        label = region_labels[i]
        if label != current:
            if current in cdrs:
                spans.append(RegionSpan(region_name=current, start_position=start, end_position=i))
            current = label
            start = i + 1

    if current in cdrs:
        spans.append(RegionSpan(region_name=current, start_position=start, end_position=len(region_labels)))
    return spans


def antibody_chain_from_filename(filename: str,
                                 heavy_chain_tags: Iterable[str] = HEAVY_CHAIN_TAGS) -> tuple[str, ChainLabel]:
    """``{antibody}_{chainTag}.csv`` -> (antibody, chain). Naming convention only, never rejected."""
    parts = Path(filename).stem.split("_")
    antibody = parts[0]
    chain_tag = parts[1] if len(parts) > 1 else ""
    if not chain_tag:
        _LOG.debug("no chain tag in %s; defaulting to Light Chain", filename)
    is_heavy = any(tag and tag in chain_tag for tag in heavy_chain_tags)
    return antibody, ("Heavy Chain" if is_heavy else "Light Chain")


def _split_rows(text: str) -> list[list[str]]:
    # rows are tokenized one by one so a ragged row cannot fail the whole table
    return [split_csv_line(line) for line in text.splitlines() if line.strip()]


def _fit_width(cells: list[str], width: int) -> list[str]:
    """Drop surplus trailing cells when they are all blank (stray trailing commas)."""
    if len(cells) > width and not any(cells[width:]):
        return cells[:width]
    return cells


def _parse_positions(cells: Sequence[str], source: str) -> tuple[int, ...]:
    cells = list(cells)
    while cells and not cells[-1]:
        cells.pop()
    out = []
    for col, cell in enumerate(cells, start=1):
        try:
            out.append(int(float(cell)))
        except (ValueError, OverflowError):
            raise MalformedTableError(f"header column {col}: position {cell!r} is not an integer",
                                      resource=source) from None
    return tuple(out)


def parse_coverage_table(text: str, source_filename: str,
                         cdr_labels: Iterable[str] = CDR_LABELS,
                         heavy_chain_tags: Iterable[str] = HEAVY_CHAIN_TAGS) -> CoverageDataset:
    """
    Row 0 holds positions, row 2 region labels, rows 3.. one model each.
    A model row whose cell count does not match the positions is logged and
    skipped; the rest of the table is kept.
    """
    rows = _split_rows(text)
    if len(rows) < _FIRST_MODEL_ROW:
        raise MalformedTableError(
            f"coverage table needs positions, sequence and region rows; got {len(rows)} row(s)",
            resource=source_filename,
        )

    positions = _parse_positions(rows[_POSITIONS_ROW][1:], source_filename)
    width = len(positions)
    if not width:
        raise MalformedTableError("coverage table has no position columns", resource=source_filename)
    region_labels = tuple(_fit_width(rows[_REGIONS_ROW][1:], width))

    per_model: dict[str, tuple[int, ...]] = {}
    for row_no, row in enumerate(rows[_FIRST_MODEL_ROW:], start=_FIRST_MODEL_ROW + 1):
        model_name, cells = row[0], _fit_width(row[1:], width)
        if len(cells) != width:
            _LOG.warning("%s row %d (%s) skipped: %d depth value(s) for %d positions",
                         source_filename, row_no, model_name, len(cells), width)
            continue
        if model_name in per_model:
            _LOG.warning("%s: duplicate model row '%s'; last one wins", source_filename, model_name)
        per_model[model_name] = tuple(to_depth(pd.Series(cells, dtype=str)).tolist())

    antibody, chain = antibody_chain_from_filename(source_filename, heavy_chain_tags)
    return CoverageDataset(
        antibody_id=antibody,
        chain_label=chain,
        positions=positions,
        region_labels=region_labels,
        region_spans=tuple(derive_region_spans(region_labels, cdr_labels)),
        per_model_depth=per_model,
        source_filename=Path(source_filename).name,
    )

# abnovobench_ingest/core/indicators.py
from __future__ import annotations
import dataclasses
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import MappingProxyType
from typing import Iterable, Iterator, Sequence

from .errors import MalformedRowError, NotFoundError
from .model import (
    IndicatorDataset,
    IndicatorDescriptor,
    IndicatorRow,
    IndicatorSummary,
    MissingCleavageRow,
    NoiseCleavageRow,
    NoiseFactorRow,
    PeptideLengthRow,
)
from .normalize import PERCENT_FIELDS, parse_float_cell, parse_int_cell, percent_to_fraction, split_csv_line

_LOG = logging.getLogger(__name__)

MIN_COLUMNS = 3     # tool + at least two measurements


# ---------- row parsers (one per table shape) ----------
class RowParser(ABC):
    """Turns the trimmed cells of one data line into an IndicatorRow."""

    columns: tuple[str, ...] = ()

    @abstractmethod
    def parse(self, cells: Sequence[str]) -> IndicatorRow: ...

    def _cell(self, cells: Sequence[str], idx: int) -> str:
        if idx >= len(cells):
            raise MalformedRowError(f"missing column {self.columns[idx]} ({len(cells)} cells)")
        return cells[idx]

    def _float(self, cells: Sequence[str], idx: int) -> float:
        return parse_float_cell(self._cell(cells, idx), self.columns[idx])

    def _int(self, cells: Sequence[str], idx: int) -> int:
        return parse_int_cell(self._cell(cells, idx), self.columns[idx])

    def _tool(self, cells: Sequence[str]) -> str:
        tool = self._cell(cells, 0)
        if not tool:
            raise MalformedRowError("empty tool name")
        return tool


class NoiseCleavageRowParser(RowParser):
    columns = ("tool", "aa_recall", "peptide_recall", "noise_factor", "missing_cleavages")

    def parse(self, cells):
        return NoiseCleavageRow(
            tool=self._tool(cells),
            aa_recall=self._float(cells, 1),
            peptide_recall=self._float(cells, 2),
            noise_factor=self._int(cells, 3),
            missing_cleavages=self._int(cells, 4),
        )


class NoiseFactorRowParser(RowParser):
    columns = ("tool", "aa_recall", "peptide_recall", "noise_factor")

    def parse(self, cells):
        return NoiseFactorRow(
            tool=self._tool(cells),
            aa_recall=self._float(cells, 1),
            peptide_recall=self._float(cells, 2),
            noise_factor=self._int(cells, 3),
        )


class MissingCleavageRowParser(RowParser):
    columns = ("tool", "aa_recall", "peptide_recall", "missing_cleavages")

    def parse(self, cells):
        return MissingCleavageRow(
            tool=self._tool(cells),
            aa_recall=self._float(cells, 1),
            peptide_recall=self._float(cells, 2),
            missing_cleavages=self._int(cells, 3),
        )


class PeptideLengthRowParser(RowParser):
    columns = ("tool", "peptide_length", "aa_recall", "aa_precision", "peptide_recall",
               "total_peptides", "correct_predictions", "incorrect_predictions",
               "peptides_no_missing_cleavages")

    def parse(self, cells):
        return PeptideLengthRow(
            tool=self._tool(cells),
            peptide_length=self._int(cells, 1),
            aa_recall=self._float(cells, 2),
            aa_precision=self._float(cells, 3),
            peptide_recall=self._float(cells, 4),
            total_peptides=self._int(cells, 5),
            correct_predictions=self._int(cells, 6),
            incorrect_predictions=self._int(cells, 7),
            peptides_no_missing_cleavages=self._int(cells, 8),
        )


# ---------- registry ----------
class IndicatorRegistry(Mapping):
    """Read-only key -> IndicatorDescriptor map, built once and passed around explicitly."""

    def __init__(self, descriptors: Iterable[IndicatorDescriptor]):
        table: dict[str, IndicatorDescriptor] = {}
        for d in descriptors:
            if d.key in table:
                raise ValueError(f"duplicate indicator key: {d.key}")
            table[d.key] = d
        self._table = MappingProxyType(table)

    def __getitem__(self, key: str) -> IndicatorDescriptor:
        return self._table[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def require(self, key: str) -> IndicatorDescriptor:
        try:
            return self._table[key]
        except KeyError:
            raise NotFoundError(f"unknown indicator: {key}", resource=key) from None


def default_registry() -> IndicatorRegistry:
    recall_by_cleavage = MissingCleavageRowParser()
    return IndicatorRegistry([
        IndicatorDescriptor(
            key="noise_and_cleavages",
            source_filename="NoiseFactorANDMissingcleavagesVSRecall.csv",
            display_name="Noise Factor & Missing Cleavages",
            description="Impact of noise factor and missing cleavages on model performance",
            chart_kind="heatmap",
            x_axis="noise_factor",
            y_axis="missing_cleavages",
            row_parser=NoiseCleavageRowParser(),
        ),
        IndicatorDescriptor(
            key="noise_factor",
            source_filename="NoiseFactorVSRecall.csv",
            display_name="Noise Factor Impact",
            description="Impact of noise factor on model performance",
            chart_kind="line",
            x_axis="noise_factor",
            row_parser=NoiseFactorRowParser(),
        ),
        IndicatorDescriptor(
            key="missing_cleavages",
            source_filename="MissingCleavagesVSRecall.csv",
            display_name="Missing Cleavages Impact",
            description="Impact of missing cleavage sites on model performance",
            chart_kind="line",
            x_axis="missing_cleavages",
            row_parser=recall_by_cleavage,
        ),
        IndicatorDescriptor(
            key="peptide_length",
            source_filename="LengthVsRecall2.csv",
            display_name="Peptide Length Impact",
            description="Impact of peptide length on model performance",
            chart_kind="line",
            x_axis="peptide_length",
            row_parser=PeptideLengthRowParser(),
        ),
        IndicatorDescriptor(
            key="missing_cleavages_with_a_ions",
            source_filename="MissingCleavages_inlcudingAIons_VSRecall.csv",
            display_name="Missing Cleavages (with A-ions)",
            description="Impact of missing cleavage sites including A-ions on model performance",
            chart_kind="line",
            x_axis="missing_cleavages",
            row_parser=recall_by_cleavage,
        ),
    ])


def list_indicators(registry: IndicatorRegistry) -> tuple[IndicatorSummary, ...]:
    return tuple(
        IndicatorSummary(key=d.key, display_name=d.display_name,
                         description=d.description, chart_kind=d.chart_kind)
        for d in registry.values()
    )


# ---------- generic parsing ----------
def normalize_percentages(row: IndicatorRow) -> IndicatorRow:
    """Percent fields -> 0..1 fractions, keyed purely by field name."""
    names = {f.name for f in dataclasses.fields(row)}
    changes = {n: percent_to_fraction(getattr(row, n)) for n in PERCENT_FIELDS if n in names}
    return dataclasses.replace(row, **changes) if changes else row


def normalize_dataset(ds: IndicatorDataset) -> IndicatorDataset:
    if ds.percent_normalized:
        return ds
    rows = {tool: tuple(normalize_percentages(r) for r in rs) for tool, rs in ds.rows_by_tool.items()}
    return IndicatorDataset(descriptor=ds.descriptor, rows_by_tool=rows, percent_normalized=True)


def parse_indicator_lines(descriptor: IndicatorDescriptor, lines: Iterable[str]) -> IndicatorDataset:
    """
    Header is discarded; each non-empty line is comma split and trimmed, and rows
    with at least MIN_COLUMNS cells go through the descriptor's row parser.
    A row that fails to parse is logged and skipped.
    """
    grouped: dict[str, list[IndicatorRow]] = {}
    skipped = 0
    it = iter(lines)
    next(it, None)  # header

    for lineno, line in enumerate(it, start=2):
        if not line.strip():
            continue
        cells = split_csv_line(line)
        if len(cells) < MIN_COLUMNS:
            continue
        try:
            row = descriptor.row_parser.parse(cells)
        except Exception as exc:  # registered parsers may raise anything
            skipped += 1
            _LOG.warning("%s line %d skipped: %s", descriptor.source_filename, lineno, exc)
            continue
        grouped.setdefault(row.tool, []).append(row)

    if skipped:
        _LOG.info("%s: %d malformed row(s) skipped", descriptor.key, skipped)
    raw = IndicatorDataset(descriptor=descriptor,
                           rows_by_tool={t: tuple(rs) for t, rs in grouped.items()})
    return normalize_dataset(raw)


def rows_for_tool(ds: IndicatorDataset, tool: str) -> tuple[IndicatorRow, ...]:
    try:
        return ds.rows_by_tool[tool]
    except KeyError:
        raise NotFoundError(f"no data for tool {tool} in indicator {ds.descriptor.key}",
                            resource=ds.descriptor.key) from None

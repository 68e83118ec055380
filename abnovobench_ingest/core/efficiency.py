# abnovobench_ingest/core/efficiency.py
from __future__ import annotations
import logging
from typing import Iterable

from .classify import DEFAULT_RULES, ArchitectureRules, classify_architecture
from .errors import MalformedRowError, NotFoundError
from .model import EfficiencyRecord
from .normalize import parse_float_cell, split_csv_line

_LOG = logging.getLogger(__name__)


def _parse_row(cells: list[str], rules: ArchitectureRules) -> EfficiencyRecord:
    if len(cells) < 2:
        raise MalformedRowError(f"expected algorithm,throughput; got {len(cells)} cell(s)")
    algorithm = cells[0]
    if not algorithm:
        raise MalformedRowError("empty algorithm name")
    speed = parse_float_cell(cells[1], "throughput")
    return EfficiencyRecord(
        algorithm_name=algorithm,
        throughput_spectra_per_second=speed,
        architecture_family=classify_architecture(algorithm, rules),
    )


def parse_efficiency_lines(lines: Iterable[str], rules: ArchitectureRules = DEFAULT_RULES) -> list[EfficiencyRecord]:
    records: list[EfficiencyRecord] = []
    it = iter(lines)
    next(it, None)  # header
    for lineno, line in enumerate(it, start=2):
        if not line.strip():
            continue
        try:
            records.append(_parse_row(split_csv_line(line), rules))
        except MalformedRowError as exc:
            _LOG.warning("efficiency line %d skipped: %s", lineno, exc)
    return records


def parse_efficiency(text: str, rules: ArchitectureRules = DEFAULT_RULES) -> list[EfficiencyRecord]:
    return parse_efficiency_lines(text.splitlines(), rules)


def find_efficiency(records: Iterable[EfficiencyRecord], model_name: str) -> EfficiencyRecord:
    wanted = (model_name or "").lower()
    for r in records:
        if r.algorithm_name.lower() == wanted:
            return r
    raise NotFoundError(f"no efficiency data for model {model_name}", resource=model_name)

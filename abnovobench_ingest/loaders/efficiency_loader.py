# abnovobench_ingest/loaders/efficiency_loader.py
from __future__ import annotations
from pathlib import Path

from ..core.classify import DEFAULT_RULES, ArchitectureRules
from ..core.efficiency import parse_efficiency
from ..core.errors import io_context
from ..core.model import EfficiencyRecord


def load(path: Path, rules: ArchitectureRules = DEFAULT_RULES) -> list[EfficiencyRecord]:
    with io_context(path.name):
        text = path.read_text(encoding="utf-8")
    return parse_efficiency(text.strip(), rules)

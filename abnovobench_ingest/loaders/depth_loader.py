# abnovobench_ingest/loaders/depth_loader.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable

from ..core.coverage import CDR_LABELS, HEAVY_CHAIN_TAGS, parse_coverage_table
from ..core.errors import IngestError, NotFoundError, io_context
from ..core.model import CoverageDataset

_LOG = logging.getLogger(__name__)


def _list_option(section: dict, key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    val = section.get(key)
    if isinstance(val, Iterable) and not isinstance(val, (str, bytes)):
        return tuple(str(v) for v in val)
    return default


def _coverage_cfg(cfg: dict | None) -> dict:
    return ((cfg or {}).get("coverage", {}) or {})


def load(path: Path, cfg: dict | None = None) -> CoverageDataset:
    cov = _coverage_cfg(cfg)
    with io_context(path.name):
        text = path.read_text(encoding="utf-8")
    return parse_coverage_table(
        text,
        source_filename=path.name,
        cdr_labels=_list_option(cov, "cdr_labels", CDR_LABELS),
        heavy_chain_tags=_list_option(cov, "heavy_chain_tags", HEAVY_CHAIN_TAGS),
    )


def load_directory(folder: Path, cfg: dict | None = None, antibody: str | None = None) -> list[CoverageDataset]:
    """
    Parse every coverage table in ``folder`` (sorted by name). A file that fails
    is logged and left out; an ``antibody`` filter (case-insensitive) that
    matches nothing is NotFoundError.
    """
    if not folder.is_dir():
        raise NotFoundError(f"coverage directory not found: {folder}", resource=str(folder))

    ext = str(_coverage_cfg(cfg).get("extension", ".csv")).lower()
    datasets: list[CoverageDataset] = []
    for p in sorted(folder.iterdir()):
        if not p.is_file() or p.suffix.lower() != ext:
            continue
        try:
            datasets.append(load(p, cfg))
        except IngestError as e:
            _LOG.warning("skipping coverage file %s: %s", p.name, e)

    if antibody is not None:
        wanted = antibody.lower()
        datasets = [d for d in datasets if d.antibody_id.lower() == wanted]
        if not datasets:
            raise NotFoundError(f"no coverage data for antibody {antibody}", resource=antibody)
    return datasets

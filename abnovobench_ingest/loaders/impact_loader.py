# abnovobench_ingest/loaders/impact_loader.py
from __future__ import annotations
import logging
from pathlib import Path

from ..core.errors import IngestError, NotFoundError, io_context
from ..core.indicators import IndicatorRegistry, parse_indicator_lines
from ..core.model import IndicatorDataset

_LOG = logging.getLogger(__name__)


def parse_indicator(key: str, registry: IndicatorRegistry, data_dir: Path) -> IndicatorDataset:
    """
    Unknown key or missing backing file -> NotFoundError.
    Anything else that goes wrong is re-raised as IngestError naming the indicator.
    """
    descriptor = registry.require(key)
    path = data_dir / descriptor.source_filename
    if not path.is_file():
        raise NotFoundError(f"indicator data file not found: {descriptor.source_filename}", resource=key)

    with io_context(descriptor.source_filename):
        text = path.read_text(encoding="utf-8")
    try:
        return parse_indicator_lines(descriptor, text.strip().splitlines())
    except IngestError:
        raise
    except Exception as exc:
        raise IngestError(f"failed to parse indicator {key}: {exc}", resource=key) from exc


def parse_all_indicators(registry: IndicatorRegistry, data_dir: Path) -> dict[str, IndicatorDataset]:
    """Every registered indicator parsed independently; failures are logged and left out."""
    out: dict[str, IndicatorDataset] = {}
    for key in registry:
        try:
            out[key] = parse_indicator(key, registry, data_dir)
        except IngestError as e:
            _LOG.warning("failed to load indicator %s: %s", key, e)
    _LOG.info("loaded %d/%d indicators from %s", len(out), len(registry), data_dir)
    return out

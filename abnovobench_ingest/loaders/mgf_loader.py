# abnovobench_ingest/loaders/mgf_loader.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterator

from ..core.errors import io_context
from ..core.model import Spectrum, SpectrumPreview
from ..core.spectra import iter_spectra, preview_spectra

_LOG = logging.getLogger(__name__)

DEFAULT_PREVIEW_COUNT = 5


def preview_count(cfg: dict | None) -> int:
    return int(((cfg or {}).get("spectra", {}) or {}).get("preview_count", DEFAULT_PREVIEW_COUNT))


def iter_file(path: Path, max_spectra: int | None = None) -> Iterator[Spectrum]:
    """Stream spectra straight from disk without holding the whole file."""
    with io_context(path.name):
        with path.open("r", encoding="utf-8") as f:
            yield from iter_spectra(f, max_spectra=max_spectra)


def load_preview(path: Path, cfg: dict | None = None, limit: int | None = None) -> SpectrumPreview:
    n = preview_count(cfg) if limit is None else limit
    with io_context(path.name):
        text = path.read_text(encoding="utf-8")
    preview = preview_spectra(text, limit=n)
    _LOG.debug("preview %s: %d spectra", path.name, len(preview.spectra))
    return preview


def load(path: Path, cfg: dict | None = None) -> list[Spectrum]:
    spectra = list(iter_file(path))
    _LOG.info("parsed %d spectra from %s", len(spectra), path.name)
    return spectra

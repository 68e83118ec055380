# abnovobench_ingest/core/pipeline.py
from __future__ import annotations
import logging
from typing import Iterable, Mapping

from ..config import DataPaths
from ..loaders import depth_loader, efficiency_loader, impact_loader, mgf_loader
from ..utils.detect import (
    DEFAULT_CATEGORIES,
    DEFAULT_EXTENSIONS,
    build_identifier_index,
    discover_spectral_files,
    resolve_identifier,
    summarize_listing,
)
from .classify import rules_from_config
from .efficiency import find_efficiency
from .errors import NotFoundError
from .indicators import IndicatorRegistry, default_registry, list_indicators, rows_for_tool
from .model import (
    CoverageDataset,
    EfficiencyRecord,
    IndicatorDataset,
    IndicatorRow,
    IndicatorSummary,
    SpectralFileEntry,
    Spectrum,
    SpectrumPreview,
)

_LOG = logging.getLogger(__name__)

# indicator served by the tool-only robustness lookup
LEGACY_TOOL_INDICATOR = "noise_and_cleavages"


def _spectra_options(cfg: dict) -> tuple[dict[str, str], tuple[str, ...]]:
    sp = cfg.get("spectra", {}) or {}
    cats = sp.get("categories")
    categories = {str(k): str(v) for k, v in cats.items()} if isinstance(cats, Mapping) and cats else dict(DEFAULT_CATEGORIES)
    exts = sp.get("extensions")
    if isinstance(exts, Iterable) and not isinstance(exts, (str, bytes)):
        extensions = tuple(str(e) for e in exts) or DEFAULT_EXTENSIONS
    else:
        extensions = DEFAULT_EXTENSIONS
    return categories, extensions


class DataCatalog:
    """
    Entry point for the request layer. Holds only read-only state built at
    construction (paths, indicator registry, classifier rules, spectral file
    index); every data call re-reads and re-parses its source file.
    """

    def __init__(self, cfg: dict | None = None, paths: DataPaths | None = None,
                 registry: IndicatorRegistry | None = None):
        self.cfg = cfg or {}
        self.paths = paths or DataPaths.from_config(self.cfg)
        self.registry = registry if registry is not None else default_registry()
        self.rules = rules_from_config(self.cfg)
        self.categories, self.extensions = _spectra_options(self.cfg)
        self._index: dict[str, SpectralFileEntry] = {}
        self.refresh()

    def refresh(self) -> None:
        """Rebuild the identifier index from disk (call after files were added or removed)."""
        try:
            entries = discover_spectral_files(self.paths.mgf_dir, self.categories, self.extensions)
        except NotFoundError as e:
            _LOG.warning("%s; spectral file index is empty", e)
            entries = []
        self._index = build_identifier_index(entries)
        _LOG.info("indexed %d spectral file(s) under %s", len(self._index), self.paths.mgf_dir)

    # ---------- spectra ----------
    def list_spectral_files(self) -> list[SpectralFileEntry]:
        entries = discover_spectral_files(self.paths.mgf_dir, self.categories, self.extensions)
        return list(build_identifier_index(entries).values())

    def listing(self) -> dict:
        return summarize_listing(self.list_spectral_files(), self.categories)

    def spectral_file(self, identifier: str) -> SpectralFileEntry:
        return resolve_identifier(self._index, identifier)

    def preview(self, identifier: str, limit: int | None = None) -> SpectrumPreview:
        entry = self.spectral_file(identifier)
        return mgf_loader.load_preview(entry.path, self.cfg, limit=limit)

    def spectra(self, identifier: str) -> list[Spectrum]:
        return mgf_loader.load(self.spectral_file(identifier).path, self.cfg)

    # ---------- coverage ----------
    def coverage(self, antibody: str | None = None) -> list[CoverageDataset]:
        return depth_loader.load_directory(self.paths.depth_dir, self.cfg, antibody=antibody)

    # ---------- robustness ----------
    def indicators(self) -> tuple[IndicatorSummary, ...]:
        return list_indicators(self.registry)

    def indicator(self, key: str) -> IndicatorDataset:
        return impact_loader.parse_indicator(key, self.registry, self.paths.impact_dir)

    def all_indicators(self) -> dict[str, IndicatorDataset]:
        return impact_loader.parse_all_indicators(self.registry, self.paths.impact_dir)

    def indicator_for_tool(self, key: str, tool: str) -> tuple[IndicatorRow, ...]:
        return rows_for_tool(self.indicator(key), tool)

    def robustness_for_tool(self, tool: str) -> tuple[IndicatorRow, ...]:
        return self.indicator_for_tool(LEGACY_TOOL_INDICATOR, tool)

    # ---------- efficiency ----------
    def efficiency(self) -> list[EfficiencyRecord]:
        return efficiency_loader.load(self.paths.efficiency_file, self.rules)

    def efficiency_for(self, model_name: str) -> EfficiencyRecord:
        return find_efficiency(self.efficiency(), model_name)

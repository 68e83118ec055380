# abnovobench_ingest/utils/detect.py
from __future__ import annotations
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping

from ..core.errors import NotFoundError
from ..core.model import SpectralFileEntry

_LOG = logging.getLogger(__name__)

# category -> subdirectory under the spectra root
DEFAULT_CATEGORIES: dict[str, str] = {"protease": "Protease", "species": "Species"}
DEFAULT_EXTENSIONS: tuple[str, ...] = (".mgf",)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    return _NON_ALNUM.sub("-", name.lower())


def make_identifier(category: str, stem: str) -> str:
    return f"{category}-{slugify(stem)}"


def _has_extension(p: Path, extensions: Iterable[str]) -> bool:
    return p.suffix.lower() in {e.lower() for e in extensions}


def _describe(category: str, stem: str) -> str:
    if category == "protease":
        return f"Mass spectra data for {stem} protease digestion"
    if category == "species":
        return f"Mass spectra data for {stem} species"
    return f"Mass spectra data for {stem} ({category})"


def _entry(p: Path, category: str) -> SpectralFileEntry:
    st = p.stat()
    return SpectralFileEntry(
        identifier=make_identifier(category, p.stem),
        name=p.stem,
        category=category,
        path=p.resolve(),
        size_bytes=int(st.st_size),
        modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc).isoformat(),
        description=_describe(category, p.stem),
    )


def _category_files(root: Path, subdir: str, extensions: Iterable[str]) -> list[Path]:
    folder = root / subdir
    if not folder.is_dir():
        return []
    return sorted(p for p in folder.iterdir() if p.is_file() and _has_extension(p, extensions))


def discover_spectral_files(root: Path,
                            categories: Mapping[str, str] = DEFAULT_CATEGORIES,
                            extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> list[SpectralFileEntry]:
    """
    Walk ``root/<subdir>`` for each category and list spectral files.
    Missing category folders are skipped; a missing root is NotFoundError.
    Deterministic ordering: category order as configured, then filename.
    """
    if not root.is_dir():
        raise NotFoundError(f"spectra directory not found: {root}", resource=str(root))

    extensions = tuple(extensions)
    items: list[SpectralFileEntry] = []
    for category, subdir in categories.items():
        for p in _category_files(root, subdir, extensions):
            items.append(_entry(p, category))
    return items


def build_identifier_index(entries: Iterable[SpectralFileEntry]) -> dict[str, SpectralFileEntry]:
    """Computed once at start-up. On a slug collision the first entry keeps the identifier."""
    index: dict[str, SpectralFileEntry] = {}
    for e in entries:
        kept = index.get(e.identifier)
        if kept is not None:
            _LOG.warning("identifier %s of %s collides with %s; %s not indexed",
                         e.identifier, e.path.name, kept.path.name, e.path.name)
            continue
        index[e.identifier] = e
    return index


def resolve_identifier(index: Mapping[str, SpectralFileEntry], identifier: str) -> SpectralFileEntry:
    entry = index.get(identifier)
    if entry is None:
        raise NotFoundError(f"spectral file not found: {identifier}", resource=identifier)
    return entry


def resolve_by_scan(root: Path, category: str, identifier: str,
                    categories: Mapping[str, str] = DEFAULT_CATEGORIES,
                    extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> Path:
    """Per-request O(n) lookup: recompute every candidate's identifier in one category."""
    subdir = categories.get(category)
    if subdir is None:
        raise NotFoundError(f"unknown spectra category: {category}", resource=identifier)
    for p in _category_files(root, subdir, extensions):
        if make_identifier(category, p.stem) == identifier:
            return p
    raise NotFoundError(f"spectral file not found: {identifier}", resource=identifier)


def summarize_listing(entries: Iterable[SpectralFileEntry],
                      categories: Mapping[str, str] = DEFAULT_CATEGORIES) -> dict:
    """Listing payload: every entry plus the total and a count per configured category."""
    entries = list(entries)
    counts = {c: 0 for c in categories}
    for e in entries:
        counts[e.category] = counts.get(e.category, 0) + 1
    return {
        "datasets": [e.to_dict() for e in entries],
        "total": len(entries),
        "categories": counts,
    }

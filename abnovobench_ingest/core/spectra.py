# abnovobench_ingest/core/spectra.py
from __future__ import annotations
import logging
from typing import Iterable, Iterator

from .model import Peak, Spectrum, SpectrumPreview

_LOG = logging.getLogger(__name__)

BEGIN_IONS = "BEGIN IONS"
END_IONS = "END IONS"

# header key -> Spectrum field
_FIELD_PREFIXES: tuple[tuple[str, str], ...] = (
    ("TITLE=", "title"),
    ("PEPMASS=", "precursor_mass"),
    ("CHARGE=", "charge"),
    ("SEQ=", "reference_sequence"),
)
_IGNORED_PREFIXES: tuple[str, ...] = ("SCANS=", "RTINSECONDS=")


def _parse_peak(line: str) -> Peak | None:
    parts = line.split()
    if len(parts) < 2:
        return None
    try:
        return Peak(mz=float(parts[0]), intensity=float(parts[1]))
    except ValueError:
        return None


def iter_spectra(lines: Iterable[str], max_spectra: int | None = None) -> Iterator[Spectrum]:
    """
    Two-state scan over MGF text.

    OUTSIDE:     only ``BEGIN IONS`` matters; it opens an empty spectrum.
    IN_SPECTRUM: ``END IONS`` closes and yields it; TITLE/PEPMASS/CHARGE/SEQ set
                 fields; remaining whitespace-separated lines are peaks when both
                 leading tokens parse as floats, otherwise they are dropped.

    Stops after ``max_spectra`` spectra (None = no limit). Unterminated blocks
    are never yielded.
    """
    if max_spectra is not None and max_spectra <= 0:
        return

    emitted = 0
    fields: dict | None = None      # None <=> OUTSIDE
    peaks: list[Peak] = []

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if line == BEGIN_IONS:
            if fields is not None:
                _LOG.debug("line %d: BEGIN IONS inside open block; previous block discarded", lineno)
            fields, peaks = {}, []
            continue
        if fields is None:
            continue

        if line == END_IONS:
            yield Spectrum(peaks=tuple(peaks), **fields)
            emitted += 1
            fields, peaks = None, []
            if max_spectra is not None and emitted >= max_spectra:
                return
            continue

        for prefix, name in _FIELD_PREFIXES:
            if line.startswith(prefix):
                fields[name] = line[len(prefix):]
                break
        else:
            if not line or line.startswith(_IGNORED_PREFIXES):
                continue
            peak = _parse_peak(line)
            if peak is None:
                _LOG.debug("line %d: dropped non-peak line %r", lineno, line[:80])
                continue
            peaks.append(peak)

    if fields is not None:
        _LOG.debug("input ended inside an open BEGIN IONS block; block not emitted")


def parse_spectra(text: str, max_spectra: int | None = None) -> list[Spectrum]:
    return list(iter_spectra(text.splitlines(), max_spectra=max_spectra))


def preview_spectra(text: str, limit: int = 5) -> SpectrumPreview:
    """First ``limit`` spectra plus the untouched raw text for pass-through."""
    return SpectrumPreview(spectra=tuple(iter_spectra(text.splitlines(), max_spectra=limit)),
                           raw_content=text)

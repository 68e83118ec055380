# abnovobench_ingest/core/model.py
from __future__ import annotations
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Mapping, Optional
import numpy as np

from .errors import MalformedTableError

if TYPE_CHECKING:
    from .indicators import RowParser

ChainLabel = Literal["Heavy Chain", "Light Chain"]
ChartKind = Literal["heatmap", "line"]

# listing key that repeats the file stem, per category
_CATEGORY_NAME_FIELDS = {"protease": "enzyme", "species": "species"}


# ---------- spectra ----------
@dataclass(frozen=True)
class Peak:
    mz: float
    intensity: float


@dataclass(frozen=True)
class Spectrum:
    title: Optional[str] = None
    precursor_mass: Optional[str] = None    # PEPMASS= value, kept verbatim (may hold "mz intensity")
    charge: Optional[str] = None            # e.g. "2+"
    reference_sequence: Optional[str] = None
    peaks: tuple[Peak, ...] = ()

    def as_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        mz = np.fromiter((p.mz for p in self.peaks), dtype=float, count=len(self.peaks))
        inten = np.fromiter((p.intensity for p in self.peaks), dtype=float, count=len(self.peaks))
        return mz, inten

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SpectrumPreview:
    spectra: tuple[Spectrum, ...]
    raw_content: str

    def to_dict(self) -> dict:
        return {
            "spectra_preview": [s.to_dict() for s in self.spectra],
            "raw_content": self.raw_content,
        }


@dataclass(frozen=True)
class SpectralFileEntry:
    identifier: str           # e.g. protease-trypsin
    name: str                 # file stem
    category: str             # protease | species | ...
    path: Path
    size_bytes: int
    modified: str             # ISO-8601, UTC
    description: str = ""

    @property
    def size_label(self) -> str:
        return f"{self.size_bytes / 1024 / 1024:.2f} MB"

    @property
    def type_label(self) -> str:
        return f"{self.category.capitalize()}-specific"

    def to_dict(self) -> dict:
        return {
            "id": self.identifier,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "file_path": str(self.path),
            "size_bytes": self.size_bytes,
            "size": self.size_label,
            "modified_date": self.modified,
            "type": self.type_label,
            _CATEGORY_NAME_FIELDS.get(self.category, self.category): self.name,
        }


# ---------- coverage ----------
@dataclass(frozen=True)
class RegionSpan:
    region_name: str
    start_position: int       # 1-indexed column
    end_position: int         # inclusive
    kind: str = "CDR"


@dataclass(frozen=True)
class CoverageDataset:
    antibody_id: str
    chain_label: ChainLabel
    positions: tuple[int, ...]
    region_labels: tuple[str, ...]
    region_spans: tuple[RegionSpan, ...]
    per_model_depth: Mapping[str, tuple[int, ...]]
    source_filename: str = ""

    def __post_init__(self):
        n = len(self.positions)
        if len(self.region_labels) != n:
            raise MalformedTableError(
                f"{len(self.region_labels)} region labels for {n} positions",
                resource=self.source_filename or None,
            )
        for model_name, depth in self.per_model_depth.items():
            if len(depth) != n:
                raise MalformedTableError(
                    f"model '{model_name}' has {len(depth)} depth values for {n} positions",
                    resource=self.source_filename or None,
                )

    def to_dict(self) -> dict:
        return {
            "antibody": self.antibody_id,
            "chain": self.chain_label,
            "positions": list(self.positions),
            "regions": list(self.region_labels),
            "regionBoundaries": [
                {"region": s.region_name, "start": s.start_position, "end": s.end_position, "type": s.kind}
                for s in self.region_spans
            ],
            "models": {k: list(v) for k, v in self.per_model_depth.items()},
            "filename": self.source_filename,
        }


# ---------- robustness indicators ----------
@dataclass(frozen=True)
class IndicatorRow:
    tool: str

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class NoiseCleavageRow(IndicatorRow):
    aa_recall: float
    peptide_recall: float
    noise_factor: int
    missing_cleavages: int


@dataclass(frozen=True)
class NoiseFactorRow(IndicatorRow):
    aa_recall: float
    peptide_recall: float
    noise_factor: int


@dataclass(frozen=True)
class MissingCleavageRow(IndicatorRow):
    aa_recall: float
    peptide_recall: float
    missing_cleavages: int


@dataclass(frozen=True)
class PeptideLengthRow(IndicatorRow):
    peptide_length: int
    aa_recall: float
    aa_precision: float
    peptide_recall: float
    total_peptides: int
    correct_predictions: int
    incorrect_predictions: int
    peptides_no_missing_cleavages: int


@dataclass(frozen=True)
class IndicatorDescriptor:
    key: str
    source_filename: str
    display_name: str
    description: str
    chart_kind: ChartKind
    x_axis: str
    row_parser: "RowParser" = field(repr=False, compare=False)
    y_axis: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.display_name,
            "description": self.description,
            "type": self.chart_kind,
            "xAxis": self.x_axis,
            "yAxis": self.y_axis,
        }


@dataclass(frozen=True)
class IndicatorSummary:
    key: str
    display_name: str
    description: str
    chart_kind: ChartKind


@dataclass(frozen=True)
class IndicatorDataset:
    descriptor: IndicatorDescriptor
    rows_by_tool: Mapping[str, tuple[IndicatorRow, ...]]
    percent_normalized: bool = False

    def to_dict(self) -> dict:
        return {
            "indicator": self.descriptor.to_dict(),
            "data": {tool: [r.to_dict() for r in rows] for tool, rows in self.rows_by_tool.items()},
        }


# ---------- efficiency ----------
@dataclass(frozen=True)
class EfficiencyRecord:
    algorithm_name: str
    throughput_spectra_per_second: float
    architecture_family: str

    def to_dict(self) -> dict:
        return asdict(self)

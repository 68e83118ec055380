# abnovobench_ingest/config.py
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"
DATA_ROOT_ENV = "ABNOVOBENCH_DATA_ROOT"


def load_config(cfg_path: Path | None = None) -> dict:
    path = cfg_path or DEFAULT_CONFIG_PATH
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@dataclass(frozen=True)
class DataPaths:
    root: Path
    mgf_dir: Path
    depth_dir: Path
    impact_dir: Path
    efficiency_file: Path

    @classmethod
    def from_config(cls, cfg: dict | None) -> "DataPaths":
        data = (cfg or {}).get("data", {}) or {}
        root = Path(os.getenv(DATA_ROOT_ENV) or data.get("root", "./data")).expanduser()
        return cls(
            root=root,
            mgf_dir=root / str(data.get("mgf_dir", "mgf")),
            depth_dir=root / str(data.get("depth_dir", "depth")),
            impact_dir=root / str(data.get("impact_dir", "impact")),
            efficiency_file=root / str(data.get("efficiency_file", "csv/efficiency.csv")),
        )

# abnovobench_ingest/main.py
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path

from .config import DEFAULT_CONFIG_PATH, load_config
from .core.errors import IngestError, NotFoundError
from .core.pipeline import DataCatalog


def _setup_logging(cfg: dict) -> bool:
    log_cfg = cfg.get("logging", {}) or {}
    verbose = bool(log_cfg.get("verbose", True))
    level = str(log_cfg.get("level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO) if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return verbose


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="abnovobench-ingest",
                                description="Parse benchmark data files and print them as JSON.")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH)
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="list spectral files")
    pv = sub.add_parser("preview", help="first spectra of one spectral file")
    pv.add_argument("identifier")
    pv.add_argument("--limit", type=int, default=None)
    cv = sub.add_parser("coverage", help="coverage depth tables with CDR spans")
    cv.add_argument("--antibody", default=None)
    ind = sub.add_parser("indicators", help="robustness indicators")
    ind.add_argument("--key", default=None)
    ind.add_argument("--tool", default=None, help="rows of one tool; without --key reads noise_and_cleavages")
    sub.add_parser("efficiency", help="throughput per algorithm")
    return p


def _run(catalog: DataCatalog, args: argparse.Namespace):
    if args.command == "list":
        return catalog.listing()
    if args.command == "preview":
        return catalog.preview(args.identifier, limit=args.limit).to_dict()
    if args.command == "coverage":
        return {"datasets": [d.to_dict() for d in catalog.coverage(args.antibody)]}
    if args.command == "indicators":
        if args.key and args.tool:
            return [r.to_dict() for r in catalog.indicator_for_tool(args.key, args.tool)]
        if args.key:
            return catalog.indicator(args.key).to_dict()
        if args.tool:
            return [r.to_dict() for r in catalog.robustness_for_tool(args.tool)]
        return {"indicators": {k: ds.to_dict() for k, ds in catalog.all_indicators().items()}}
    if args.command == "efficiency":
        return {"efficiency": [r.to_dict() for r in catalog.efficiency()]}
    raise ValueError(f"unknown command {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    cfg = load_config(args.config)
    verbose = _setup_logging(cfg)

    catalog = DataCatalog(cfg)
    if verbose:
        print(f"[cfg] config={args.config}", file=sys.stderr)
        print(f"[cfg] data root={catalog.paths.root.resolve()}", file=sys.stderr)

    try:
        payload = _run(catalog, args)
    except NotFoundError as e:
        print(f"[ERROR] not found: {e}", file=sys.stderr)
        return 1
    except IngestError as e:
        print(f"[ERROR] {e.resource or args.command}: {e}", file=sys.stderr)
        return 2

    json.dump(payload, sys.stdout, indent=2, ensure_ascii=False, default=str)
    sys.stdout.write("\n")
    if verbose:
        print(f"[OK] {args.command}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())

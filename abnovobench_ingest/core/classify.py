# abnovobench_ingest/core/classify.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable

_LOG = logging.getLogger(__name__)

UNKNOWN_ARCHITECTURE = "Unknown"


@dataclass(frozen=True)
class ArchitectureRules:
    # evaluated in order; first family whose keyword occurs in the name wins
    families: tuple[tuple[str, tuple[str, ...]], ...]
    unknown_label: str = UNKNOWN_ARCHITECTURE


DEFAULT_RULES = ArchitectureRules(families=(
    ("Transformer", ("transformer", "casanov", "contra", "insta", "pi-", "adanovo")),
    ("PointNet",    ("point", "pgpoint")),
    ("CNN",         ("pepnet", "smsnet")),
    ("RNN",         ("deepnovo",)),
))


def _keywords(value) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if isinstance(value, Iterable) and not isinstance(value, bytes):
        return tuple(str(k).lower() for k in value if str(k).strip())
    return ()


def rules_from_config(cfg: dict | None) -> ArchitectureRules:
    """
    Build rules from the ``classification`` section of config.yaml:

      classification:
        unknown_label: Unknown
        architectures:
          - {family: Transformer, keywords: [casanov, ...]}
          - ...

    Falls back to DEFAULT_RULES when no architectures are configured.
    """
    cls = (cfg or {}).get("classification", {}) or {}
    unknown = str(cls.get("unknown_label", UNKNOWN_ARCHITECTURE))

    families: list[tuple[str, tuple[str, ...]]] = []
    raw = cls.get("architectures")
    if isinstance(raw, Iterable) and not isinstance(raw, (str, bytes, dict)):
        for item in raw:
            if not isinstance(item, dict) or not item.get("family"):
                _LOG.warning("ignoring malformed architecture entry: %r", item)
                continue
            kws = _keywords(item.get("keywords"))
            if kws:
                families.append((str(item["family"]), kws))

    if not families:
        return ArchitectureRules(families=DEFAULT_RULES.families, unknown_label=unknown)
    return ArchitectureRules(families=tuple(families), unknown_label=unknown)


def classify_architecture(algorithm_name: str | None, rules: ArchitectureRules = DEFAULT_RULES) -> str:
    """Total: always returns a family label, ``rules.unknown_label`` when nothing matches."""
    name = algorithm_name.lower() if isinstance(algorithm_name, str) else ""
    for family, keywords in rules.families:
        for k in keywords:
            if k in name:
                _LOG.debug("%r -> %s by keyword '%s'", algorithm_name, family, k)
                return family
    return rules.unknown_label

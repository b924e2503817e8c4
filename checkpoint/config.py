# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# config.py
# -----------------------------------------------------------------------------
# Purpose:
#   Load the YAML baseline, apply scenario overrides, and turn a config dict
#   into SimulationParameters.
#
# Design notes:
#   - Scenario overrides are merged recursively on a deep copy of the base.
#   - Unknown keys under `params` are rejected rather than ignored.
#
# Usage:
#   cfg = load_cfg(); params = params_from_cfg(apply_overrides(cfg, sc))
# -----------------------------------------------------------------------------

from __future__ import annotations
import copy, os, random
from typing import Dict, Optional
import yaml
from .entities import SimulationParameters, InvalidParameters

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG = os.path.join(ROOT, "config", "baseline.yaml")


def load_cfg(path: Optional[str] = None) -> Dict:
    with open(path or DEFAULT_CONFIG, "r") as f:
        return yaml.safe_load(f) or {}


def apply_overrides(cfg: Dict, overrides: Dict) -> Dict:
    """Apply scenario overrides (recursive merge) on top of the base config."""
    new = copy.deepcopy(cfg)

    def _merge(dst: Dict, src: Dict):
        for key, val in src.items():
            if isinstance(val, dict) and isinstance(dst.get(key), dict):
                _merge(dst[key], val)
            else:
                dst[key] = copy.deepcopy(val)

    _merge(new, overrides)
    return new


def params_from_cfg(cfg: Dict) -> SimulationParameters:
    """Build a validated SimulationParameters from cfg['params'] (defaults fill gaps)."""
    raw = dict(cfg.get("params") or {})
    known = set(SimulationParameters.field_names())
    unknown = sorted(set(raw) - known)
    if unknown:
        raise InvalidParameters([f"unknown parameter {k!r}" for k in unknown])
    if "num_stations" in raw and isinstance(raw["num_stations"], float) and raw["num_stations"].is_integer():
        raw["num_stations"] = int(raw["num_stations"])
    return SimulationParameters(**raw).validate()


def rng_from_cfg(cfg: Dict, offset: int = 0) -> random.Random:
    """Seeded generator from cfg['sim']['seed'] (+offset per replication)."""
    seed = cfg.get("sim", {}).get("seed", 0)
    return random.Random(seed + offset)

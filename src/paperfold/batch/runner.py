from __future__ import annotations

import csv
import json
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from paperfold.core.seed.sequence import reduce_seed, seed_to_hex
from paperfold.core.traits.classifier import classify
from paperfold.io.formats import derive_seed, image_fingerprint, write_png
from paperfold.orchestrator.pipeline import compose, render
from paperfold.utils.logging import get_logger

logger = get_logger(__name__)


# -------------------------
# Config structures
# -------------------------


@dataclass(frozen=True)
class BatchConfig:
    seeds: Sequence[str]
    fold_counts: Sequence[Optional[int]]


@dataclass(frozen=True)
class OutputConfig:
    render: bool
    width: int
    height: int
    image_dir: Path
    include_timestamp_utc: bool


@dataclass(frozen=True)
class FullConfig:
    batch: BatchConfig
    output: OutputConfig


# -------------------------
# Config parsing/validation
# -------------------------


class ConfigError(Exception):
    """Raised when the batch config is invalid."""


def _require(mapping: Dict[str, Any], key: str, expected_type: Tuple[type, ...]):
    if key not in mapping:
        raise ConfigError(f"Missing required key '{key}'")
    val = mapping[key]
    if not isinstance(val, expected_type):
        raise ConfigError(f"Key '{key}' must be of type {expected_type}, got {type(val)}")
    return val


def _parse_seeds(batch: Dict[str, Any]) -> List[str]:
    seeds: List[str] = []
    for raw in batch.get("seeds") or []:
        # unquoted 0x... scalars arrive as ints
        seed = raw if isinstance(raw, int) else str(raw)
        try:
            reduce_seed(seed)
            seeds.append(seed_to_hex(seed))
        except ValueError as exc:
            raise ConfigError(f"Invalid seed {raw!r}: {exc}") from exc

    derive = batch.get("derive")
    if derive is not None:
        if not isinstance(derive, dict):
            raise ConfigError("batch.derive must be a mapping with 'prefix' and 'count'")
        prefix = str(derive.get("prefix", "paperfold"))
        count = int(_require(derive, "count", (int,)))
        if count < 0:
            raise ConfigError("batch.derive.count must not be negative")
        seeds.extend(derive_seed(prefix, i) for i in range(count))

    if not seeds:
        raise ConfigError("batch needs at least one seed (batch.seeds or batch.derive)")
    return seeds


def parse_config(path: Path) -> FullConfig:
    try:
        data = yaml.safe_load(path.read_text())
    except Exception as exc:  # noqa: BLE001
        raise ConfigError(f"Failed to read YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Top-level YAML must be a mapping.")

    batch = _require(data, "batch", (dict,))
    output = data.get("output") or {}
    if not isinstance(output, dict):
        raise ConfigError("Key 'output' must be a mapping")

    fold_counts: List[Optional[int]] = []
    for raw in batch.get("fold_counts") or [None]:
        if raw is not None and (not isinstance(raw, int) or raw < 0):
            raise ConfigError(f"fold_counts entries must be non-negative integers, got {raw!r}")
        fold_counts.append(raw)

    batch_cfg = BatchConfig(seeds=_parse_seeds(batch), fold_counts=fold_counts)

    output_cfg = OutputConfig(
        render=bool(output.get("render", False)),
        width=int(output.get("width", 600)),
        height=int(output.get("height", 750)),
        image_dir=Path(str(output.get("image_dir", "images"))),
        include_timestamp_utc=bool(output.get("include_timestamp_utc", True)),
    )
    if output_cfg.width <= 0 or output_cfg.height <= 0:
        raise ConfigError("output.width and output.height must be positive")

    return FullConfig(batch=batch_cfg, output=output_cfg)


# -------------------------
# Batch internals
# -------------------------


def _measure_time(func):
    start = time.perf_counter()
    result = func()
    end = time.perf_counter()
    return result, end - start


def _run_single_seed(output: OutputConfig, seed: str, fold_count: Optional[int], index: int) -> Dict[str, Any]:
    traits = classify(seed)
    comp, t_compose = _measure_time(lambda: compose(seed, fold_count))
    params = comp.params

    record: Dict[str, Any] = {
        "index": index,
        "seed": seed,
        "seed_num": reduce_seed(seed),
        "folds": params.fold_count,
        "max_folds": params.max_folds,
        "crease_count": len(comp.creases),
        "intersections": len(comp.grid.intersections),
        "cells_hit": len(comp.grid.counts),
        "cell_size": params.cell_size.label(),
        "palette": params.palette.strategy,
        "fold_strategy": traits.fold_strategy,
        "render_mode": traits.render_mode,
        "draw_direction": traits.draw_direction,
        "palette_strategy": traits.palette_strategy,
        "color_count": traits.color_count,
        "is_monochrome": traits.is_monochrome,
        "paper_type": traits.paper_type,
        "has_paper_grain": traits.has_paper_grain,
        "has_crease_lines": traits.has_crease_lines,
        "has_hit_counts": traits.has_hit_counts,
        "has_analytics_mode": traits.has_analytics_mode,
        "t_compose_s": t_compose,
        "t_render_s": None,
        "image_path": None,
        "image_sha256": None,
    }

    if output.render:
        pixels, t_render = _measure_time(lambda: render(seed, fold_count, output.width, output.height))
        name = f"{index:04d}_{seed[2:18]}_{params.fold_count}.png"
        path = write_png(output.image_dir / name, pixels)
        record["t_render_s"] = t_render
        record["image_path"] = str(path)
        record["image_sha256"] = image_fingerprint(pixels)

    if output.include_timestamp_utc:
        record["timestamp_utc"] = datetime.now(timezone.utc).isoformat()
    logger.debug("batch seed=%s folds=%s creases=%d", seed, params.fold_count, record["crease_count"])
    return record


def _run_task(task: Tuple[OutputConfig, str, Optional[int], int]) -> Dict[str, Any]:
    output, seed, fold_count, index = task
    return _run_single_seed(output, seed, fold_count, index)


def run_batch(config: FullConfig, jobs: int = 1) -> List[Dict[str, Any]]:
    tasks: List[Tuple[OutputConfig, str, Optional[int], int]] = []
    index = 0
    for seed in config.batch.seeds:
        for fold_count in config.batch.fold_counts:
            tasks.append((config.output, seed, fold_count, index))
            index += 1

    if jobs and jobs > 1:
        with ProcessPoolExecutor(max_workers=jobs) as ex:
            results = list(ex.map(_run_task, tasks))
    else:
        results = [_run_task(task) for task in tasks]

    # Sort deterministically
    return sorted(results, key=lambda rec: rec["index"])


# -------------------------
# Output helpers
# -------------------------


CSV_FIELDS = [
    "timestamp_utc",
    "index",
    "seed",
    "seed_num",
    "folds",
    "max_folds",
    "crease_count",
    "intersections",
    "cells_hit",
    "cell_size",
    "palette",
    "fold_strategy",
    "render_mode",
    "draw_direction",
    "palette_strategy",
    "color_count",
    "is_monochrome",
    "paper_type",
    "has_paper_grain",
    "has_crease_lines",
    "has_hit_counts",
    "has_analytics_mode",
    "t_compose_s",
    "t_render_s",
    "image_path",
    "image_sha256",
]


def write_csv(path: Path, records: List[Dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for rec in records:
            writer.writerow(rec)


def write_json_output(path: Path, records: List[Dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(records, f, indent=2)

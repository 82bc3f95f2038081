from __future__ import annotations

import csv
import json
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import matplotlib.pyplot as plt

from paperfold.utils.logging import get_logger

logger = get_logger(__name__)

# (csv column, heading) of the categorical traits summarised in reports
TRAIT_COLUMNS: List[Tuple[str, str]] = [
    ("fold_strategy", "Fold Strategy"),
    ("render_mode", "Render Mode"),
    ("draw_direction", "Draw Direction"),
    ("palette_strategy", "Palette Strategy"),
    ("paper_type", "Paper Type"),
    ("cell_size", "Cell Size"),
]

FLAG_COLUMNS: List[Tuple[str, str]] = [
    ("is_monochrome", "Monochrome"),
    ("has_paper_grain", "Paper Grain"),
    ("has_crease_lines", "Crease Lines"),
    ("has_hit_counts", "Hit Counts"),
    ("has_analytics_mode", "Analytics Mode"),
]


def _parse_float(val: str | None) -> Optional[float]:
    if val is None or val == "":
        return None
    try:
        return float(val)
    except ValueError:
        return None


def _parse_int(val: str | None) -> Optional[int]:
    if val is None or val == "":
        return None
    try:
        return int(val)
    except ValueError:
        return None


def _parse_bool(val: str | None) -> bool:
    return (val or "").strip().lower() in ("true", "1", "yes")


def _read_csv(path: Path) -> List[Dict[str, Any]]:
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        return [dict(row) for row in reader]


@dataclass
class TraitDistribution:
    column: str
    title: str
    counts: Dict[str, int]

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def ranked(self) -> List[Tuple[str, int]]:
        return sorted(self.counts.items(), key=lambda kv: (-kv[1], kv[0]))


@dataclass
class NumericSummary:
    column: str
    count: int
    minimum: float
    mean: float
    maximum: float


def _distributions(rows: List[Dict[str, Any]]) -> List[TraitDistribution]:
    # one row per seed; repeated fold counts would double-count traits
    by_seed: Dict[str, Dict[str, Any]] = {}
    for r in rows:
        by_seed.setdefault(r.get("seed") or "", r)
    unique = list(by_seed.values())

    dists: List[TraitDistribution] = []
    for column, title in TRAIT_COLUMNS:
        counter = Counter(r.get(column) or "n/a" for r in unique)
        dists.append(TraitDistribution(column, title, dict(counter)))
    for column, title in FLAG_COLUMNS:
        counter = Counter("Yes" if _parse_bool(r.get(column)) else "No" for r in unique)
        dists.append(TraitDistribution(column, title, dict(counter)))
    return dists


def _numeric(rows: List[Dict[str, Any]], column: str) -> Optional[NumericSummary]:
    vals = [v for v in (_parse_float(r.get(column)) for r in rows) if v is not None]
    if not vals:
        return None
    return NumericSummary(column, len(vals), min(vals), sum(vals) / len(vals), max(vals))


def _fold_table(rows: List[Dict[str, Any]]) -> List[Tuple[int, float, float]]:
    """(folds, mean creases, mean intersections) per requested fold count."""
    groups: Dict[int, List[Dict[str, Any]]] = {}
    for r in rows:
        folds = _parse_int(r.get("folds"))
        if folds is not None:
            groups.setdefault(folds, []).append(r)

    def mean(lst: List[Dict[str, Any]], column: str) -> float:
        vals = [v for v in (_parse_float(x.get(column)) for x in lst) if v is not None]
        return sum(vals) / len(vals) if vals else 0.0

    return [(f, mean(lst, "crease_count"), mean(lst, "intersections")) for f, lst in sorted(groups.items())]


def _render_markdown(
    rows: List[Dict[str, Any]],
    dists: List[TraitDistribution],
    batch_path: Path,
    timestamp: Optional[str],
    plots: List[str],
) -> str:
    seeds = {r.get("seed") for r in rows}
    lines = []
    lines.append("# Paperfold – Batch Report")
    if timestamp:
        lines.append(f"_Generated: {timestamp} UTC_")
    lines.append("")
    lines.append("## Inputs")
    lines.append(f"- Batch CSV: `{batch_path}` ({len(rows)} rows, {len(seeds)} seeds)")
    lines.append("")

    lines.append("## Trait Distribution")
    for dist in dists:
        lines.append("")
        lines.append(f"### {dist.title}")
        lines.append("")
        lines.append("| value | count | share |")
        lines.append("|---|---|---|")
        for value, count in dist.ranked():
            share = count / dist.total if dist.total else 0.0
            lines.append(f"| {value} | {count} | {share:.1%} |")
    lines.append("")

    lines.append("## Fold Statistics")
    table = _fold_table(rows)
    if table:
        lines.append("")
        lines.append("| folds | mean_creases | mean_intersections |")
        lines.append("|---|---|---|")
        for folds, creases, intersections in table:
            lines.append(f"| {folds} | {creases:.2f} | {intersections:.2f} |")
    else:
        lines.append("- No fold data.")
    lines.append("")

    timing = [s for s in (_numeric(rows, "t_compose_s"), _numeric(rows, "t_render_s")) if s]
    if timing:
        lines.append("## Timing")
        for s in timing:
            lines.append(f"- {s.column} min/mean/max: {s.minimum:.6g} / {s.mean:.6g} / {s.maximum:.6g} (n={s.count})")
        lines.append("")

    if plots:
        lines.append("## Plots")
        for p in plots:
            lines.append(f"![]({p})")
        lines.append("")

    lines.append("## Appendix")
    lines.append("- Traits are counted once per seed; fold statistics use every row.")
    lines.append("- Reproducibility: same seeds → identical traits, creases and image hashes.")
    return "\n".join(lines)


def _plot_distribution(dist: TraitDistribution, out_dir: Path) -> str:
    ranked = dist.ranked()
    labels = [v for v, _ in ranked]
    counts = [c for _, c in ranked]
    plt.figure(figsize=(max(4.0, 0.8 * len(labels)), 3.5))
    plt.bar(range(len(labels)), counts)
    plt.xticks(range(len(labels)), labels, rotation=30, ha="right")
    plt.ylabel("seeds")
    plt.title(dist.title)
    out_file = out_dir / f"trait_{dist.column}.png"
    out_file.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_file, dpi=150, bbox_inches="tight")
    plt.close()
    return str(out_file)


def generate_report(
    batch_csv: Path,
    out_md: Path,
    plots_dir: Path | None = None,
    include_timestamp: bool = True,
    json_summary: Path | None = None,
) -> Dict[str, Any]:
    rows = _read_csv(batch_csv)
    dists = _distributions(rows)
    logger.debug("report rows=%d distributions=%d", len(rows), len(dists))

    timestamp = datetime.now(timezone.utc).isoformat() if include_timestamp else None

    plot_refs: List[str] = []
    if plots_dir and rows:
        for dist in dists:
            plot_refs.append(_plot_distribution(dist, plots_dir))

    md = _render_markdown(rows, dists, batch_csv, timestamp, plot_refs)
    out_md.parent.mkdir(parents=True, exist_ok=True)
    out_md.write_text(md, encoding="utf-8")

    summary = {
        "rows": len(rows),
        "seeds": len({r.get("seed") for r in rows}),
        "batch_csv": str(batch_csv),
        "timestamp": timestamp,
        "traits": {d.column: d.counts for d in dists},
        "plots": plot_refs,
    }
    if json_summary:
        json_summary.parent.mkdir(parents=True, exist_ok=True)
        json_summary.write_text(json.dumps(summary, indent=2), encoding="utf-8")
    return summary

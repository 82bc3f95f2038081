import csv
import json
from pathlib import Path

from typer.testing import CliRunner

from paperfold.batch.runner import CSV_FIELDS
from paperfold.cli.app import app
from paperfold.report.runner import generate_report


def _row(seed, folds, creases, intersections, fold_strategy, monochrome, t_render=""):
    row = {field: "" for field in CSV_FIELDS}
    row.update(
        {
            "seed": seed,
            "folds": str(folds),
            "crease_count": str(creases),
            "intersections": str(intersections),
            "cell_size": "16x10",
            "fold_strategy": fold_strategy,
            "render_mode": "Normal",
            "draw_direction": "Left to Right",
            "palette_strategy": "Value",
            "paper_type": "Standard",
            "is_monochrome": "True" if monochrome else "False",
            "has_paper_grain": "False",
            "has_crease_lines": "False",
            "has_hit_counts": "False",
            "has_analytics_mode": "False",
            "t_compose_s": "0.5",
            "t_render_s": t_render,
        }
    )
    return row


def _write_batch_csv(path: Path):
    rows = [
        _row("0xaa", 10, 8, 20, "Random", False, "1.0"),
        _row("0xaa", 20, 16, 90, "Random", False, "2.0"),
        _row("0xbb", 10, 10, 30, "Vertical", True),
        _row("0xbb", 20, 18, 110, "Vertical", True),
        _row("0xcc", 10, 9, 25, "Random", False),
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for r in rows:
            writer.writerow(r)


def test_report_counts_traits_once_per_seed(tmp_path):
    csv_path = tmp_path / "batch.csv"
    _write_batch_csv(csv_path)
    out_md = tmp_path / "report.md"

    summary = generate_report(csv_path, out_md, include_timestamp=False)
    assert summary["rows"] == 5
    assert summary["seeds"] == 3
    assert summary["timestamp"] is None
    assert summary["traits"]["fold_strategy"] == {"Random": 2, "Vertical": 1}
    assert summary["traits"]["is_monochrome"] == {"No": 2, "Yes": 1}
    assert summary["plots"] == []

    md = out_md.read_text(encoding="utf-8")
    assert md.startswith("# Paperfold – Batch Report")
    assert "_Generated:" not in md
    assert "| Random | 2 | 66.7% |" in md
    assert "| 10 | 9.00 | 25.00 |" in md
    assert "| 20 | 17.00 | 100.00 |" in md
    assert "- t_render_s min/mean/max: 1 / 1.5 / 2 (n=2)" in md
    assert "## Plots" not in md


def test_report_cli_smoke(tmp_path):
    csv_path = tmp_path / "batch.csv"
    _write_batch_csv(csv_path)
    out_md = tmp_path / "report.md"
    plots_dir = tmp_path / "plots"
    summary_path = tmp_path / "summary.json"

    res = CliRunner().invoke(
        app,
        [
            "report",
            "--batch-csv",
            str(csv_path),
            "--out-md",
            str(out_md),
            "--plots-dir",
            str(plots_dir),
            "--json-summary",
            str(summary_path),
        ],
    )
    assert res.exit_code == 0, res.output
    assert "[done] rows=5 seeds=3 plots=11" in res.output

    md = out_md.read_text(encoding="utf-8")
    assert "_Generated:" in md
    assert "## Plots" in md
    assert (plots_dir / "trait_fold_strategy.png").exists()
    assert (plots_dir / "trait_has_analytics_mode.png").exists()

    summary = json.loads(summary_path.read_text(encoding="utf-8"))
    assert summary["batch_csv"] == str(csv_path)
    assert len(summary["plots"]) == 11


def test_report_on_empty_csv(tmp_path):
    csv_path = tmp_path / "empty.csv"
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        csv.DictWriter(f, fieldnames=CSV_FIELDS).writeheader()
    out_md = tmp_path / "report.md"
    summary = generate_report(csv_path, out_md, plots_dir=tmp_path / "plots", include_timestamp=False)
    assert summary["rows"] == 0
    assert summary["plots"] == []
    assert "- No fold data." in out_md.read_text(encoding="utf-8")

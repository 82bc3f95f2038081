import csv
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from paperfold.batch.runner import CSV_FIELDS, ConfigError, parse_config, run_batch
from paperfold.cli.app import GOLDEN_SEED, app
from paperfold.io.formats import derive_seed

E2E_SEED = "0x0fedcba987654321111111111111111122222222222222223333333333333333"


def _write_config(tmp_path: Path, render: bool = True) -> Path:
    cfg_path = Path(tmp_path) / "batch.yaml"
    cfg_path.write_text(
        "\n".join(
            [
                "batch:",
                "  seeds:",
                f'    - "{GOLDEN_SEED}"',
                f"    - {E2E_SEED}",
                "  derive:",
                "    prefix: test",
                "    count: 2",
                "  fold_counts: [3, 6]",
                "output:",
                f"  render: {'true' if render else 'false'}",
                "  width: 60",
                "  height: 75",
                f"  image_dir: {tmp_path / 'images'}",
                "  include_timestamp_utc: false",
                "",
            ]
        ),
        encoding="utf-8",
    )
    return cfg_path


def test_parse_config(tmp_path):
    cfg = parse_config(_write_config(tmp_path))
    assert list(cfg.batch.seeds) == [GOLDEN_SEED, E2E_SEED, derive_seed("test", 0), derive_seed("test", 1)]
    assert list(cfg.batch.fold_counts) == [3, 6]
    assert cfg.output.render
    assert (cfg.output.width, cfg.output.height) == (60, 75)
    assert not cfg.output.include_timestamp_utc


def test_parse_config_missing_key(tmp_path):
    cfg_path = Path(tmp_path) / "batch.yaml"
    cfg_path.write_text("output: {}\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Missing required key 'batch'"):
        parse_config(cfg_path)


@pytest.mark.parametrize(
    "body,message",
    [
        ("batch: {}\n", "at least one seed"),
        ("batch:\n  seeds: ['0xnothex']\n", "Invalid seed"),
        ("batch:\n  seeds: ['0x01']\n  fold_counts: [-2]\n", "non-negative"),
        ("batch:\n  derive: {prefix: x}\n", "Missing required key 'count'"),
        ("batch:\n  seeds: ['0x01']\noutput:\n  width: 0\n", "must be positive"),
        ("- just\n- a list\n", "mapping"),
    ],
)
def test_parse_config_rejects(tmp_path, body, message):
    cfg_path = Path(tmp_path) / "batch.yaml"
    cfg_path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError, match=message):
        parse_config(cfg_path)


def test_run_batch_records(tmp_path):
    records = run_batch(parse_config(_write_config(tmp_path)), jobs=1)
    assert [r["index"] for r in records] == list(range(8))
    assert [r["folds"] for r in records] == [3, 6] * 4
    first = records[0]
    assert first["seed_num"] == 890534624
    assert first["fold_strategy"] == "Random"
    assert "timestamp_utc" not in first
    e2e = records[2]
    assert (e2e["fold_strategy"], e2e["render_mode"], e2e["draw_direction"]) == ("Vertical", "Normal", "Right to Left")
    for rec in records:
        assert Path(rec["image_path"]).exists()
        assert len(rec["image_sha256"]) == 64
        assert rec["crease_count"] <= rec["folds"]


def test_run_batch_without_render(tmp_path):
    records = run_batch(parse_config(_write_config(tmp_path, render=False)))
    assert all(r["image_path"] is None and r["t_render_s"] is None for r in records)
    assert not (tmp_path / "images").exists()


def test_batch_cli_parallel_matches_serial(tmp_path):
    cfg_path = _write_config(tmp_path)
    runner = CliRunner()
    serial_csv = tmp_path / "serial.csv"
    parallel_csv = tmp_path / "parallel.csv"
    out_json = tmp_path / "out" / "batch.json"

    res = runner.invoke(app, ["batch", "--config", str(cfg_path), "--out", str(serial_csv), "--jobs", "1"])
    assert res.exit_code == 0, res.output
    res = runner.invoke(
        app,
        [
            "batch",
            "--config",
            str(cfg_path),
            "--out",
            str(parallel_csv),
            "--out-json",
            str(out_json),
            "--jobs",
            "2",
            "--json",
        ],
    )
    assert res.exit_code == 0, res.output
    summary = json.loads(res.stdout.strip().splitlines()[-1])
    assert summary["runs"] == 8 and summary["seeds"] == 4 and summary["images"] == 8

    def _rows(path):
        with path.open("r", newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            assert reader.fieldnames == CSV_FIELDS
            return [(r["seed"], r["folds"], r["crease_count"], r["image_sha256"]) for r in reader]

    assert _rows(serial_csv) == _rows(parallel_csv)
    assert len(json.loads(out_json.read_text(encoding="utf-8"))) == 8


def test_batch_cli_config_error(tmp_path):
    cfg_path = Path(tmp_path) / "batch.yaml"
    cfg_path.write_text("output: {}\n", encoding="utf-8")
    res = CliRunner().invoke(app, ["batch", "--config", str(cfg_path), "--out", str(tmp_path / "x.csv")])
    assert res.exit_code == 1
    assert "Config error" in res.output

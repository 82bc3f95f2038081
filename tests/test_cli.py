import json
from pathlib import Path

from PIL import Image
from typer.testing import CliRunner

from paperfold.cli.app import GOLDEN_SEED, app

FIXTURES = Path(__file__).parent / "fixtures" / "trait-expectations.json"
CORPUS = json.loads(FIXTURES.read_text(encoding="utf-8"))


def test_render_writes_png(tmp_path):
    out = tmp_path / "fold.png"
    res = CliRunner().invoke(
        app,
        ["render", "--seed", GOLDEN_SEED, "--out", str(out), "--folds", "5", "--width", "120", "--height", "150"],
    )
    assert res.exit_code == 0, res.output
    assert "[io] Writing output:" in res.stdout
    with Image.open(out) as image:
        assert image.size == (120, 150)
        assert image.mode == "RGB"


def test_render_rejects_zero_width(tmp_path):
    res = CliRunner().invoke(
        app,
        ["render", "--seed", GOLDEN_SEED, "--out", str(tmp_path / "x.png"), "--folds", "5", "--width", "0"],
    )
    assert res.exit_code == 1
    assert not (tmp_path / "x.png").exists()


def test_traits_json_matches_corpus():
    res = CliRunner().invoke(app, ["traits", "--seed", GOLDEN_SEED, "--json"])
    assert res.exit_code == 0, res.output
    payload = json.loads(res.stdout)
    assert payload["seedNum"] == 890534624
    assert payload["traits"] == CORPUS["seeds"][0]["traits"]


def test_traits_plain_output():
    res = CliRunner().invoke(app, ["traits", "--seed", GOLDEN_SEED])
    assert res.exit_code == 0, res.output
    assert "[trait] foldStrategy=Random" in res.stdout


def test_params_json():
    res = CliRunner().invoke(app, ["params", "--seed", GOLDEN_SEED, "--folds", "12"])
    assert res.exit_code == 0, res.output
    payload = json.loads(res.stdout)
    assert payload["seedNum"] == 890534624
    assert payload["folds"] == 12
    assert payload["cells"] == {"cellW": 16, "cellH": 10}


def test_params_levels_histogram():
    res = CliRunner().invoke(app, ["params", "--seed", GOLDEN_SEED, "--folds", "3", "--levels"])
    assert res.exit_code == 0, res.output
    assert "[grid] l0" in res.stdout


def test_params_rejects_negative_folds():
    res = CliRunner().invoke(app, ["params", "--seed", GOLDEN_SEED, "--folds", "-1"])
    assert res.exit_code == 1


def test_metadata_stdout_and_file(tmp_path):
    runner = CliRunner()
    res = runner.invoke(app, ["metadata", "--seed", GOLDEN_SEED, "--token-id", "5", "--folds", "12"])
    assert res.exit_code == 0, res.output
    assert json.loads(res.stdout)["name"] == "Fold #5"

    out = tmp_path / "meta" / "5.json"
    res = runner.invoke(
        app,
        ["metadata", "--seed", GOLDEN_SEED, "--token-id", "5", "--folds", "12", "--out", str(out)],
    )
    assert res.exit_code == 0, res.output
    assert json.loads(out.read_text(encoding="utf-8"))["attributes"]


def test_fixtures_verify_checked_in_corpus():
    res = CliRunner().invoke(app, ["fixtures", "verify", "--fixtures", str(FIXTURES)])
    assert res.exit_code == 0, res.output
    assert "Fixtures match" in res.output


def test_fixtures_generate_then_verify(tmp_path):
    runner = CliRunner()
    out = tmp_path / "fx.json"
    res = runner.invoke(app, ["fixtures", "generate", "--out", str(out), "--extra", "1", "--special-limit", "3"])
    assert res.exit_code == 0, res.output
    assert "No special seed found for:" in res.output
    data = json.loads(out.read_text(encoding="utf-8"))
    assert len(data["seeds"]) == 9

    res = runner.invoke(app, ["fixtures", "verify", "--fixtures", str(out)])
    assert res.exit_code == 0, res.output


def test_fixtures_verify_reports_mismatch(tmp_path):
    data = json.loads(json.dumps(CORPUS))
    data["seeds"][0]["traits"]["drawDirection"] = "Center Out"
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps(data), encoding="utf-8")
    res = CliRunner().invoke(app, ["fixtures", "verify", "--fixtures", str(bad)])
    assert res.exit_code == 1
    assert "[mismatch]" in res.output
    assert "1 trait mismatches." in res.output


def test_selftest():
    res = CliRunner().invoke(app, ["selftest"])
    assert res.exit_code == 0, res.output
    assert "Selftest passed" in res.output


def test_bad_seed_is_a_usage_error():
    res = CliRunner().invoke(app, ["traits", "--seed", "0xnothex"])
    assert res.exit_code == 2

import json
from pathlib import Path

from paperfold.orchestrator.pipeline import METADATA_DESCRIPTION, generate_metadata

CORPUS = json.loads((Path(__file__).parent / "fixtures" / "trait-expectations.json").read_text(encoding="utf-8"))


def _seed(seed_num):
    # upper 64 bits carry the seed number
    return f"0x{seed_num:016x}" + "0" * 48


def _attributes(meta):
    return {a["trait_type"]: a["value"] for a in meta["attributes"]}


def test_metadata_shape():
    meta = generate_metadata(7, _seed(890534624), 12, image_base_url="https://art.example/fold")
    assert meta["name"] == "Fold #7"
    assert meta["description"] == METADATA_DESCRIPTION
    assert meta["image"] == "https://art.example/fold/7"
    attrs = _attributes(meta)
    assert attrs["Fold Count"] == 12
    assert attrs["Max Folds"] == 24
    assert attrs["Crease Count"] == 12
    assert attrs["Cell Size"] == "16x10"
    assert attrs["Fold Strategy"] == "random"
    assert attrs["Palette Strategy"] == "dark/temperature"
    assert attrs["Multi-Color"] in ("Yes", "No")
    assert "Crease Lines" not in attrs


def test_metadata_without_base_url():
    meta = generate_metadata(1, _seed(658561652), 3)
    assert meta["image"] == ""
    attrs = _attributes(meta)
    assert attrs["Paper Type"] == "Resistant"
    assert attrs["Paper Grain"] == "Grain"


def test_metadata_lists_visible_crease_lines():
    meta = generate_metadata(3, CORPUS["specialSeeds"]["creaseLines"], 5)
    assert _attributes(meta)["Crease Lines"] == "Visible"


def test_metadata_is_json_serializable():
    meta = generate_metadata(11, _seed(1), 20)
    assert json.loads(json.dumps(meta)) == meta

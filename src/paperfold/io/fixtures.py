"""
Trait parity fixtures.

A fixture file pins the trait labels of a list of seeds so every runtime
evaluating the same seeds can be checked against one corpus:

    {"seeds": [{"hex": "0x...", "seedNum": 123, "traits": {...}}],
     "specialSeeds": {"monochrome": "0x...", ...}}
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from paperfold.core.constants import VERSION
from paperfold.core.seed.sequence import reduce_seed, seed_to_hex
from paperfold.core.traits.classifier import classify
from paperfold.io.formats import read_json, write_json

FIXTURE_DESCRIPTION = "Trait expectations for the standard parity seeds"

# Traits that mark a seed as special, keyed by the name used in fixture files
SPECIAL_TRAITS = {
    "monochrome": "isMonochrome",
    "creaseLines": "hasCreaseLines",
    "hitCounts": "hasHitCounts",
    "analyticsMode": "hasAnalyticsMode",
    "paperGrain": "hasPaperGrain",
}

STANDARD_SEEDS = (
    "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef",
    "0xdeadbeefcafebabe0000000000000000ffffffffffffffffffffffffffffffff",
    "0xa5a5a5a5a5a5a5a5b6b6b6b6b6b6b6b6c7c7c7c7c7c7c7c7d8d8d8d8d8d8d8d8",
    "0x0000000000000001ffffffffffffffffffffffffffffffffffffffffffffffff",
    "0x7fffffffffffffffaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa0",
    "0x8000000000000000bbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb0",
    "0xffffffffffffffff000000000000000000000000000000000000000000000000",
    "0x0fedcba987654321111111111111111122222222222222223333333333333333",
)


@dataclass(frozen=True)
class FixtureMismatch:
    seed: str
    trait: str
    expected: Any
    actual: Any

    def describe(self) -> str:
        return f"{self.seed} {self.trait}: expected {self.expected!r}, got {self.actual!r}"


def load_fixtures(path: Path) -> Dict[str, Any]:
    data = read_json(path)
    if not isinstance(data.get("seeds"), list):
        raise ValueError(f"Fixture file {path} has no 'seeds' list")
    return data


def fixture_entry(seed: str) -> Dict[str, Any]:
    return {"hex": seed_to_hex(seed), "seedNum": reduce_seed(seed), "traits": classify(seed).to_dict()}


def _special_candidate(index: int) -> str:
    upper = 0x1000000000000000 + index * 0x100000000000000
    return f"0x{upper:016x}" + "0" * 48


def find_special_seeds(limit: int = 1000) -> Dict[str, Optional[str]]:
    """
    First seed of a fixed candidate ladder showing each special trait.

    Candidates put a stepped value in the upper 64 bits and zeros below.
    Traits not found within the limit stay None.
    """
    found: Dict[str, Optional[str]] = {name: None for name in SPECIAL_TRAITS}
    for i in range(limit):
        candidate = _special_candidate(i)
        traits = classify(candidate).to_dict()
        for name, key in SPECIAL_TRAITS.items():
            if found[name] is None and traits[key]:
                found[name] = candidate
        if all(v is not None for v in found.values()):
            break
    return found


def build_fixtures(seeds: Iterable[str], special_limit: int = 1000) -> Dict[str, Any]:
    return {
        "description": FIXTURE_DESCRIPTION,
        "version": VERSION,
        "seeds": [fixture_entry(s) for s in seeds],
        "specialSeeds": find_special_seeds(special_limit),
    }


def write_fixtures(path: Path, payload: Dict[str, Any]) -> None:
    write_json(path, payload)


def verify_fixtures(data: Dict[str, Any]) -> List[FixtureMismatch]:
    """Recompute every fixture entry and list the traits that differ."""
    mismatches: List[FixtureMismatch] = []
    for entry in data.get("seeds", []):
        seed = entry.get("hex") or entry.get("seedHex")
        if not seed:
            raise ValueError(f"Fixture entry without a seed: {entry}")
        if "seedNum" in entry and reduce_seed(seed) != entry["seedNum"]:
            mismatches.append(FixtureMismatch(seed, "seedNum", entry["seedNum"], reduce_seed(seed)))
        actual = classify(seed).to_dict()
        for key, expected in entry.get("traits", {}).items():
            if actual.get(key) != expected:
                mismatches.append(FixtureMismatch(seed, key, expected, actual.get(key)))
    for name, seed in (data.get("specialSeeds") or {}).items():
        key = SPECIAL_TRAITS.get(name)
        if key is None or seed is None:
            continue
        if not classify(seed).to_dict()[key]:
            mismatches.append(FixtureMismatch(seed, key, True, False))
    return mismatches

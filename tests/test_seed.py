import pytest

from paperfold.core.numeric import js_round, to_int32
from paperfold.core.seed.combinators import pick_biased, pick_uniform, pick_weighted, weighted_index
from paperfold.core.seed.sequence import SeededSequence, channel, hash_seed, reduce_seed, seed_to_hex

SEED_HEX = "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef"


def _draws(*values):
    it = iter(values)
    return lambda: next(it)


def test_reduce_seed_forms_agree():
    as_int = int(SEED_HEX, 16)
    as_bytes = bytes.fromhex(SEED_HEX[2:])
    assert reduce_seed(SEED_HEX) == 890534624
    assert reduce_seed(SEED_HEX[2:]) == 890534624
    assert reduce_seed(SEED_HEX.upper().replace("0X", "0x")) == 890534624
    assert reduce_seed(as_int) == 890534624
    assert reduce_seed(as_bytes) == 890534624


def test_reduce_seed_uses_upper_64_bits_only():
    a = "0xffffffffffffffff" + "0" * 48
    b = "0xffffffffffffffff" + "f" * 48
    assert reduce_seed(a) == reduce_seed(b) == 0xFFFFFFFFFFFFFFFF % 0x7FFFFFFF


def test_reduce_seed_short_and_empty():
    assert reduce_seed("") == 0
    assert reduce_seed("0x") == 0
    assert reduce_seed("0x10") == 16


@pytest.mark.parametrize("bad", ["0xnothex", b"short", -1, 1 << 256, True])
def test_reduce_seed_rejects_invalid(bad):
    with pytest.raises(ValueError):
        reduce_seed(bad)


def test_seed_to_hex():
    assert seed_to_hex(SEED_HEX.upper().replace("0X", "0x")) == SEED_HEX
    assert seed_to_hex(1) == "0x" + "0" * 63 + "1"
    assert seed_to_hex(bytes(32)) == "0x" + "0" * 64


def test_sequence_golden_values():
    seq = SeededSequence(1)
    assert [seq(), seq(), seq()] == pytest.approx(
        [0.5138700783782965, 0.17574130332830423, 0.3086515163577402], rel=1e-12
    )
    seq = SeededSequence(890534624)
    assert seq.next() == pytest.approx(0.5031969069983796, rel=1e-12)
    assert seq.next() == pytest.approx(0.8509898627414321, rel=1e-12)


def test_sequence_is_reproducible_and_bounded():
    a = SeededSequence(424242)
    b = SeededSequence(424242)
    values = [a() for _ in range(500)]
    assert values == [b() for _ in range(500)]
    assert all(0 <= v < 1 for v in values)


def test_zero_seed_does_not_stall():
    seq = SeededSequence(0)
    assert seq() != seq()


def test_channel_offsets_seed():
    assert channel(10, 1111)() == SeededSequence(1121)()


def test_hash_seed_golden():
    assert hash_seed(890534624, "fold0") == 1967733393
    assert hash_seed(1, "skip3") == 138126131
    assert hash_seed(0, "") == 1


def test_numeric_helpers():
    assert js_round(2.5) == 3
    assert js_round(-2.5) == -2
    assert to_int32(0x80000000) == -0x80000000
    assert to_int32(0xFFFFFFFF) == -1


def test_pick_uniform_and_biased():
    items = ["a", "b", "c", "d"]
    assert pick_uniform(_draws(0.99), items) == "d"
    assert pick_biased(_draws(0.99, 0.0), items, "start") == "a"
    assert pick_biased(_draws(0.0, 0.0), items, "end") == "d"
    assert pick_biased(_draws(0.5), items) == "c"


def test_weighted_index():
    assert weighted_index(_draws(0.0), [1, 1, 1]) == 0
    assert weighted_index(_draws(0.5), [1, 1, 2]) == 1
    assert weighted_index(_draws(0.9), [1, 1, 2]) == 2
    assert weighted_index(_draws(0.5), [0, 0]) == 0


def test_pick_weighted_by_name():
    items = ["x", "y", "z"]
    weights = {"x": 0.2, "y": 0.3}
    assert pick_weighted(_draws(0.1), items, weights, key=str) == "x"
    assert pick_weighted(_draws(0.4), items, weights, key=str) == "y"
    # beyond the cumulative total falls back to the last item
    assert pick_weighted(_draws(0.9), items, weights, key=str) == "z"

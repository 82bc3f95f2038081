from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Optional

import typer

from paperfold.core.render.glyphs import shade_char
from paperfold.core.traits.classifier import Traits


def _timestamp_utc() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _abs_path(path: Path | None) -> str:
    if path is None:
        return "n/a"
    try:
        return str(path.resolve())
    except OSError:
        return str(path)


def _truncate_hex(value: str, max_len: int = 18) -> str:
    if len(value) <= max_len:
        return value
    return f"{value[:max_len]}..."


def print_run_header(
    command: str,
    *,
    seed: str | None = None,
    seed_num: int | None = None,
    folds: int | None = None,
    size: tuple[int, int] | None = None,
) -> None:
    typer.echo(f"[run] command={command} ts_utc={_timestamp_utc()}")
    if seed is not None:
        num_text = seed_num if seed_num is not None else "n/a"
        typer.echo(f"[seed] hex={_truncate_hex(seed)} seed_num={num_text}")
    if folds is not None:
        typer.echo(f"[fold] folds={folds}")
    if size is not None:
        typer.echo(f"[canvas] width={size[0]} height={size[1]}")


def print_traits(traits: Traits) -> None:
    for key, value in traits.to_dict().items():
        typer.echo(f"[trait] {key}={value}")


def print_levels(levels: Dict[int, int]) -> None:
    text = " ".join(f"l{level}({shade_char(level)})={count}" for level, count in sorted(levels.items()))
    typer.echo(f"[grid] {text}")


def print_io_write(path: Path, sha256_hex: Optional[str] = None) -> None:
    suffix = f" sha256={sha256_hex}" if sha256_hex else ""
    typer.echo(f"[io] Writing output: {_abs_path(path)}{suffix}")


def print_variant_lines(tag: str, lines: Iterable[str]) -> None:
    for line in lines:
        typer.echo(f"[{tag}] {line}")


def print_done(summary: str) -> None:
    typer.echo(f"[done] {summary}")

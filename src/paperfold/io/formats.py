from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np
from PIL import Image

from paperfold.core.constants import ENCODING


def read_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding=ENCODING) as f:
        return json.load(f)


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding=ENCODING) as f:
        json.dump(payload, f, indent=2)
        f.write("\n")


def write_png(path: Path, image: Union[Image.Image, np.ndarray]) -> Path:
    if isinstance(image, np.ndarray):
        image = Image.fromarray(image.astype(np.uint8))
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format="PNG")
    return path


def image_fingerprint(pixels: np.ndarray) -> str:
    """SHA-256 over the pixel bytes (row-major)."""
    return hashlib.sha256(np.ascontiguousarray(pixels).tobytes(order="C")).hexdigest()


def derive_seed(prefix: str, index: int) -> str:
    """Deterministic 256-bit seed from a label, as 0x-prefixed hex."""
    return "0x" + hashlib.sha256(f"{prefix}-{index}".encode(ENCODING)).hexdigest()

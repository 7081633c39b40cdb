"""Filesystem helpers: atomic artifact writes and YAML.

Provides:
    - ensure_dir(): mkdir -p, returning the Path
    - atomic_write_bytes(): raw bytes (encoded PNG, YAML)
    - atomic_save_image(): Pillow image or uint8 array (JPEG)
    - atomic_yaml_dump() / load_yaml()

Patch mode reopens the previous output image, so an interrupted run must
never leave a truncated file at the output path. Every writer here stages
its data in a sibling temporary file and renames it over the target; on
failure the temporary file is removed and the target is left as it was.

Usage:
    from src.utils import fs
    fs.atomic_save_image(pil_img, "out/approx.png", image_format="PNG")
    fs.atomic_yaml_dump(manifest, "out/approx_manifest.yaml")
    cfg = fs.load_yaml("configs/approximate_v1.yaml")
"""

import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import numpy as np
import yaml
from PIL import Image

PathLike = Union[str, Path]


def ensure_dir(p: PathLike) -> Path:
    """Create ``p`` (and parents) if missing; return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def _staged_write(path: Path, staging: Path, write: Callable[[Path], None]) -> None:
    """Run ``write(staging)`` then rename ``staging`` over ``path``."""
    ensure_dir(path.parent)
    try:
        write(staging)
        # Same directory, so the rename never crosses filesystems
        staging.replace(path)
    except Exception as e:
        staging.unlink(missing_ok=True)
        raise RuntimeError(f"Failed to write {path} atomically: {e}") from e


def atomic_write_bytes(path: PathLike, data: bytes) -> None:
    """Write ``data`` to ``path`` atomically, fsyncing before the rename.

    Raises
    ------
    RuntimeError
        If writing or renaming fails (an existing file is left as it was)
    """
    path = Path(path)

    def write(staging: Path) -> None:
        with open(staging, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

    _staged_write(path, path.with_name(path.name + ".tmp"), write)


def atomic_save_image(
    img: Union[np.ndarray, Image.Image],
    path: PathLike,
    image_format: Optional[str] = None,
    pil_kwargs: Optional[Dict[str, Any]] = None
) -> None:
    """Encode and save an image atomically.

    Parameters
    ----------
    img : Union[np.ndarray, PIL.Image.Image]
        Pillow image, or a (H, W), (H, W, 3) or (H, W, 4) array (cast to
        uint8 with clipping when needed)
    path : Union[str, Path]
        Target file
    image_format : Optional[str]
        Pillow format name ("PNG", "JPEG"); inferred from the suffix if None
    pil_kwargs : Optional[Dict[str, Any]]
        Extra encoder options, e.g. {"quality": 100}

    Raises
    ------
    RuntimeError
        If encoding or renaming fails (an existing file is left as it was)
    """
    path = Path(path)

    if isinstance(img, np.ndarray):
        if img.dtype != np.uint8:
            img = np.clip(img, 0, 255).astype(np.uint8)
        img = Image.fromarray(img)

    def write(staging: Path) -> None:
        img.save(staging, format=image_format, **(pil_kwargs or {}))

    # Real suffix last so Pillow can still infer the format
    _staged_write(path, path.with_name(f"{path.stem}.tmp{path.suffix}"), write)


def atomic_yaml_dump(obj: Any, path: PathLike) -> None:
    """Write ``obj`` as block-style YAML, keeping key order."""
    text = yaml.safe_dump(obj, default_flow_style=False, sort_keys=False, allow_unicode=True)
    atomic_write_bytes(path, text.encode('utf-8'))


def load_yaml(path: PathLike) -> Any:
    """Parse a YAML file with the safe loader.

    Returns
    -------
    Any
        Parsed document ({} for an empty file)

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    yaml.YAMLError
        If the file is not valid YAML
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e
    return {} if data is None else data

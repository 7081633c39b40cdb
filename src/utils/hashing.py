"""SHA-256 digests for run provenance.

A run manifest records three digests so two runs can be compared without
re-decoding their images:
    - sha256_file(): the source image file as read
    - sha256_array(): the finished 16-bit canvas buffer
    - hash_dict(): the resolved run parameters

All digests are 64-character lower-case hex strings.

Note: Module named `hashing.py` to avoid shadowing builtin `hash()`.
"""

import hashlib
import json
from pathlib import Path
from typing import Union

import numpy as np


def sha256_file(path: Union[str, Path], chunk_size: int = 1 << 20) -> str:
    """Digest a file's bytes, reading ``chunk_size`` bytes at a time.

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    digest = hashlib.sha256()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(chunk_size), b''):
            digest.update(chunk)
    return digest.hexdigest()


def sha256_array(arr: np.ndarray) -> str:
    """Digest an array's values together with its dtype and shape.

    Parameters
    ----------
    arr : np.ndarray
        Any array; non-contiguous views hash like their contiguous copy

    Returns
    -------
    str
        Hex digest

    Notes
    -----
    Folding in dtype and shape keeps a (4, 4, 4) uint16 canvas from
    colliding with the same bytes viewed as (8, 8, 2) or as uint8.
    """
    arr = np.ascontiguousarray(arr)
    digest = hashlib.sha256(f"{arr.dtype.str}:{arr.shape}".encode('utf-8'))
    digest.update(arr.tobytes())
    return digest.hexdigest()


def hash_dict(d: dict) -> str:
    """Digest a JSON-serializable mapping, independent of key order."""
    canonical = json.dumps(d, sort_keys=True)
    return hashlib.sha256(canonical.encode('utf-8')).hexdigest()

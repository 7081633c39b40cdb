"""Test atomic filesystem operations.

Tests for src.utils.fs:
    - Atomic writes leave no temporary files behind
    - Images saved atomically through Pillow (array or PIL input)
    - YAML roundtrip preserves structure and key order
    - ensure_dir creates parents

Test cases:
    - test_atomic_write_bytes()
    - test_atomic_write_overwrites()
    - test_atomic_save_image_array()
    - test_atomic_save_image_pil_jpeg()
    - test_atomic_save_image_failure_cleans_up()
    - test_yaml_roundtrip()
    - test_load_yaml_empty_file()
    - test_load_yaml_missing()
    - test_ensure_dir()

Run:
    pytest tests/test_fs.py -v
"""

import numpy as np
import pytest
from PIL import Image

from src.utils import fs


def test_atomic_write_bytes(tmp_path):
    target = tmp_path / "nested" / "out.bin"
    fs.atomic_write_bytes(target, b"pointillism")

    assert target.read_bytes() == b"pointillism"
    assert sorted(p.name for p in target.parent.iterdir()) == ["out.bin"]


def test_atomic_write_overwrites(tmp_path):
    target = tmp_path / "out.bin"
    fs.atomic_write_bytes(target, b"first")
    fs.atomic_write_bytes(target, b"second")
    assert target.read_bytes() == b"second"


def test_atomic_save_image_array(tmp_path):
    target = tmp_path / "img.png"
    arr = np.zeros((5, 7, 4), dtype=np.uint8)
    arr[..., 0] = 200
    arr[..., 3] = 255

    fs.atomic_save_image(arr, target)

    with Image.open(target) as img:
        assert img.size == (7, 5)
        assert img.mode == "RGBA"
        assert np.asarray(img)[0, 0].tolist() == [200, 0, 0, 255]
    assert not list(tmp_path.glob("*.tmp*"))


def test_atomic_save_image_pil_jpeg(tmp_path):
    target = tmp_path / "img.jpg"
    img = Image.new("RGB", (8, 8), (10, 20, 30))

    fs.atomic_save_image(img, target, image_format="JPEG", pil_kwargs={"quality": 100})

    with Image.open(target) as reread:
        assert reread.format == "JPEG"
        assert reread.size == (8, 8)


def test_atomic_save_image_failure_cleans_up(tmp_path):
    target = tmp_path / "img.png"
    # RGBA cannot be written as JPEG
    img = Image.new("RGBA", (4, 4))
    with pytest.raises(RuntimeError, match="atomically"):
        fs.atomic_save_image(img, target, image_format="JPEG")
    assert not target.exists()
    assert not list(tmp_path.iterdir())


def test_yaml_roundtrip(tmp_path):
    target = tmp_path / "manifest.yaml"
    data = {"seed": 42, "params": {"count": 10, "alpha": 0.5}, "canvas_size_px": [4, 3]}

    fs.atomic_yaml_dump(data, target)

    loaded = fs.load_yaml(target)
    assert loaded == data
    assert list(loaded) == ["seed", "params", "canvas_size_px"]


def test_load_yaml_empty_file(tmp_path):
    target = tmp_path / "empty.yaml"
    target.write_text("")
    assert fs.load_yaml(target) == {}


def test_load_yaml_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        fs.load_yaml(tmp_path / "nope.yaml")


def test_ensure_dir(tmp_path):
    p = fs.ensure_dir(tmp_path / "a" / "b" / "c")
    assert p.is_dir()
    assert fs.ensure_dir(p) == p

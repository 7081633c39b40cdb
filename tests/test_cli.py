"""Test the command-line entry point.

Tests for src.pointillism.cli:
    - Full run writes an output image of the source's size
    - Fixed seed → identical canvases (via the manifest hash)
    - Manifest records parameters, seed and hashes
    - Parameter errors exit with status 1 before any output is written
    - Patch mode paints onto the existing output
    - Config file values, overridden by flags
    - Standard input → standard output

Run:
    pytest tests/test_cli.py -v
"""

import io
import sys

import numpy as np
import pytest
from PIL import Image

from src.pointillism import cli, image_io
from src.utils import fs, logging_config


@pytest.fixture(autouse=True)
def reset_logging_context():
    yield
    logging_config.pop_context()


@pytest.fixture
def source_png(tmp_path):
    """24x16 gradient with a solid red block."""
    arr = np.zeros((16, 24, 3), dtype=np.uint8)
    arr[..., 1] = np.linspace(0, 255, 24, dtype=np.uint8)[None, :]
    arr[..., 2] = np.linspace(0, 255, 16, dtype=np.uint8)[:, None]
    arr[:6, :6] = (255, 0, 0)
    path = tmp_path / "source.png"
    Image.fromarray(arr).save(path)
    return path


def run_cli(*argv):
    return cli.main([str(a) for a in argv])


# ============================================================================
# Argument handling
# ============================================================================

def test_parse_args_defaults():
    args = cli.parse_args([])
    assert args.input is None
    assert args.output is None
    assert args.patch is False
    assert args.count is None
    assert args.alpha is None


def test_parse_args_short_flags():
    args = cli.parse_args(["-i", "a.png", "-o", "b.jpg", "-n", "50", "-r", "3.5",
                           "-a", "0.25", "-s", "9", "-p"])
    assert (args.input, args.output) == ("a.png", "b.jpg")
    assert (args.count, args.radius, args.alpha, args.seed) == (50, 3.5, 0.25, 9)
    assert args.patch is True


def test_resolve_config_overrides(tmp_path):
    cfg_path = tmp_path / "cfg.yaml"
    fs.atomic_yaml_dump({"schema": "approximate.v1", "count": 7, "alpha": 0.2}, cfg_path)

    cfg = cli.resolve_config(cli.parse_args(["-c", str(cfg_path), "-a", "0.9"]))
    assert cfg.count == 7
    assert cfg.alpha == 0.9


# ============================================================================
# Runs
# ============================================================================

def test_run_writes_output_and_manifest(source_png, tmp_path):
    out = tmp_path / "approx.png"
    manifest_path = tmp_path / "manifest.yaml"

    code = run_cli("--in", source_png, "--out", out, "-n", 40, "-r", 3,
                   "-a", 0.5, "-s", 42, "--manifest", manifest_path)

    assert code == 0
    with Image.open(out) as img:
        assert img.size == (24, 16)

    manifest = fs.load_yaml(manifest_path)
    assert manifest["disks_applied"] == 40
    assert manifest["params"]["seed"] == 42
    assert manifest["params"]["alpha"] == 0.5
    assert manifest["output_format"] == "png"
    assert manifest["canvas_size_px"] == [24, 16]
    assert manifest["patched"] is False
    assert len(manifest["input_sha256"]) == 64
    assert len(manifest["canvas_sha256"]) == 64


def test_same_seed_same_canvas(source_png, tmp_path):
    hashes = []
    for name in ("a", "b"):
        manifest_path = tmp_path / f"{name}.yaml"
        run_cli("--in", source_png, "--out", tmp_path / f"{name}.png",
                "-n", 60, "-s", 5, "--manifest", manifest_path)
        hashes.append(fs.load_yaml(manifest_path)["canvas_sha256"])
    assert hashes[0] == hashes[1]


def test_time_seed_recorded(source_png, tmp_path):
    manifest_path = tmp_path / "m.yaml"
    run_cli("--in", source_png, "--out", tmp_path / "o.png", "-n", 3, "--manifest", manifest_path)
    seed = fs.load_yaml(manifest_path)["params"]["seed"]
    assert isinstance(seed, int)
    assert 0 <= seed < 2**32


def test_decreasing_schedule(source_png, tmp_path):
    out = tmp_path / "dec.jpg"
    code = run_cli("--in", source_png, "--out", out, "-n", 30, "-s", 1,
                   "--schedule", "decreasing", "--start-radius", 8, "--end-radius", 1)
    assert code == 0
    with Image.open(out) as img:
        assert img.format == "JPEG"


def test_zero_disks_white_background(source_png, tmp_path):
    out = tmp_path / "white.png"
    assert run_cli("--in", source_png, "--out", out, "-n", 0, "--background", "white") == 0
    canvas, _ = image_io.read_image(out)
    assert canvas.is_opaque()
    assert np.all(canvas.pixels == 0xFFFF)


@pytest.mark.parametrize("flags", [
    ["-a", "1.5"],
    ["-a", "-0.1"],
    ["-n", "-1"],
    ["-r", "-2"],
    ["--schedule", "decreasing"],
])
def test_invalid_parameters_exit_1(source_png, tmp_path, flags):
    out = tmp_path / "never.png"
    assert run_cli("--in", source_png, "--out", out, *flags) == 1
    assert not out.exists()


def test_missing_input_exit_1(tmp_path):
    out = tmp_path / "never.png"
    assert run_cli("--in", tmp_path / "missing.png", "--out", out) == 1
    assert not out.exists()


def test_unknown_output_format_exit_1(source_png, tmp_path):
    out = tmp_path / "out.webp"
    assert run_cli("--in", source_png, "--out", out, "-n", 2) == 1
    assert not out.exists()


def test_patch_without_output_exit_1(source_png):
    assert run_cli("--in", source_png, "--patch", "-n", 2) == 1


def test_patch_size_mismatch_exit_1(source_png, tmp_path):
    existing = tmp_path / "existing.png"
    Image.new("RGB", (10, 10)).save(existing)
    before = existing.read_bytes()

    assert run_cli("--in", source_png, "--out", existing, "--patch", "-n", 2) == 1
    assert existing.read_bytes() == before


def test_patch_paints_onto_existing(source_png, tmp_path):
    out = tmp_path / "patched.png"
    Image.new("RGB", (24, 16), (255, 255, 255)).save(out)

    manifest_path = tmp_path / "m.yaml"
    code = run_cli("--in", source_png, "--out", out, "--patch", "-n", 0, "--manifest", manifest_path)

    assert code == 0
    assert fs.load_yaml(manifest_path)["patched"] is True
    canvas, _ = image_io.read_image(out)
    assert np.all(canvas.pixels == 0xFFFF)


def test_patch_continuation_keeps_canvas(source_png, tmp_path):
    """A patch run that adds no disks leaves the previous canvas bit-for-bit."""
    out = tmp_path / "layered.png"
    first, second = tmp_path / "first.yaml", tmp_path / "second.yaml"

    assert run_cli("--in", source_png, "--out", out, "-n", 80, "-r", 4,
                   "-a", 0.6, "-s", 11, "--manifest", first) == 0
    assert run_cli("--in", source_png, "--out", out, "--patch", "-n", 0,
                   "--manifest", second) == 0

    assert fs.load_yaml(second)["canvas_sha256"] == fs.load_yaml(first)["canvas_sha256"]


def test_stdin_to_stdout(source_png, monkeypatch):
    stdout = io.BytesIO()
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(source_png.read_bytes())))
    monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(stdout))

    assert run_cli("-n", 10, "-s", 3) == 0

    with Image.open(io.BytesIO(stdout.getvalue())) as img:
        assert img.format == "PNG"
        assert img.size == (24, 16)

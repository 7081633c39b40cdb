"""Image decoding/encoding around the approximation core.

Provides:
    - read_image(): decode PNG/JPEG/GIF from a file or standard input
    - new_canvas(): fresh destination canvas with a background fill
    - output_canvas(): fresh canvas, or the existing output in patch mode
    - choose_format(): pick the encoder from the output path / input format
    - write_image(): encode a canvas to a file (atomically) or standard output

Pixel conventions:
    - Decoded images become premultiplied 16-bit rasters. 16-bit PNG samples
      are kept as they are; 8-bit channels v are widened to v * 0x101. R/G/B
      are then premultiplied by A
    - PNG output is straight 16-bit RGBA (RGB when the canvas is opaque),
      so write_image() followed by read_image() returns the same canvas and
      patch runs never lose precision
    - JPEG output is the premultiplied RGB narrowed to 8 bits, i.e. the
      canvas over black

PNG goes through OpenCV (cv2.imencode / cv2.imdecode with IMREAD_UNCHANGED),
which keeps 16-bit depth in both directions; OpenCV orders channels BGR(A).
Other formats go through Pillow.

Usage:
    source, source_format = image_io.read_image("in.png")
    canvas = image_io.output_canvas(source, "out.png", patch=False)
    ...
    image_io.write_image(canvas, "out.png", source_format)
"""

import io
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from src.utils import color, fs
from .config import BACKGROUNDS
from .errors import InvalidParameterError
from .types import Bounds, Raster

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'

_EXTENSION_FORMATS = {
    '.png': 'png',
    '.jpg': 'jpeg',
    '.jpeg': 'jpeg',
}


def raster_from_pil(img: Image.Image) -> Raster:
    """Convert a decoded Pillow image into a premultiplied 16-bit raster."""
    rgba = np.asarray(img.convert('RGBA'), dtype=np.uint8)
    return Raster(color.premultiply(color.expand_8bit(rgba)))


def raster_from_cv2(decoded: np.ndarray) -> Raster:
    """Convert a cv2.imdecode(IMREAD_UNCHANGED) result into a raster.

    Parameters
    ----------
    decoded : np.ndarray
        (H, W), (H, W, 1), (H, W, 2), (H, W, 3) BGR or (H, W, 4) BGRA;
        uint8 or uint16

    Returns
    -------
    Raster
        Premultiplied 16-bit raster
    """
    if decoded.dtype == np.uint8:
        decoded = color.expand_8bit(decoded)
    elif decoded.dtype != np.uint16:
        raise InvalidParameterError(f"Unsupported PNG sample type {decoded.dtype}")

    if decoded.ndim == 2:
        decoded = decoded[..., None]
    channels = decoded.shape[2]

    rgba = np.empty(decoded.shape[:2] + (4,), dtype=np.uint16)
    if channels == 4:
        rgba[...] = cv2.cvtColor(decoded, cv2.COLOR_BGRA2RGBA)
    elif channels == 3:
        rgba[..., :3] = cv2.cvtColor(decoded, cv2.COLOR_BGR2RGB)
        rgba[..., 3] = color.MAX_CHANNEL
    elif channels == 2:
        # Gray + alpha
        rgba[..., :3] = decoded[..., :1]
        rgba[..., 3] = decoded[..., 1]
    elif channels == 1:
        rgba[..., :3] = decoded
        rgba[..., 3] = color.MAX_CHANNEL
    else:
        raise InvalidParameterError(f"Unsupported PNG channel count {channels}")

    return Raster(color.premultiply(rgba))


def raster_to_pil(raster: Raster) -> Image.Image:
    """Convert a canvas into the 8-bit RGB Pillow image written as JPEG.

    JPEG has no alpha, so the premultiplied color is kept as is: the canvas
    composited over black.
    """
    return Image.fromarray(np.ascontiguousarray(color.to_8bit(raster.pixels[..., :3])))


def encode_png(raster: Raster) -> bytes:
    """Encode a canvas as a straight-color 16-bit PNG.

    Opaque canvases are written as RGB, everything else as RGBA.

    Raises
    ------
    RuntimeError
        If OpenCV fails to encode the array
    """
    straight = color.unpremultiply(raster.pixels)
    if raster.is_opaque():
        bgr = cv2.cvtColor(np.ascontiguousarray(straight[..., :3]), cv2.COLOR_RGB2BGR)
    else:
        bgr = cv2.cvtColor(straight, cv2.COLOR_RGBA2BGRA)

    ok, buf = cv2.imencode('.png', bgr)
    if not ok:
        raise RuntimeError("OpenCV failed to encode PNG")
    return buf.tobytes()


def decode_image(data: bytes, source_name: str = "<bytes>") -> Tuple[Raster, str]:
    """Decode encoded image bytes into a raster.

    Returns
    -------
    tuple
        (raster, format) where format is the lower-case decoder name

    Raises
    ------
    InvalidParameterError
        If the data is not a decodable image
    """
    if data.startswith(PNG_SIGNATURE):
        try:
            decoded = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
        except cv2.error as e:
            raise InvalidParameterError(f"Cannot decode image {source_name}: {e}") from e
        if decoded is None:
            raise InvalidParameterError(f"Cannot decode image {source_name}: corrupt PNG")
        return raster_from_cv2(decoded), 'png'

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            image_format = (img.format or 'png').lower()
            raster = raster_from_pil(img)
    except UnidentifiedImageError as e:
        raise InvalidParameterError(f"Cannot decode image {source_name}: {e}") from e
    return raster, image_format


def read_image(path: Optional[PathLike] = None) -> Tuple[Raster, str]:
    """Decode an image from ``path``, or from standard input when None.

    Parameters
    ----------
    path : Optional[Union[str, Path]]
        Image file path; None reads the whole of standard input

    Returns
    -------
    tuple
        (raster, format) where format is the lower-case decoder name
        ("png", "jpeg", "gif", ...)

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    InvalidParameterError
        If the data is not a decodable image
    """
    if path is None:
        source_name = "<stdin>"
        data = sys.stdin.buffer.read()
    else:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Image not found: {path}")
        source_name = str(path)
        data = path.read_bytes()

    raster, image_format = decode_image(data, source_name)

    logger.info(
        f"Read {source_name}: {raster.bounds.width}x{raster.bounds.height} {image_format}"
    )
    return raster, image_format


def new_canvas(bounds: Bounds, background: str = 'transparent') -> Raster:
    """Create a fresh canvas filled with a named background."""
    if background not in BACKGROUNDS:
        raise InvalidParameterError(
            f"Unknown background '{background}'; use one of {sorted(BACKGROUNDS)}"
        )
    if background == 'transparent':
        return Raster.blank(bounds)
    return Raster.filled(bounds, BACKGROUNDS[background])


def output_canvas(
    source: Raster,
    out: Optional[PathLike],
    patch: bool,
    background: str = 'transparent'
) -> Raster:
    """Return the destination canvas for a run.

    Parameters
    ----------
    source : Raster
        Source raster; the canvas always shares its bounds
    out : Optional[Union[str, Path]]
        Output path (None: standard output)
    patch : bool
        Continue painting onto the existing image at ``out``
    background : str
        Fill of a fresh canvas (ignored in patch mode)

    Returns
    -------
    Raster
        Fresh canvas, or the existing output converted to canvas form

    Raises
    ------
    InvalidParameterError
        If patching without an explicit output path, or if the existing
        output's size differs from the source's
    FileNotFoundError
        If patching and ``out`` doesn't exist
    """
    if not patch:
        return new_canvas(source.bounds, background)

    if out is None:
        raise InvalidParameterError("Cannot patch without an explicit output file")

    existing, _ = read_image(out)
    src_b, img_b = source.bounds, existing.bounds
    if (img_b.width, img_b.height) != (src_b.width, src_b.height):
        raise InvalidParameterError(
            f"Output image's size ({img_b.width} x {img_b.height}) does not match "
            f"the input image's size ({src_b.width} x {src_b.height})"
        )

    logger.info(f"Patching existing output {out}")
    # Re-anchor on the source bounds so both share one coordinate system
    return Raster(existing.pixels, source.bounds)


def choose_format(out: Optional[PathLike], source_format: str) -> str:
    """Select the output encoder.

    A named output file picks its encoder from the extension (.png, .jpg,
    .jpeg). Standard output reuses the input format when it is PNG or JPEG
    and falls back to PNG otherwise.

    Raises
    ------
    InvalidParameterError
        If the output extension is not a supported format
    """
    if out is None:
        fmt = source_format.lower().lstrip('.')
        if fmt == 'jpg':
            fmt = 'jpeg'
        return fmt if fmt in ('png', 'jpeg') else 'png'

    ext = Path(out).suffix.lower()
    if ext not in _EXTENSION_FORMATS:
        raise InvalidParameterError(f"Unknown output format '{ext}'; please use png or jpeg")
    return _EXTENSION_FORMATS[ext]


def write_image(
    canvas: Raster,
    out: Optional[PathLike],
    source_format: str = 'png',
    jpeg_quality: int = 100
) -> str:
    """Encode ``canvas`` to ``out`` (or standard output when None).

    Returns
    -------
    str
        The format written ("png" or "jpeg")
    """
    image_format = choose_format(out, source_format)

    if image_format == 'png':
        data = encode_png(canvas)
        if out is None:
            sys.stdout.buffer.write(data)
            sys.stdout.buffer.flush()
        else:
            fs.atomic_write_bytes(out, data)
    else:
        img = raster_to_pil(canvas)
        pil_kwargs = {'quality': jpeg_quality}
        if out is None:
            img.save(sys.stdout.buffer, format='JPEG', **pil_kwargs)
            sys.stdout.buffer.flush()
        else:
            fs.atomic_save_image(img, out, image_format='JPEG', pil_kwargs=pil_kwargs)

    logger.info(f"Wrote {image_format} to {'<stdout>' if out is None else out}")
    return image_format

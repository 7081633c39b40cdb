"""Command-line entry point: approximate an image with random disks.

Pipeline:
    1. Resolve parameters (YAML config, then command-line overrides) and
       validate them; nothing is read or painted if this fails
    2. Decode the source image (file or standard input)
    3. Create the canvas (fresh, or the existing output with --patch)
    4. Build the placement schedule from a seeded RandomState
    5. Run the approximation
    6. Encode the canvas (file or standard output)
    7. Optionally write a YAML run manifest (parameters, seed, hashes)

CLI:
    pointillism --in photo.png --out approx.png -n 5000 -r 6 -a 0.5 -s 42
    pointillism --in photo.jpg --out approx.jpg --schedule decreasing \\
                --start-radius 40 --end-radius 2 -n 20000
    cat photo.png | pointillism -n 2000 > approx.png
    pointillism --in photo.png --out approx.png --patch -n 1000

Exit codes:
    0: Success
    1: Invalid parameters, unreadable input, or failed write
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

import numpy as np

from src.utils import fs, hashing, logging_config, profiler
from . import config, image_io
from .approximator import approximate
from .errors import InvalidParameterError
from .placement import SCHEDULES, build_schedule

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="pointillism",
        description="Approximate an image by stamping semi-transparent disks of sampled color",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    # Input / output
    parser.add_argument('-i', '--in', dest='input', default=None,
                        help='Input image, or standard input if omitted')
    parser.add_argument('-o', '--out', dest='output', default=None,
                        help='Output image (.png/.jpg/.jpeg), or standard output if omitted')
    parser.add_argument('-p', '--patch', action='store_true',
                        help='Paint onto the existing output image rather than overwriting it')

    # Approximation parameters (None: take the config value)
    parser.add_argument('-n', '--count', type=int, default=None,
                        help='Number of disks to draw (default: 100)')
    parser.add_argument('-r', '--radius', type=float, default=None,
                        help='Disk radius for the uniform schedule (default: 10)')
    parser.add_argument('-a', '--alpha', type=float, default=None,
                        help='Alpha value of the drawn disks, in [0, 1] (default: 0.75)')
    parser.add_argument('-s', '--seed', type=int, default=None,
                        help='Random seed (default: current time)')
    parser.add_argument('--schedule', choices=SCHEDULES, default=None,
                        help='Placement schedule (default: uniform)')
    parser.add_argument('--start-radius', type=float, default=None,
                        help='First disk radius for the decreasing schedule')
    parser.add_argument('--end-radius', type=float, default=None,
                        help='Last disk radius for the decreasing schedule')
    parser.add_argument('--background', choices=sorted(config.BACKGROUNDS), default=None,
                        help='Fill of a fresh canvas (default: transparent)')

    # Run plumbing
    parser.add_argument('-c', '--config', default=None,
                        help='approximate.v1 YAML config; flags override its values')
    parser.add_argument('--manifest', default=None,
                        help='Write a YAML run manifest (parameters, seed, hashes) here')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')

    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> config.ApproximateV1:
    """Merge the YAML config (or defaults) with command-line overrides."""
    if args.config:
        cfg = config.load_approximate_config(args.config)
    else:
        cfg = config.validate_params()

    return config.merge_overrides(
        cfg,
        count=args.count,
        radius=args.radius,
        alpha=args.alpha,
        seed=args.seed,
        schedule=args.schedule,
        start_radius=args.start_radius,
        end_radius=args.end_radius,
        background=args.background,
    )


def run(args: argparse.Namespace, cfg: config.ApproximateV1) -> dict:
    """Execute one approximation run and return its manifest."""
    seed = cfg.seed if cfg.seed is not None else int(time.time()) & 0xFFFFFFFF
    logging_config.push_context(seed=seed, schedule=cfg.schedule)

    if args.output is not None:
        image_io.choose_format(args.output, 'png')

    source, source_format = image_io.read_image(args.input)
    canvas = image_io.output_canvas(source, args.output, args.patch, cfg.background)

    rng = np.random.RandomState(seed)
    disks = build_schedule(
        cfg.schedule,
        source.bounds,
        cfg.count,
        rng,
        radius=cfg.radius,
        start_radius=cfg.start_radius,
        end_radius=cfg.end_radius,
    )

    timings = {}
    with profiler.timer("approximate", sink=timings.__setitem__):
        applied = approximate(source, canvas, cfg.alpha, disks)
    logger.info(f"Approximation finished in {timings['approximate']:.3f}s")

    output_format = image_io.write_image(canvas, args.output, source_format, cfg.jpeg_quality)

    params = cfg.model_dump(by_alias=True)
    params['seed'] = seed
    return {
        'input': args.input or '<stdin>',
        'input_sha256': hashing.sha256_file(args.input) if args.input else None,
        'output': args.output or '<stdout>',
        'output_format': output_format,
        'patched': bool(args.patch),
        'params': params,
        'params_sha256': hashing.hash_dict(params),
        'disks_applied': applied,
        'canvas_size_px': [canvas.bounds.width, canvas.bounds.height],
        'canvas_sha256': hashing.sha256_array(canvas.pixels),
        'elapsed_s': float(timings['approximate']),
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        cfg = resolve_config(args)
    except (InvalidParameterError, FileNotFoundError) as e:
        logging_config.setup_logging(log_level="INFO", context={"app": "approximate"})
        logger.error(str(e))
        return 1

    logging_config.setup_logging(
        log_level="DEBUG" if args.verbose else cfg.logging.level,
        log_file=cfg.logging.file,
        json=cfg.logging.json_lines,
        quiet_libs=["PIL"],
        context={"app": "approximate"},
    )

    try:
        manifest = run(args, cfg)
    except (InvalidParameterError, OSError, RuntimeError) as e:
        logger.error(str(e))
        return 1
    finally:
        logging_config.pop_context(keys=["seed", "schedule"])

    if args.manifest:
        fs.atomic_yaml_dump(manifest, args.manifest)
        logger.info(f"Saved manifest: {args.manifest}")

    return 0


if __name__ == '__main__':
    logging_config.install_excepthook()
    sys.exit(main())

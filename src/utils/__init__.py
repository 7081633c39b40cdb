"""Shared helpers below the approximation core.

Modules:
    - color: 8/16-bit widening and straight ↔ premultiplied conversion
    - fs: atomic image/YAML writes, YAML loading
    - hashing: SHA-256 digests for run manifests
    - logging_config: root logger setup and context fields
    - profiler: wall-clock timers

Layering: nothing in utils/ imports from src.pointillism or scripts/.
"""

from . import color, fs, hashing, logging_config, profiler
from .logging_config import get_logger, pop_context, push_context, setup_logging

__all__ = [
    'color',
    'fs',
    'hashing',
    'logging_config',
    'profiler',
    'get_logger',
    'pop_context',
    'push_context',
    'setup_logging',
]

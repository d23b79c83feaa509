"""Console logging for msbuild-affected."""

import logging
import sys

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(logging.Formatter(
    '%(asctime)s - %(filename)s:%(lineno)d - %(levelname)s - %(message)s',
    '%Y-%m-%d %H:%M:%S'
))

root = logging.getLogger()
for handler in root.handlers[:]:
    root.removeHandler(handler)

root.addHandler(console_handler)
root.setLevel(logging.WARNING)

logger = logging.getLogger('msbuild_affected')
logger.setLevel(logging.INFO)


def set_log_level(level) -> None:
    """Set the level of the ``msbuild_affected`` logger from a number or a level name."""
    if isinstance(level, int):
        logger.setLevel(level)
        return

    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')
    logger.setLevel(numeric_level)


def is_debug_enabled() -> bool:
    return logger.getEffectiveLevel() <= logging.DEBUG

'''
The archive on disk is the container wrapped into a single gzip stream (RFC 1952),
nothing more: any gzip implementation can produce or consume it.
'''
import gzip
import logging
import zlib

from .config import DEFAULT_LEVEL, MIN_LEVEL, MAX_LEVEL
from .exceptions import DecompressionError


logger = logging.getLogger(__name__)


def normalize_level(level) -> int:
    '''Out of range or non integer levels fall back to the default one.'''
    if isinstance(level, bool) or not isinstance(level, int) or not MIN_LEVEL <= level <= MAX_LEVEL:
        logger.warning('compression level %r is not in [%d, %d], using %d', level, MIN_LEVEL, MAX_LEVEL, DEFAULT_LEVEL)
        return DEFAULT_LEVEL

    return level


def compress(data: bytes, level: int = DEFAULT_LEVEL) -> bytes:
    level = normalize_level(level)
    logger.debug('compressing %d bytes at level %d', len(data), level)

    return gzip.compress(data, compresslevel=level, mtime=0)


def decompress(data: bytes) -> bytes:
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise DecompressionError(f'invalid gzip data: {e}') from e

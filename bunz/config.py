from dataclasses import dataclass


ARCHIVE_EXTENSION = '.bunz'
# default output directory of archives not named *.bunz
EXTRACTED_SUFFIX = '_extracted'
FORMAT_VERSION = '1.0'

MIN_LEVEL = 1
MAX_LEVEL = 9
DEFAULT_LEVEL = 9


@dataclass
class Options:
    """Knobs of a single compress/uncompress invocation.

    Attributes:
        level: gzip compression level, from 1 (fastest) to 9 (smallest)
        verbose: log every file packed or extracted
    """

    level: int = DEFAULT_LEVEL
    verbose: bool = False

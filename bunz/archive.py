"""
Packing of a directory into a .bunz archive and back.

The Packer reads the whole tree, builds the container and writes it gzip'ed;
the Unpacker does the opposite. Both log what they did and return the
statistics to the caller.

Invariants:
    - nothing is written by pack() before the archive is fully built
    - unpack() touches only files under the output directory
    - a failure while extracting leaves the files already written in place
"""
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import compression
from . import container
from . import walker
from .config import ARCHIVE_EXTENSION, DEFAULT_LEVEL, EXTRACTED_SUFFIX
from .container import ContainerMetadata
from .utils import format_size
from .exceptions import (
    EmptyArchiveError,
    EmptyDirectoryError,
    NotADirectoryError,
    NotAFileError,
    UnsafePathError,
)


logger = logging.getLogger(__name__)


@dataclass
class Statistics:
    """What a pack()/unpack() call did.

    Attributes:
        file_count: number of files packed or extracted
        total_bytes: original size when packing, extracted size when unpacking
        path: archive written or directory populated
        compressed_bytes: size of the archive (packing only)
        ratio: percentage of space saved (packing only)
    """

    file_count: int
    total_bytes: int
    path: str
    compressed_bytes: Optional[int] = None
    ratio: Optional[float] = None


@dataclass
class Archive:
    """An archive being built: the container and its gzip'ed version."""

    metadata: ContainerMetadata
    container: bytes
    compressed: bytes = field(repr=False, default=b'')

    @property
    def original_size(self) -> int:
        return self.metadata.total_size + len(self.metadata.to_json())

    @property
    def ratio(self) -> float:
        return round((1 - len(self.compressed) / self.original_size) * 100, 2)


def _log_file(verbose: bool, msg: str, *args) -> None:
    logger.log(logging.INFO if verbose else logging.DEBUG, msg, *args)


def default_archive_path(directory_path: str) -> str:
    name = os.path.basename(os.path.normpath(directory_path))
    return f'{name}{ARCHIVE_EXTENSION}'


def default_output_directory(archive_path: str) -> str:
    '''The archive name without extension, or with a suffix when there is no
    extension to remove (the directory cannot take the place of the archive).'''
    name = os.path.basename(archive_path)
    if name.endswith(ARCHIVE_EXTENSION) and name != ARCHIVE_EXTENSION:
        name = name[:-len(ARCHIVE_EXTENSION)]
    else:
        name = f'{name}{EXTRACTED_SUFFIX}'

    return os.path.join(os.path.dirname(archive_path), name)


def build(files: List[Tuple[str, bytes]], level: int = DEFAULT_LEVEL) -> Archive:
    '''Container and compressed data for the files, in the order they were found.'''
    metadata = ContainerMetadata.for_files(files, created=ContainerMetadata.timestamp())
    raw = container.encode(dict(files), metadata=metadata)

    archive = Archive(metadata=metadata, container=raw)
    archive.compressed = compression.compress(raw, level)

    return archive


def pack(directory_path: str, output_path: Optional[str] = None, level: int = DEFAULT_LEVEL,
         verbose: bool = False) -> Statistics:
    '''Compress the directory into a single archive file.'''
    if not os.path.isdir(directory_path):
        raise NotADirectoryError(f"'{directory_path}' is not a directory")

    output_path = output_path or default_archive_path(directory_path)

    logger.info('Reading files from %s...', directory_path)
    files = walker.list_files(directory_path)

    if not files:
        raise EmptyDirectoryError(f"no files found in '{directory_path}'")

    for path, content in files:
        _log_file(verbose, '- %s (%s)', path, format_size(len(content)))

    level = compression.normalize_level(level)
    logger.info('Creating archive with %d files (level: %d)...', len(files), level)
    archive = build(files, level)
    _log_file(verbose, 'Container size: %s', format_size(len(archive.container)))

    with open(output_path, 'wb') as f:
        f.write(archive.compressed)

    statistics = Statistics(
        file_count=len(files),
        total_bytes=archive.original_size,
        path=output_path,
        compressed_bytes=len(archive.compressed),
        ratio=archive.ratio,
    )

    logger.info("Successfully compressed %d files to '%s'", statistics.file_count, output_path)
    logger.info('Original size: %s', format_size(statistics.total_bytes))
    logger.info('Compressed size: %s', format_size(statistics.compressed_bytes))
    logger.info('Compression ratio: %.2f%% saved', statistics.ratio)

    return statistics


def read(archive_path: str) -> Tuple[ContainerMetadata, List[Tuple[str, bytes]]]:
    '''Load the archive in memory and decode it.'''
    if not os.path.isfile(archive_path):
        raise NotAFileError(f"'{archive_path}' is not a file")

    logger.info('Reading archive %s...', archive_path)
    with open(archive_path, 'rb') as f:
        data = f.read()

    metadata, files = container.decode(compression.decompress(data))

    if not files:
        raise EmptyArchiveError(f"no files found in the archive '{archive_path}'")

    return metadata, files


def list_archive(archive_path: str) -> ContainerMetadata:
    '''Metadata of the archive, nothing is extracted.'''
    metadata, _ = read(archive_path)

    return metadata


def _target_path(output_directory: str, path: str) -> str:
    # on systems where "\" separates directories it cannot be part of a name
    if any(sep in path for sep in (os.sep, os.altsep) if sep and sep != '/'):
        raise UnsafePathError(f"'{path}' contains a path separator of this system")

    root = os.path.realpath(output_directory)
    target = os.path.realpath(os.path.join(root, *path.split('/')))

    if os.path.commonpath([root, target]) != root:
        raise UnsafePathError(f"'{path}' would be extracted outside of '{output_directory}'")

    return target


def unpack(archive_path: str, output_directory: Optional[str] = None, verbose: bool = False) -> Statistics:
    '''Extract the archive into the directory, overwriting what's already there.'''
    metadata, files = read(archive_path)
    logger.debug('archive version %s created at %s', metadata.version, metadata.created)

    output_directory = output_directory or default_output_directory(archive_path)
    os.makedirs(output_directory, exist_ok=True)

    logger.info('Extracting %d files...', len(files))

    total_bytes = 0
    for path, content in files:
        target = _target_path(output_directory, path)
        os.makedirs(os.path.dirname(target), exist_ok=True)

        with open(target, 'wb') as f:
            f.write(content)

        total_bytes += len(content)
        _log_file(verbose, 'Extracted: %s (%s)', path, format_size(len(content)))

    statistics = Statistics(
        file_count=len(files),
        total_bytes=total_bytes,
        path=output_directory,
    )

    logger.info("Successfully extracted %d files to '%s'", statistics.file_count, output_directory)
    logger.info('Total extracted size: %s', format_size(statistics.total_bytes))

    return statistics

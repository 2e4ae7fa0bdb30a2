'''
# Container format

The container is the uncompressed buffer holding a whole directory tree. All the
integers are unsigned 32 bits little-endian:

  .-------------------------------------------.
  | metadata length                           |
  | metadata (UTF-8 JSON)                     |
  | file entry 1                              |
  |   path length, content length,            |
  |   path (UTF-8), content                   |
  | file entry 2                              |
    ...
  | file entry N                              |
  '-------------------------------------------'

The entries are sorted by path so the same files always produce the same bytes;
paths are compared as UTF-16 code units, so characters outside the BMP sort
before U+E000-U+FFFF as in archives made by the original JavaScript tool.

A path is "/" separated and relative; any other character (backslash included)
is part of a file name.

The metadata is a JSON summary (format version, creation time, list of path and
size in the order the directory was walked) useful to enumerate the contents: it's
only a hint, the files are always rebuilt from the entries themselves.
'''
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional, Tuple

from .core import Chunk
from . import fields
from .config import FORMAT_VERSION
from .properties import Dependency
from .streams import Stream
from .exceptions import (
    CorruptMetadataError,
    DuplicateEntryError,
    EmptyInputError,
    OversizeEntryError,
    TruncatedEntryError,
    UnpackException,
    UnsafePathError,
)


logger = logging.getLogger(__name__)

MAX_LENGTH = 0xffffffff


class FileEntry(Chunk):
    path_length    = fields.StructField('I')
    content_length = fields.StructField('I')
    path           = fields.StringField(Dependency('.path_length'))
    content        = fields.StringField(Dependency('.content_length'))

    @classmethod
    def create_entry(cls, path: str, content: bytes) -> "FileEntry":
        entry = cls()
        entry.path.value = path.encode('utf-8')
        entry.content.value = content

        return entry

    def get_path(self) -> str:
        try:
            return self.path.value.decode('utf-8')
        except UnicodeDecodeError as e:
            raise UnsafePathError(f'path {self.path.value!r} at offset {self.path.offset} is not UTF-8') from e


class Container(Chunk):
    metadata_length = fields.StructField('I')
    metadata        = fields.StringField(Dependency('.metadata_length'))
    entries         = fields.ArrayField(FileEntry)


@dataclass
class FileDescriptor:
    path: str
    size: int


@dataclass
class ContainerMetadata:
    """JSON header of the container.

    Attributes:
        version: format version
        created: ISO 8601 creation time (UTC), None when not recorded
        files: path and size of each file, in the order they were found
    """

    version: str = FORMAT_VERSION
    created: Optional[str] = None
    files: List[FileDescriptor] = field(default_factory=list)

    @classmethod
    def for_files(cls, files: Iterable[Tuple[str, bytes]], created: Optional[str] = None,
                  version: str = FORMAT_VERSION) -> "ContainerMetadata":
        return cls(
            version=version,
            created=created,
            files=[FileDescriptor(path, len(content)) for path, content in files],
        )

    @staticmethod
    def timestamp() -> str:
        '''Now, like 2024-05-01T10:20:30.123Z'''
        return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')

    @property
    def total_size(self) -> int:
        return sum(descriptor.size for descriptor in self.files)

    def to_json(self) -> bytes:
        document = {
            'version': self.version,
            'created': self.created,
            'files': [{'path': _.path, 'size': _.size} for _ in self.files],
        }

        return json.dumps(document, separators=(',', ':'), ensure_ascii=False).encode('utf-8')

    @classmethod
    def from_json(cls, raw: bytes) -> "ContainerMetadata":
        try:
            document = json.loads(raw.decode('utf-8'))
        except (UnicodeDecodeError, ValueError) as e:
            raise CorruptMetadataError(f'metadata is not valid JSON: {e}') from e

        if not isinstance(document, dict) or not isinstance(document.get('files'), list):
            raise CorruptMetadataError("metadata doesn't contain a list of files")

        files = []
        for item in document['files']:
            if not isinstance(item, dict) or not isinstance(item.get('path'), str) or not isinstance(item.get('size'), int):
                raise CorruptMetadataError(f'invalid file description in metadata: {item!r}')
            files.append(FileDescriptor(item['path'], item['size']))

        return cls(
            version=document.get('version'),
            created=document.get('created'),
            files=files,
        )


def check_path(path: str) -> None:
    '''A path inside the container is relative, "/" separated and cannot climb
    out of the directory it's extracted into.'''
    if not isinstance(path, str) or not path:
        raise UnsafePathError(f'invalid path {path!r}')

    if '\x00' in path:
        raise UnsafePathError(f'path {path!r} contains forbidden characters')

    if path.startswith('/'):
        raise UnsafePathError(f'path {path!r} is absolute')

    if any(segment in ('', '.', '..') for segment in path.split('/')):
        raise UnsafePathError(f'path {path!r} is not normalized')

    try:
        path.encode('utf-8')
    except UnicodeEncodeError as e:
        raise UnsafePathError(f'path {path!r} cannot be encoded as UTF-8') from e


def sort_key(item: Tuple[str, bytes]) -> bytes:
    return item[0].encode('utf-16-be')


def _check_length(what: str, length: int) -> None:
    if length > MAX_LENGTH:
        raise OversizeEntryError(f'{what} is {length} bytes long, the limit is {MAX_LENGTH}')


def encode(files: Mapping[str, bytes], metadata: Optional[ContainerMetadata] = None) -> bytes:
    '''Build the container for the files (relative path -> content).

    Without metadata the default one lists the files sorted by path and has no
    creation time, so that the result depends only on the files.'''
    if not files:
        raise EmptyInputError('there are no files to put in the container')

    for path in files:
        check_path(path)

    files = sorted(((path, bytes(content)) for path, content in files.items()), key=sort_key)

    for path, content in files:
        _check_length(f"path '{path}'", len(path.encode('utf-8')))
        _check_length(f"content of '{path}'", len(content))

    if metadata is None:
        metadata = ContainerMetadata.for_files(files)

    raw_metadata = metadata.to_json()
    _check_length('metadata', len(raw_metadata))

    container = Container()
    container.metadata.value = raw_metadata

    for path, content in files:
        logger.debug('adding entry \'%s\' (%d bytes)', path, len(content))
        container.entries.append(FileEntry.create_entry(path, content))

    return container.pack().getvalue()


def decode(data: bytes) -> Tuple[ContainerMetadata, List[Tuple[str, bytes]]]:
    '''Rebuild metadata and files (in the order they are stored) from the container.'''
    container = Container()

    with Stream(data) as stream:
        try:
            container.unpack(stream)
        except UnpackException as e:
            raise TruncatedEntryError(chain=e.chain, reason=e.reason) from e

    metadata = ContainerMetadata.from_json(container.metadata.value)

    files = []
    seen = set()
    for entry in container.entries:
        path = entry.get_path()
        check_path(path)
        if path in seen:
            raise DuplicateEntryError(f"path '{path}' is present more than once")
        seen.add(path)
        files.append((path, entry.content.value))

    if len(files) < len(metadata.files):
        raise TruncatedEntryError(
            chain=['entries'],
            reason=f'the metadata describes {len(metadata.files)} files but only {len(files)} are present',
        )

    if len(files) > len(metadata.files):
        raise CorruptMetadataError(
            f'the metadata describes {len(metadata.files)} files but {len(files)} are present')

    logger.debug('decoded %d entries', len(files))

    return metadata, files

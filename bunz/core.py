"""
Core module for the abstraction of a binary format

"""
import logging
from typing import Tuple, List, Dict

from .fields import Field
from .meta import MetaChunk
from .streams import Stream
from .exceptions import (
    ChunkUnpackException,
    UnpackException,
)


logger = logging.getLogger(__name__)


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: it's an ordered
    sequence of fields, packed one after the other.

    A Chunk can contain sub-chunks and it can be used itself as a field of
    another Chunk or as element of an ArrayField.

    If data (bytes) is passed to the constructor the chunk is
    unpacked from it right away.
    """

    def __init__(self, data=None, **kwargs):
        super().__init__(**kwargs)

        if data is not None:
            logger.debug('unpacking \'%s\' from %s', self.__class__.__name__, data.__class__.__name__)
            with Stream(data) as stream:
                self.unpack(stream)

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def init(self):
        for _, field in self.get_fields():
            field.init()

    def _get_value(self):
        return self

    def _set_value(self, value):
        raise AttributeError(f'cannot assign a value to the chunk \'{self.__class__.__name__}\' directly')

    def _get_size(self):
        return sum(field.size for _, field in self.get_fields())

    def _get_raw(self):
        return b''.join(field.raw for _, field in self.get_fields())

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        '''Offset and size of each field, as of the last un/packing.'''
        result = {}
        for name, field in self.get_fields():
            result[name] = (field.offset, field.size)

        return result

    def pack(self, stream=None):
        '''Encode the chunk field by field: the offsets are updated while writing.'''
        stream = Stream(b'') if stream is None else stream
        self.offset = stream.tell()

        for field_name, field in self.get_fields():
            logger.debug('packing %s.%s at offset %d', self.__class__.__name__, field_name, stream.tell())
            field.pack(stream)

        return stream

    def unpack(self, stream):
        '''Take the binary data from the stream and fill the fields in order;
        the fields whose length is a Dependency find the value they need
        already unpacked.'''
        self.offset = stream.tell()

        for field_name, field in self.get_fields():
            logger.debug('unpacking %s.%s at offset %d', self.__class__.__name__, field_name, stream.tell())

            try:
                field.unpack(stream)
            except UnpackException as e:
                raise ChunkUnpackException(chain=e.chain + [field_name], reason=e.reason) from e

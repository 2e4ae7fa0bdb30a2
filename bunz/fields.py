"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable: an integer, a run of bytes, an array of chunks.
"""
import logging
import struct
from typing import Dict

from .meta import FieldBase
from .properties import Dependency, PropertyDescriptor
from .streams import Stream
from .exceptions import UnpackException


logger = logging.getLogger(__name__)


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, name=None, father=None, default=None):
        super().__init__()
        self.name = name
        self.father = father
        self.default = default
        self.offset = None

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def get_dependencies(self) -> Dict[str, Dependency]:
        """Return the attributes of this field that are resolved through a Dependency"""
        return {_k: _v for _k, _v in self.__dict__.items() if isinstance(_v, Dependency)}

    def _get_value(self):
        return self._value

    def _set_value(self, value) -> None:
        self._value = value

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_size(self) -> int:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _get_raw(self) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_raw() not implemented")

    raw = property(
        fget=lambda self: self._get_raw(),
    )

    def _read(self, stream: Stream, size: int) -> bytes:
        '''Read exactly size bytes or complain about it.'''
        data = stream.read(size)
        if len(data) != size:
            raise UnpackException(chain=[], reason='needed %d bytes at offset %d but only %d available' % (
                size, self.offset, len(data)))

        return data

    def pack(self, stream=None):
        stream = Stream(b'') if stream is None else stream
        self.offset = stream.tell()
        stream.write(self.raw)

        return stream

    def unpack(self, stream):
        raise NotImplementedError('you need to implement this in the subclass')


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    little-endian integers to/from bytes.
    """

    def __init__(self, format, default=0, **kw):
        self.format = format
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

    def get_format(self):
        return '<%s' % self.format

    def _set_value(self, value) -> None:
        try:
            struct.pack(self.get_format(), value)
        except struct.error as e:
            raise ValueError(f"value {value!r} doesn't fit the format '{self.format}' of field '{self.name}'") from e

        super()._set_value(value)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _get_raw(self) -> bytes:
        return struct.pack(self.get_format(), self.value)

    def unpack(self, stream):
        self.offset = stream.tell()
        raw = self._read(stream, self.size)
        self._value = struct.unpack(self.get_format(), raw)[0]


class StringField(Field):
    """Represent a contiguous chunk of bytes.

    The length can be fixed or a Dependency on another field: in the latter case
    setting the value updates the field the length depends on."""

    length = PropertyDescriptor('length', int)

    def __init__(self, n=None, **kw):
        if n is None and kw.get('default') is None:
            raise ValueError("StringField must have 'n' or 'default' indicated!")

        self.length = len(kw['default']) if n is None else n

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return len(self.value)

    def is_dependent(self):
        return 'length' in self.get_dependencies()

    def value_from_default(self):
        if self.default is not None:
            return self.default

        return b'' if self.is_dependent() else b'\x00' * self.length

    def _set_value(self, value) -> None:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"field '{self.name}' accepts only binary data, not {value.__class__.__name__}")

        value = bytes(value)

        if not self.is_dependent() and len(value) != self.length:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self.length} bytes)')

        super()._set_value(value)

        if self.is_dependent():
            self.length = len(value)

    def _get_size(self):
        return len(self.value)

    def _get_raw(self):
        return self.value

    def unpack(self, stream):
        self.offset = stream.tell()
        self._value = self._read(stream, self.length)


class ArrayField(Field):
    '''Un/Pack an array of Chunks: the elements are unpacked until the stream
    is exhausted.

    This class behaves like a list of chunks.
    '''

    def __init__(self, field_cls, **kw):
        self.field_cls = field_cls
        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def value_from_default(self):
        return list(self.default) if self.default else []

    def _get_raw(self):
        return b''.join(element.raw for element in self.value)

    def _get_size(self):
        return sum(element.size for element in self.value)

    def instance_element(self):
        return self.field_cls(father=self)  # pass the father so that we don't lose the hierarchy

    def append(self, element):
        element.father = self
        self.value.append(element)

    def pack(self, stream=None):
        stream = Stream(b'') if stream is None else stream
        self.offset = stream.tell()
        for element in self.value:
            element.pack(stream)

        return stream

    def unpack(self, stream):
        self.offset = stream.tell()
        elements = []

        while not stream.is_exhausted():
            element = self.instance_element()
            logger.debug('unpacking element %d of \'%s\' at offset %d', len(elements), self.name, stream.tell())
            try:
                element.unpack(stream)
            except UnpackException as e:
                raise UnpackException(chain=e.chain + [str(len(elements))], reason=e.reason) from e
            elements.append(element)

        self._value = elements

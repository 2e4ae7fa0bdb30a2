import builtins


class BunzException(Exception):
    '''Base class to extend in order to throw exception in bunz.'''
    pass


class InputException(BunzException):
    '''The caller handed us something we cannot work with: it's detected
    before anything is written.'''
    pass


class FormatException(BunzException):
    '''The data doesn't follow the container format (malformed or foreign archive).'''
    pass


class EmptyInputError(InputException):
    pass


class NotADirectoryError(InputException, builtins.NotADirectoryError):
    pass


class NotAFileError(InputException):
    pass


class EmptyDirectoryError(InputException):
    pass


class EmptyArchiveError(InputException):
    pass


class CorruptMetadataError(FormatException):
    pass


class OversizeEntryError(FormatException):
    pass


class DecompressionError(FormatException):
    pass


class UnsafePathError(FormatException):
    pass


class DuplicateEntryError(FormatException):
    pass


class UnpackException(FormatException):
    '''It takes as argument the chain of the layers that caused the exception,
    from the innermost field to the outermost.'''

    def __init__(self, chain, reason=None):
        self.chain = chain
        self.reason = reason
        super().__init__(self._build_message())

    @property
    def where(self):
        return '.'.join(reversed(self.chain))

    def _build_message(self):
        msg = self.reason or 'unpack failed'
        if self.chain:
            msg = '%s: %s' % (self.where, msg)

        return msg


class ChunkUnpackException(UnpackException):
    pass


class TruncatedEntryError(UnpackException):
    pass

import io
import os


class Stream(object):
    '''This is a simple wrapper around bytes to
    uniform its properties: mainly we need to know how much data
    is left so to read a sequence of chunks until the end.'''
    def __init__(self, obj=b''):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)
        if init_method is None:
            raise ValueError('\'%s\' cannot be used as a stream' % self.obj.__class__.__name__)

        init_method()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    def size(self):
        current = self.obj.tell()
        end = self.obj.seek(0, os.SEEK_END)
        self.obj.seek(current)

        return end

    def remaining(self):
        return self.size() - self.obj.tell()

    def is_exhausted(self):
        return self.remaining() <= 0

    def write(self, data):
        return self.obj.write(data)

    def getvalue(self):
        self.obj.seek(0)
        return self.obj.read()

"""
# bunz: a directory in a single file.

A directory tree is read in memory, laid out in a flat container (a JSON
summary followed by one length-prefixed entry per file, sorted by path) and
the container is gzip'ed into a `.bunz` file.

The container is described declaratively, as a sequence of fields:

    class FileEntry(Chunk):
        path_length    = fields.StructField('I')
        content_length = fields.StructField('I')
        path           = fields.StringField(Dependency('.path_length'))
        content        = fields.StringField(Dependency('.content_length'))

Two basic main operations are defined for a format and its sub components:

 1. unpack(): read the binary data and build a high-level representation of it;
    each field knows how many bytes it needs, possibly asking another field
    (a Dependency) for it.

 2. pack(): encode the high-level representation into binary data.

On top of that the archive module exposes pack()/unpack() for whole
directories.
"""

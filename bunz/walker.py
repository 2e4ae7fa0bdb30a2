'''
Enumeration of the regular files under a directory.

The traversal uses an explicit worklist so that deep trees don't grow the
call stack. Symbolic links are never followed (nor archived): what we read
is always under the root.
'''
import logging
import os
from typing import List, Tuple


logger = logging.getLogger(__name__)


def list_files(root: str) -> List[Tuple[str, bytes]]:
    '''Return the couples (relative path, content) of every regular file under root,
    the relative path uses "/" as separator whatever the host uses.'''
    results = []
    worklist = [(root, ())]

    while worklist:
        directory, parts = worklist.pop()
        logger.debug('scanning %s', directory)

        with os.scandir(directory) as entries:
            for entry in entries:
                entry_parts = parts + (entry.name,)
                if entry.is_dir(follow_symlinks=False):
                    worklist.append((entry.path, entry_parts))
                elif entry.is_file(follow_symlinks=False):
                    with open(entry.path, 'rb') as f:
                        results.append(('/'.join(entry_parts), f.read()))
                else:
                    logger.debug('skipping %s: not a regular file', entry.path)

    return results

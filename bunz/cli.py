'''
Command line front end: it only translates flags into Options and calls
the packer, the unpacker or the listing.
'''
import logging
import sys
from typing import List, Optional, Tuple

from . import archive
from .config import DEFAULT_LEVEL, Options
from .exceptions import BunzException
from .utils import format_size, setup_logging


logger = logging.getLogger(__name__)

COMMANDS = ('compress', 'uncompress', 'list')


def usage(progname):
    print(f'''
Usage: {progname} [options] <command> <arguments>

Commands:
  compress <directory-path> [output-file.bunz]  Compress a directory
  uncompress <archive-file> [output-directory]  Uncompress an archive
  list <archive-file>                           Show the contents of an archive

Options:
  -l, --level=N      Compression level (1-9, default: {DEFAULT_LEVEL})
  -v, --verbose      Show detailed information
  -h, --help         Show this help message
''')


def parse_level(flag: str) -> int:
    '''From "--level=N" or "-l=N", anything unparsable is the default level.'''
    _, _, value = flag.partition('=')
    try:
        return int(value)
    except ValueError:
        return DEFAULT_LEVEL


def parse_args(argv: List[str]) -> Tuple[Options, List[str], bool]:
    '''Split the arguments into options and positional arguments; the last
    element tells if the help was requested.'''
    flags = [_ for _ in argv if _.startswith('-')]
    positional = [_ for _ in argv if not _.startswith('-')]

    options = Options()
    options.verbose = '-v' in flags or '--verbose' in flags

    for flag in flags:
        if flag.startswith('--level=') or flag.startswith('-l='):
            options.level = parse_level(flag)

    show_help = '-h' in flags or '--help' in flags or not argv

    return options, positional, show_help


def dump_metadata(metadata):
    print(f'Version: {metadata.version}')
    print(f'Created: {metadata.created}')
    print(f'Files:   {len(metadata.files)} ({format_size(metadata.total_size)})')
    for descriptor in metadata.files:
        print(f'  {descriptor.path:<60} {format_size(descriptor.size):>12}')


def run(command: str, arguments: List[str], options: Options) -> None:
    input_path = arguments[0]
    output_path = arguments[1] if len(arguments) > 1 else None

    if command == 'compress':
        archive.pack(input_path, output_path, level=options.level, verbose=options.verbose)
    elif command == 'uncompress':
        archive.unpack(input_path, output_path, verbose=options.verbose)
    elif command == 'list':
        dump_metadata(archive.list_archive(input_path))


def main(argv: Optional[List[str]] = None, progname: str = 'bunz') -> int:
    argv = sys.argv[1:] if argv is None else argv

    options, positional, show_help = parse_args(argv)

    if show_help:
        usage(progname)
        return 0

    setup_logging()

    if not positional:
        logger.error('Error: No command specified. Use "compress", "uncompress" or "list".')
        return 1

    command = positional[0]
    if command not in COMMANDS:
        logger.error('Error: Unknown command \'%s\'. Use "compress", "uncompress" or "list".', command)
        return 1

    if len(positional) < 2:
        logger.error('Error: No input path specified.')
        return 1

    try:
        run(command, positional[1:], options)
    except (BunzException, OSError) as e:
        logger.error('Error: %s', e)
        logger.debug('failure details', exc_info=True)
        return 1

    return 0

import logging
import os


def format_size(n_bytes: int) -> str:
    '''Human readable size, the unit is chosen so that the number stays below 1024.'''
    if n_bytes < 1024:
        return f'{n_bytes} bytes'
    if n_bytes < 1024 ** 2:
        return f'{n_bytes / 1024:.2f} KB'
    if n_bytes < 1024 ** 3:
        return f'{n_bytes / 1024 ** 2:.2f} MB'

    return f'{n_bytes / 1024 ** 3:.2f} GB'


def setup_logging():
    logging.basicConfig(
        level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO,
        format='%(message)s',
    )

#!/usr/bin/env python3
'''
Compress a directory into a .bunz archive and back.

 $ bunz.py compress docs/ docs.bunz
 $ bunz.py list docs.bunz
 $ bunz.py uncompress docs.bunz restored/
'''
import os
import sys

from bunz.cli import main


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:], progname=os.path.basename(sys.argv[0])))

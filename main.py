import sys

from heavydirs.cli import main

if __name__ == '__main__':
    sys.exit(main())

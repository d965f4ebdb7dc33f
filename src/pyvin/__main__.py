import sys

from pyvin.cli import main

sys.exit(main())

"""Allow ``python -m pyfiremap``."""

import sys

from pyfiremap.cli import main

sys.exit(main())

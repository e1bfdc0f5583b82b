"""Allow `python -m rocketsim`."""

import sys

from rocketsim.cli import main

sys.exit(main())

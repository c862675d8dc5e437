"""Entry point for `python -m quality_gate`."""

import sys

from .cli import main

sys.exit(main())

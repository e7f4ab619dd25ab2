"""Allow running as ``python -m json_tail``."""

import sys

from .cli import main

sys.exit(main())

"""Allow `python -m lrpc`."""

import sys

from lrpc.cli import main

sys.exit(main())

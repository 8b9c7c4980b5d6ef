"""Allow ``python -m ironwatch.cli`` execution."""

import sys

from ironwatch.cli.tracker import main

sys.exit(main())

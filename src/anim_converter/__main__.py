# SPDX-License-Identifier: MIT
"""Allow running as ``python -m anim_converter``."""

import sys

from anim_converter.cli import main

sys.exit(main())

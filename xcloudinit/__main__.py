#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Command-line interface for xcloudinit package"""

import sys

# NOTE: this module runs with -m; do not use relative imports
from xcloudinit.cli import run

sys.exit(run())

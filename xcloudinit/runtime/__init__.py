# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Helpers that assume a running pulumi program
"""

from .cloudinit_config import (
    CloudInitPartInput,
    render_cloud_init_config,
    render_cloud_init_config_text,
  )

# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Runtime support code that does not assume a running pulumi app (e.g., dynamic providers)
"""

from .cloudinit_config_provider import ( CloudInitConfigResource, CloudInitConfigProvider )

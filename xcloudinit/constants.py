# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by xcloudinit"""

DEFAULT_BOUNDARY: str = 'MIMEBOUNDARY'
DEFAULT_CONTENT_TYPE: str = 'text/plain'
DEFAULT_GZIP: bool = True
DEFAULT_BASE64_ENCODE: bool = True

# A fixed modification time in the gzip header keeps compressed output identical
# for identical input.
GZIP_FIXED_MTIME: float = 0.0
GZIP_COMPRESS_LEVEL: int = 9

MIME_MAX_BOUNDARY_LENGTH: int = 70

XCLOUDINIT_CONFIG_ENV_VAR: str = 'XCLOUDINIT_CONFIG'
XCLOUDINIT_CONFIG_DIRNAME: str = '.xcloudinit'
XCLOUDINIT_CONFIG_FILENAME_BASE: str = 'cloudinit'

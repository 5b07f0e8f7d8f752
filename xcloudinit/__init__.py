# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Package xcloudinit renders cloud-init user-data as a reproducible multi-part MIME document
"""

from .version import __version__

from .internal_types import Jsonable, JsonableDict, JsonableList

from .exceptions import (
    XCloudInitError,
    CloudInitConfigError,
    BoundaryError,
    PartRenderError,
  )

from .model import (
    CloudInitPart,
    CloudInitConfig,
    RenderedDocument,
    with_defaults,
    validate_config,
  )

from .mime import (
    check_boundary,
    canonical_header_key,
    encode_part,
    assemble_document,
    render_bytes,
  )

from .render import (
    render,
    render_text,
    derive_id,
    decode_rendered,
  )

from .config import XCloudInitConfigFile, locate_config_file

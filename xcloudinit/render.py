#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Rendering of a CloudInitConfig into its final transportable form.

render() is a pure function of its input: it allocates its own buffers, touches
no shared state, and either returns a complete RenderedDocument or raises. It is
safe to call concurrently from multiple threads.

Example:

    from xcloudinit import CloudInitConfig, CloudInitPart, render

    config = CloudInitConfig([
        CloudInitPart('#!/bin/bash\\necho hello\\n', content_type='text/x-shellscript'),
      ])
    doc = render(config)
    ec2.run_instances(..., UserData=doc.rendered, ...)
"""

from typing import Optional
import binascii
import gzip
import zlib
from base64 import b64encode, b64decode

from .model import CloudInitConfig, RenderedDocument, with_defaults, validate_config
from .mime import render_bytes
from .exceptions import XCloudInitError
from .constants import DEFAULT_GZIP, DEFAULT_BASE64_ENCODE

def derive_id(rendered: str) -> str:
  """Returns the CRC-32 (IEEE) checksum of rendered, as a decimal string.

  This is a change-detection fingerprint only; it is not collision-free.
  """
  return str(zlib.crc32(rendered.encode('utf-8')))

def render(config: CloudInitConfig) -> RenderedDocument:
  config = with_defaults(config)
  validate_config(config)
  assert not config.boundary is None

  bcontent = render_bytes(config.parts, config.boundary, gzip=bool(config.gzip))
  if config.base64_encode:
    rendered = b64encode(bcontent).decode('utf-8')
  else:
    rendered = bcontent.decode('utf-8')
  return RenderedDocument(rendered, derive_id(rendered))

def render_text(config: CloudInitConfig) -> str:
  """Renders config as plain multi-part text, ignoring its gzip and base64 settings"""
  return render(config.replace(gzip=False, base64_encode=False)).rendered

def decode_rendered(
      rendered: str,
      gzip_compressed: Optional[bool]=None,
      base64_encoded: Optional[bool]=None,
    ) -> str:
  """Undoes the transport encodings applied by render(), returning the plain multi-part text.

  gzip_compressed and base64_encoded default the same way the corresponding
  CloudInitConfig attributes do.
  """
  if gzip_compressed is None:
    gzip_compressed = DEFAULT_GZIP
  if base64_encoded is None:
    base64_encoded = DEFAULT_BASE64_ENCODE
  if gzip_compressed and not base64_encoded:
    raise XCloudInitError("A gzip-compressed document must also be base64-encoded")
  if not base64_encoded:
    return rendered
  try:
    bcontent = b64decode(rendered.strip(), validate=True)
  except (binascii.Error, ValueError) as e:
    raise XCloudInitError(f"Rendered document is not valid base64: {e}") from e
  if gzip_compressed:
    try:
      bcontent = gzip.decompress(bcontent)
    except (OSError, EOFError, zlib.error) as e:
      raise XCloudInitError(f"Rendered document is not valid gzip data: {e}") from e
  try:
    result = bcontent.decode('utf-8')
  except UnicodeDecodeError as e:
    raise XCloudInitError(f"Rendered document is not valid UTF-8 text: {e}") from e
  return result

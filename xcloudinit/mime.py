#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Multi-part MIME writer for cloud-init user-data.

The layout written here is the one cloud-init has been fed by existing
tooling for years, and cloud-init is its only intended consumer:

    Content-Type: multipart/mixed; boundary="<boundary>"\\n
    MIME-Version: 1.0\\r\\n
    \\r\\n
    --<boundary>\\r\\n
    <part headers, sorted by canonical name>\\r\\n
    \\r\\n
    <part content>\\r\\n
    --<boundary>\\r\\n
    ...
    --<boundary>--\\r\\n

Note the bare "\\n" at the end of the first line. Changing any byte of this
layout changes the rendered id of every existing document, so it must stay
exactly as is.

The boundary is always supplied by the caller, never generated, so that
rendering the same parts twice yields identical bytes.
"""

from typing import BinaryIO, Dict, Iterable, Sequence
from io import BytesIO
from gzip import GzipFile

from .model import CloudInitPart
from .exceptions import BoundaryError, PartRenderError
from .constants import (
    DEFAULT_CONTENT_TYPE,
    GZIP_FIXED_MTIME,
    GZIP_COMPRESS_LEVEL,
    MIME_MAX_BOUNDARY_LENGTH,
  )

_BOUNDARY_PUNCTUATION = "'()+_,-./:=?"
_TOKEN_PUNCTUATION = "!#$%&'*+-.^_`|~"

def check_boundary(boundary: str) -> None:
  """Raises BoundaryError unless boundary is a legal RFC 2046 boundary token"""
  if not isinstance(boundary, str) or len(boundary) < 1 or len(boundary) > MIME_MAX_BOUNDARY_LENGTH:
    raise BoundaryError(f"invalid boundary length: {boundary!r}")
  end = len(boundary) - 1
  for i, c in enumerate(boundary):
    if c.isascii() and c.isalnum():
      continue
    if c in _BOUNDARY_PUNCTUATION:
      continue
    if c == ' ' and i != end:
      continue
    raise BoundaryError(f"invalid boundary character {c!r} in boundary {boundary!r}")

def _is_token_char(c: str) -> bool:
  return c.isascii() and (c.isalnum() or c in _TOKEN_PUNCTUATION)

def canonical_header_key(key: str) -> str:
  """Returns the canonical form of a MIME header name.

  The first letter and any letter following a hyphen are upper-cased; the rest are
  lower-cased. For example, "MIME-Version" becomes "Mime-Version". A name containing
  a character that is not legal in a header name is returned unchanged.
  """
  for c in key:
    if not _is_token_char(c):
      return key
  result = ''
  upper = True
  for c in key:
    if upper and 'a' <= c <= 'z':
      c = c.upper()
    elif not upper and 'A' <= c <= 'Z':
      c = c.lower()
    result += c
    upper = c == '-'
  return result

def part_headers(part: CloudInitPart) -> Dict[str, str]:
  """Returns the MIME headers for one part, keyed by canonical name, in the order written"""
  content_type = part.content_type
  if content_type is None or content_type == '':
    content_type = DEFAULT_CONTENT_TYPE
  headers: Dict[str, str] = {
      'Content-Type': content_type,
      'MIME-Version': '1.0',
      # declared regardless of content; the body is never re-encoded
      'Content-Transfer-Encoding': '7bit',
    }
  if not part.filename is None and part.filename != '':
    headers['Content-Disposition'] = f'attachment; filename="{part.filename}"'
  if not part.merge_type is None and part.merge_type != '':
    headers['X-Merge-Type'] = part.merge_type
  canonical = dict((canonical_header_key(k), v) for k, v in headers.items())
  return dict((k, canonical[k]) for k in sorted(canonical))

def encode_part(part: CloudInitPart, writer: BinaryIO) -> None:
  """Writes the headers and content of one part. The boundary line is not included."""
  header_text = ''
  for k, v in part_headers(part).items():
    header_text += f"{k}: {v}\r\n"
  header_text += "\r\n"
  writer.write(header_text.encode('utf-8'))
  writer.write(part.content.encode('utf-8'))

def assemble_document(parts: Sequence[CloudInitPart], boundary: str, writer: BinaryIO) -> None:
  """Writes the complete multi-part document for parts, in order, to writer"""
  check_boundary(boundary)
  writer.write(f'Content-Type: multipart/mixed; boundary="{boundary}"\n'.encode('utf-8'))
  writer.write(b"MIME-Version: 1.0\r\n\r\n")
  for i, part in enumerate(parts):
    separator = f"--{boundary}\r\n" if i == 0 else f"\r\n--{boundary}\r\n"
    try:
      writer.write(separator.encode('utf-8'))
      encode_part(part, writer)
    except (OSError, ValueError, MemoryError) as e:
      raise PartRenderError(i, e) from e
  writer.write(f"\r\n--{boundary}--\r\n".encode('utf-8'))

def render_bytes(parts: Iterable[CloudInitPart], boundary: str, gzip: bool=False) -> bytes:
  """Renders parts into a multi-part document, optionally gzip-compressed"""
  parts = list(parts)
  buff = BytesIO()
  if gzip:
    # The GzipFile must be closed before the buffer is read, or the tail of the
    # compressed stream is lost.
    with GzipFile(None, 'wb', compresslevel=GZIP_COMPRESS_LEVEL, fileobj=buff, mtime=GZIP_FIXED_MTIME) as g:
      assemble_document(parts, boundary, g)
  else:
    assemble_document(parts, boundary, buff)
  return buff.getvalue()

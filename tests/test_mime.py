from io import BytesIO
import gzip

import pytest

from xcloudinit import (
    CloudInitPart,
    BoundaryError,
    PartRenderError,
    check_boundary,
    canonical_header_key,
    encode_part,
    assemble_document,
    render_bytes,
  )
from xcloudinit.mime import part_headers

class _FailingWriter(BytesIO):
  def write(self, b):
    if b'explode' in b:
      raise OSError("no space left on device")
    return super().write(b)

@pytest.mark.parametrize('key,expected', [
    ('MIME-Version', 'Mime-Version'),
    ('content-type', 'Content-Type'),
    ('CONTENT-TRANSFER-ENCODING', 'Content-Transfer-Encoding'),
    ('x-merge-type', 'X-Merge-Type'),
    ('Content-Disposition', 'Content-Disposition'),
    ('bad key', 'bad key'),
  ])
def test_canonical_header_key(key, expected):
  assert canonical_header_key(key) == expected

@pytest.mark.parametrize('boundary', [ 'MIMEBOUNDARY', '//', "a'()+_,-./:=?z", 'with space', 'x' * 70, '0' ])
def test_legal_boundaries(boundary):
  check_boundary(boundary)

@pytest.mark.parametrize('boundary', [ '', 'x' * 71, 'ends with space ', 'semi;colon', '@@0@@', 'new\nline' ])
def test_illegal_boundaries(boundary):
  with pytest.raises(BoundaryError):
    check_boundary(boundary)

def test_part_headers_are_sorted_by_canonical_name():
  part = CloudInitPart('x', content_type='text/cloud-config', filename='cfg.yaml', merge_type='dict(recurse_array)+list(append)')
  assert list(part_headers(part).items()) == [
      ('Content-Disposition', 'attachment; filename="cfg.yaml"'),
      ('Content-Transfer-Encoding', '7bit'),
      ('Content-Type', 'text/cloud-config'),
      ('Mime-Version', '1.0'),
      ('X-Merge-Type', 'dict(recurse_array)+list(append)'),
    ]

def test_encode_part_writes_headers_then_body():
  buff = BytesIO()
  encode_part(CloudInitPart('#!/bin/sh\necho hi\n', content_type='text/x-shellscript'), buff)
  assert buff.getvalue() == (
      b'Content-Transfer-Encoding: 7bit\r\n'
      b'Content-Type: text/x-shellscript\r\n'
      b'Mime-Version: 1.0\r\n'
      b'\r\n'
      b'#!/bin/sh\necho hi\n'
    )

def test_assemble_document_with_no_parts():
  buff = BytesIO()
  assemble_document([], 'B', buff)
  assert buff.getvalue() == b'Content-Type: multipart/mixed; boundary="B"\nMIME-Version: 1.0\r\n\r\n\r\n--B--\r\n'

def test_boundary_is_checked_before_anything_is_written():
  buff = BytesIO()
  with pytest.raises(BoundaryError):
    assemble_document([ CloudInitPart('a') ], 'bad"boundary', buff)
  assert buff.getvalue() == b''

def test_write_failure_is_wrapped():
  parts = [ CloudInitPart('fine'), CloudInitPart('explode') ]
  with pytest.raises(PartRenderError) as exc_info:
    assemble_document(parts, 'MIMEBOUNDARY', _FailingWriter())
  assert exc_info.value.part_index == 1
  assert 'no space left on device' in str(exc_info.value)
  assert isinstance(exc_info.value.__cause__, OSError)

def test_render_bytes_gzip_is_reproducible():
  parts = [ CloudInitPart('#cloud-config\npackages: [git]\n', content_type='text/cloud-config') ]
  first = render_bytes(parts, 'MIMEBOUNDARY', gzip=True)
  second = render_bytes(parts, 'MIMEBOUNDARY', gzip=True)
  assert first == second
  # mtime field of the gzip header is pinned to zero
  assert first[4:8] == b'\x00\x00\x00\x00'
  assert gzip.decompress(first) == render_bytes(parts, 'MIMEBOUNDARY')

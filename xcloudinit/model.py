#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
The value types describing a cloud-init multi-part document, and the
default-filling and validation steps that run before rendering.

Every type here is immutable. with_defaults() builds a new CloudInitConfig
rather than patching the one it was given, so a caller can reuse the same
sequence of parts for several configurations without aliasing surprises.
"""

from typing import Optional, Tuple, Iterable, Any, cast

from .internal_types import JsonableDict, JsonableList
from .exceptions import CloudInitConfigError
from .constants import (
    DEFAULT_BOUNDARY,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_GZIP,
    DEFAULT_BASE64_ENCODE,
  )

_PART_KEYS = ('content_type', 'content', 'filename', 'merge_type')
_CONFIG_KEYS = ('part', 'parts', 'gzip', 'base64_encode', 'boundary')

def _optional_str(data: JsonableDict, key: str) -> Optional[str]:
  value = data.get(key, None)
  if not value is None and not isinstance(value, str):
    raise CloudInitConfigError(f"{key} must be a string: {value!r}", attribute=key)
  return value

def _optional_bool(data: JsonableDict, key: str) -> Optional[bool]:
  value = data.get(key, None)
  if not value is None and not isinstance(value, bool):
    raise CloudInitConfigError(f"{key} must be a bool: {value!r}", attribute=key)
  return value

class CloudInitPart:
  """One content block, rendered as one MIME body section."""
  _content_type: Optional[str]
  _content: str
  _filename: Optional[str]
  _merge_type: Optional[str]

  def __init__(
        self,
        content: str,
        content_type: Optional[str]=None,
        filename: Optional[str]=None,
        merge_type: Optional[str]=None,
      ):
    if not isinstance(content, str):
      raise CloudInitConfigError(f"content must be a string: {content!r}", attribute='content')
    self._content = content
    self._content_type = content_type
    self._filename = filename
    self._merge_type = merge_type

  @property
  def content_type(self) -> Optional[str]:
    return self._content_type

  @property
  def content(self) -> str:
    return self._content

  @property
  def filename(self) -> Optional[str]:
    return self._filename

  @property
  def merge_type(self) -> Optional[str]:
    return self._merge_type

  def with_defaults(self) -> 'CloudInitPart':
    if self._content_type is None or self._content_type == '':
      return CloudInitPart(
          self._content,
          content_type=DEFAULT_CONTENT_TYPE,
          filename=self._filename,
          merge_type=self._merge_type
        )
    return self

  @classmethod
  def from_jsonable(cls, data: JsonableDict) -> 'CloudInitPart':
    if not isinstance(data, dict):
      raise CloudInitConfigError(f"part must be a dict: {data!r}", attribute='part')
    for k in data:
      if not k in _PART_KEYS:
        raise CloudInitConfigError(f"Unrecognized part attribute: {k}", attribute=k)
    if not 'content' in data:
      raise CloudInitConfigError("content is required in every part", attribute='content')
    return cls(
        cast(str, data['content']),
        content_type=_optional_str(data, 'content_type'),
        filename=_optional_str(data, 'filename'),
        merge_type=_optional_str(data, 'merge_type'),
      )

  def to_jsonable(self) -> JsonableDict:
    return dict(
        content_type=self._content_type,
        content=self._content,
        filename=self._filename,
        merge_type=self._merge_type,
      )

  def _key(self) -> Tuple[Optional[str], str, Optional[str], Optional[str]]:
    return (self._content_type, self._content, self._filename, self._merge_type)

  def __eq__(self, other: Any) -> bool:
    return isinstance(other, CloudInitPart) and self._key() == other._key()

  def __hash__(self) -> int:
    return hash(self._key())

  def __repr__(self) -> str:
    return (f"CloudInitPart(content={self._content!r}, content_type={self._content_type!r}, "
            f"filename={self._filename!r}, merge_type={self._merge_type!r})")

class CloudInitConfig:
  """An ordered sequence of parts plus the knobs that control final encoding.

  gzip, base64_encode and boundary may be None, meaning "not set"; see with_defaults().
  """
  _parts: Tuple[CloudInitPart, ...]
  _gzip: Optional[bool]
  _base64_encode: Optional[bool]
  _boundary: Optional[str]

  def __init__(
        self,
        parts: Iterable[CloudInitPart],
        gzip: Optional[bool]=None,
        base64_encode: Optional[bool]=None,
        boundary: Optional[str]=None,
      ):
    self._parts = tuple(parts)
    for part in self._parts:
      if not isinstance(part, CloudInitPart):
        raise CloudInitConfigError(f"parts must be CloudInitPart instances: {part!r}", attribute='part')
    self._gzip = gzip
    self._base64_encode = base64_encode
    self._boundary = boundary

  @property
  def parts(self) -> Tuple[CloudInitPart, ...]:
    return self._parts

  @property
  def gzip(self) -> Optional[bool]:
    return self._gzip

  @property
  def base64_encode(self) -> Optional[bool]:
    return self._base64_encode

  @property
  def boundary(self) -> Optional[str]:
    return self._boundary

  def replace(self, **kwargs: Any) -> 'CloudInitConfig':
    """Returns a copy with the given attributes changed"""
    args = dict(
        parts=self._parts,
        gzip=self._gzip,
        base64_encode=self._base64_encode,
        boundary=self._boundary
      )
    args.update(kwargs)
    return CloudInitConfig(**args)

  @classmethod
  def from_jsonable(cls, data: JsonableDict) -> 'CloudInitConfig':
    if not isinstance(data, dict):
      raise CloudInitConfigError(f"cloud-init config must be a dict: {data!r}")
    for k in data:
      if not k in _CONFIG_KEYS:
        raise CloudInitConfigError(f"Unrecognized config attribute: {k}", attribute=k)
    raw_parts = data.get('parts', data.get('part', None))
    if raw_parts is None:
      raw_parts = []
    if not isinstance(raw_parts, list):
      raise CloudInitConfigError(f"part must be a list: {raw_parts!r}", attribute='part')
    return cls(
        [ CloudInitPart.from_jsonable(x) for x in cast(JsonableList, raw_parts) ],
        gzip=_optional_bool(data, 'gzip'),
        base64_encode=_optional_bool(data, 'base64_encode'),
        boundary=_optional_str(data, 'boundary'),
      )

  def to_jsonable(self) -> JsonableDict:
    return dict(
        parts=[ x.to_jsonable() for x in self._parts ],
        gzip=self._gzip,
        base64_encode=self._base64_encode,
        boundary=self._boundary,
      )

  def _key(self) -> Tuple[Any, ...]:
    return (self._parts, self._gzip, self._base64_encode, self._boundary)

  def __eq__(self, other: Any) -> bool:
    return isinstance(other, CloudInitConfig) and self._key() == other._key()

  def __hash__(self) -> int:
    return hash(self._key())

  def __repr__(self) -> str:
    return (f"CloudInitConfig(parts={list(self._parts)!r}, gzip={self._gzip!r}, "
            f"base64_encode={self._base64_encode!r}, boundary={self._boundary!r})")

class RenderedDocument:
  """The final rendered string plus its change-detection identifier"""
  _rendered: str
  _id: str

  def __init__(self, rendered: str, id: str):  # pylint: disable=redefined-builtin
    self._rendered = rendered
    self._id = id

  @property
  def rendered(self) -> str:
    return self._rendered

  @property
  def id(self) -> str:
    return self._id

  def to_jsonable(self) -> JsonableDict:
    return dict(id=self._id, rendered=self._rendered)

  def __eq__(self, other: Any) -> bool:
    return isinstance(other, RenderedDocument) and (self._rendered, self._id) == (other._rendered, other._id)

  def __hash__(self) -> int:
    return hash((self._rendered, self._id))

  def __repr__(self) -> str:
    return f"RenderedDocument(id={self._id!r}, rendered={self._rendered!r})"

def with_defaults(config: CloudInitConfig) -> CloudInitConfig:
  """Returns a copy of config with every unset optional value filled in.

  Explicitly set values, including False, are never overwritten, and applying
  this twice gives the same result as applying it once.
  """
  return CloudInitConfig(
      [ part.with_defaults() for part in config.parts ],
      gzip=DEFAULT_GZIP if config.gzip is None else config.gzip,
      base64_encode=DEFAULT_BASE64_ENCODE if config.base64_encode is None else config.base64_encode,
      boundary=DEFAULT_BOUNDARY if config.boundary is None else config.boundary,
    )

def validate_config(config: CloudInitConfig) -> None:
  """Raises CloudInitConfigError if config combines options that cannot be rendered.

  Unset values are defaulted before the check, so they never cause a failure on
  their own.
  """
  config = with_defaults(config)
  if config.gzip and not config.base64_encode:
    raise CloudInitConfigError(
        "Expected base64_encode to be set to true when gzip is true.",
        attribute='base64_encode'
      )

#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""A pulumi dynamic resource that renders a cloud-init multi-part document and
keeps the result in stack state.

Because the boundary is pinned and rendering is pure, re-running a stack with
unchanged inputs yields an identical "rendered" value and no spurious diff.
"""

from typing import Any, Optional, List, Sequence, Union, cast

from pulumi.dynamic import ResourceProvider, CreateResult, Resource, DiffResult, UpdateResult, CheckResult, CheckFailure
from pulumi import ResourceOptions, Input, Output
import pulumi

from ..internal_types import Jsonable, JsonableDict, JsonableList
from ..exceptions import CloudInitConfigError, BoundaryError
from ..model import CloudInitConfig, CloudInitPart, validate_config
from ..mime import check_boundary
from ..render import render
from ..constants import (
    DEFAULT_BOUNDARY,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_GZIP,
    DEFAULT_BASE64_ENCODE,
  )

_DEBUG_PROVIDER = False

_INPUT_PROPS = ('parts', 'gzip', 'base64_encode', 'boundary')
_PART_PROPS = ('content_type', 'content', 'filename', 'merge_type')

def _is_unknown(value: Any) -> bool:
  return isinstance(value, pulumi.output.Unknown)

def _check_part(i: int, part: Jsonable) -> List[CheckFailure]:
  failures: List[CheckFailure] = []
  if _is_unknown(part):
    return failures
  if not isinstance(part, dict):
    failures.append(CheckFailure('parts', f'part {i} must be a dict: {part}'))
    return failures
  for k in part:
    if not k in _PART_PROPS:
      failures.append(CheckFailure('parts', f'part {i} has unrecognized attribute: {k}'))
  content = part.get('content', None)
  if not _is_unknown(content) and not isinstance(content, str):
    failures.append(CheckFailure('parts', f'part {i} content must be a string: {content}'))
  for k in ('content_type', 'filename', 'merge_type'):
    v = part.get(k, None)
    if not _is_unknown(v) and not v is None and not isinstance(v, str):
      failures.append(CheckFailure('parts', f'part {i} {k} must be None or a string: {v}'))
  return failures

def _default_part(part: Jsonable) -> Jsonable:
  if not isinstance(part, dict):
    return part
  content_type = part.get('content_type', None)
  if content_type is None or content_type == '':
    part = dict(part)
    part['content_type'] = DEFAULT_CONTENT_TYPE
  return part

def _config_from_props(props: JsonableDict) -> CloudInitConfig:
  parts = cast(JsonableList, props['parts'])
  return CloudInitConfig.from_jsonable(dict(
      parts=[ dict((k, v) for k, v in cast(JsonableDict, x).items() if k in _PART_PROPS) for x in parts ],
      gzip=props.get('gzip', None),
      base64_encode=props.get('base64_encode', None),
      boundary=props.get('boundary', None),
    ))

class CloudInitConfigProvider(ResourceProvider):
  def _gen_outs(self, props: JsonableDict) -> JsonableDict:
    if _DEBUG_PROVIDER: pulumi.log.info(f"CloudInitConfigProvider._gen_outs(props={props})")
    config = _config_from_props(props)
    doc = render(config)
    result: JsonableDict = dict(
        parts=props['parts'],
        gzip=props.get('gzip', None),
        base64_encode=props.get('base64_encode', None),
        boundary=props.get('boundary', None),
        rendered=doc.rendered,
        rendered_id=doc.id,
      )
    return result

  def check(self, oldProps: JsonableDict, newProps: JsonableDict) -> CheckResult:  # pylint: disable=arguments-renamed
    if _DEBUG_PROVIDER: pulumi.log.info(f"CloudInitConfigProvider.check(oldProps={oldProps}, newProps={newProps})")
    parts = newProps.get('parts', None)
    gzip = newProps.get('gzip', None)
    if gzip is None:
      gzip = DEFAULT_GZIP
    base64_encode = newProps.get('base64_encode', None)
    if base64_encode is None:
      base64_encode = DEFAULT_BASE64_ENCODE
    boundary = newProps.get('boundary', None)
    if boundary is None:
      boundary = DEFAULT_BOUNDARY

    failures: List[CheckFailure] = []
    if not _is_unknown(parts):
      if parts is None or (isinstance(parts, list) and len(parts) == 0):
        failures.append(CheckFailure('parts', 'part must have a configuration value'))
      elif not isinstance(parts, list):
        failures.append(CheckFailure('parts', f'parts must be a list: {parts}'))
      else:
        for i, part in enumerate(parts):
          failures.extend(_check_part(i, part))
        parts = [ _default_part(x) for x in parts ]
    gzip_known = not _is_unknown(gzip)
    if gzip_known and not isinstance(gzip, bool):
      failures.append(CheckFailure('gzip', f'gzip must be a bool: {gzip}'))
      gzip_known = False
    base64_encode_known = not _is_unknown(base64_encode)
    if base64_encode_known and not isinstance(base64_encode, bool):
      failures.append(CheckFailure('base64_encode', f'base64_encode must be a bool: {base64_encode}'))
      base64_encode_known = False
    if not _is_unknown(boundary):
      if not isinstance(boundary, str) or boundary == '':
        failures.append(CheckFailure('boundary', f'boundary must be a nonempty string: {boundary}'))
      else:
        try:
          check_boundary(boundary)
        except BoundaryError as e:
          failures.append(CheckFailure('boundary', str(e)))
    if gzip_known and base64_encode_known:
      try:
        validate_config(CloudInitConfig([], gzip=cast(bool, gzip), base64_encode=cast(bool, base64_encode)))
      except CloudInitConfigError as e:
        failures.append(CheckFailure(e.attribute or 'base64_encode', str(e)))

    inputs = dict(parts=parts, gzip=gzip, base64_encode=base64_encode, boundary=boundary)

    if _DEBUG_PROVIDER: pulumi.log.info(f"CloudInitConfigProvider.check() ==> CheckResult(inputs={inputs}, failures={failures})")
    return CheckResult(inputs, failures)

  def create(self, props: JsonableDict) -> CreateResult:
    try:
      if _DEBUG_PROVIDER: pulumi.log.info(f"CloudInitConfigProvider.create(props={props})")
      outs = self._gen_outs(props)
      # the checksum of the rendered document is the natural unique ID
      rid = cast(str, outs['rendered_id'])
      if _DEBUG_PROVIDER: pulumi.log.info(f"CloudInitConfigProvider.create() ==> CreateResult(id={rid}, outs={outs})")
    except Exception as e:
      if _DEBUG_PROVIDER: pulumi.log.warn(f"CloudInitConfigProvider.create() ==> Exception: {repr(e)}")
      raise
    return CreateResult(rid, outs)

  def update(self, id: str, oldProps: JsonableDict, newProps: JsonableDict):  # pylint: disable=redefined-builtin
    if _DEBUG_PROVIDER: pulumi.log.info(f"CloudInitConfigProvider.update(id={id}, oldProps={oldProps}, newProps={newProps})")
    outs = self._gen_outs(newProps)
    if _DEBUG_PROVIDER: pulumi.log.info(f"CloudInitConfigProvider.update() ==> UpdateResult(outs={outs})")
    return UpdateResult(outs)

  def diff(self, id: str, oldProps: JsonableDict, newProps: JsonableDict) -> DiffResult:   # pylint: disable=redefined-builtin
    if _DEBUG_PROVIDER: pulumi.log.info(f"CloudInitConfigProvider.diff(id={id}, oldProps={oldProps}, newProps={newProps})")
    replaces: List[str] = []
    stables: List[str] = []
    for propname in _INPUT_PROPS:
      if oldProps.get(propname, None) != newProps.get(propname, None):
        replaces.append(propname)
    # Any input change means a different document; rendered must be replaced, never patched.
    changes = len(replaces) > 0
    if changes:
      replaces.extend(['rendered', 'rendered_id'])
    else:
      stables.extend(['rendered', 'rendered_id'])
    if _DEBUG_PROVIDER: pulumi.log.info(f"CloudInitConfigProvider.diff() ==> DiffResult(changes={changes}, replaces={replaces}, stables={stables})")
    return DiffResult(changes=changes, replaces=replaces, stables=stables)

CloudInitPartInput = Union[CloudInitPart, Input[JsonableDict]]

def _part_to_input(part: CloudInitPartInput) -> Input[JsonableDict]:
  if isinstance(part, CloudInitPart):
    return part.to_jsonable()
  return part

def _parts_to_input(parts: Input[Sequence[CloudInitPartInput]]) -> Input[List[Input[JsonableDict]]]:
  if isinstance(parts, Output):
    return parts.apply(lambda x: [ _part_to_input(p) for p in x ])
  return [ _part_to_input(p) for p in cast(Sequence[CloudInitPartInput], parts) ]

class CloudInitConfigResource(Resource):
  parts: Output[JsonableList]
  gzip: Output[bool]
  base64_encode: Output[bool]
  boundary: Output[str]
  rendered: Output[str]
  rendered_id: Output[str]

  def __init__(
        self,
        name: str,
        parts: Input[Sequence[CloudInitPartInput]],
        gzip: Input[Optional[bool]]=None,
        base64_encode: Input[Optional[bool]]=None,
        boundary: Input[Optional[str]]=None,
        opts: Optional[ResourceOptions]=None,
      ):
    assert isinstance(name, str)
    super().__init__(
        CloudInitConfigProvider(),
        name,
        # NOTE: Pulumi doesn't populate output properties unless they are also inputs...
        dict(
            parts=_parts_to_input(parts),
            gzip=gzip,
            base64_encode=base64_encode,
            boundary=boundary,
            rendered=None,
            rendered_id=None,
          ),
        opts=opts
      )

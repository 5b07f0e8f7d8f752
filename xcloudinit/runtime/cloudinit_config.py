#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Rendering of cloud-init documents from pulumi Inputs, without creating a resource.

Use this when the rendered document is only needed as an input to another
resource (e.g., the user_data of an EC2 instance); use
xcloudinit.runtime_support.CloudInitConfigResource when the rendered value
should be tracked in stack state on its own.
"""

from typing import Optional, List, Sequence, Union, cast

import pulumi
from pulumi import Output, Input

from project_init_tools import multiline_indent

from ..internal_types import JsonableDict
from ..model import CloudInitConfig, CloudInitPart, RenderedDocument
from ..render import render, render_text

CloudInitPartInput = Union[CloudInitPart, Input[JsonableDict]]

def _resolve_part(part: Union[CloudInitPart, JsonableDict]) -> CloudInitPart:
  if isinstance(part, CloudInitPart):
    return part
  return CloudInitPart.from_jsonable(part)

def _sync_config(
      parts: Sequence[Union[CloudInitPart, JsonableDict]],
      gzip: Optional[bool],
      base64_encode: Optional[bool],
      boundary: Optional[str]
    ) -> CloudInitConfig:
  return CloudInitConfig(
      [ _resolve_part(x) for x in parts ],
      gzip=gzip,
      base64_encode=base64_encode,
      boundary=boundary
    )

def _config_output(
      parts: Input[Sequence[CloudInitPartInput]],
      gzip: Input[Optional[bool]],
      base64_encode: Input[Optional[bool]],
      boundary: Input[Optional[str]]
    ) -> Output[CloudInitConfig]:
  result = Output.all(
      Output.from_input(parts),
      gzip,
      base64_encode,
      boundary
    ).apply(
      lambda args: _sync_config(
          cast(List[Union[CloudInitPart, JsonableDict]], args[0]),
          cast(Optional[bool], args[1]),
          cast(Optional[bool], args[2]),
          cast(Optional[str], args[3])
        )
    )
  return result

def _report(config: CloudInitConfig) -> None:
  text = render_text(config)
  pulumi.log.info(f"Rendered cloud-init config is:\n{multiline_indent(text, 4)}")

def render_cloud_init_config(
      parts: Input[Sequence[CloudInitPartInput]],
      gzip: Input[Optional[bool]]=None,
      base64_encode: Input[Optional[bool]]=None,
      boundary: Input[Optional[str]]=None,
      debug_log: bool=False,
    ) -> Output[RenderedDocument]:
  config = _config_output(parts, gzip, base64_encode, boundary)
  if debug_log:
    config.apply(_report)
  result: Output[RenderedDocument] = config.apply(render)
  return result

def render_cloud_init_config_text(
      parts: Input[Sequence[CloudInitPartInput]],
      gzip: Input[Optional[bool]]=None,
      base64_encode: Input[Optional[bool]]=None,
      boundary: Input[Optional[str]]=None,
      debug_log: bool=False,
    ) -> Output[str]:
  """Like render_cloud_init_config, but returns only the rendered string"""
  doc = render_cloud_init_config(
      parts,
      gzip=gzip,
      base64_encode=base64_encode,
      boundary=boundary,
      debug_log=debug_log
    )
  return doc.apply(lambda x: x.rendered)

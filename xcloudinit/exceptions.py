# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

from typing import Optional

class XCloudInitError(Exception):
  """Base class for all error exceptions defined by this package."""
  #pass

class CloudInitConfigError(XCloudInitError):
  """A cloud-init configuration combines options that cannot be rendered."""
  _attribute: Optional[str]

  def __init__(self, message: str, attribute: Optional[str]=None):
    super().__init__(message)
    self._attribute = attribute

  @property
  def attribute(self) -> Optional[str]:
    """The name of the offending configuration attribute, if known"""
    return self._attribute

class BoundaryError(CloudInitConfigError):
  def __init__(self, message: str):
    super().__init__(message, attribute='boundary')

class PartRenderError(XCloudInitError):
  """Writing one part of the multi-part document failed."""
  _part_index: int

  def __init__(self, part_index: int, cause: BaseException):
    super().__init__(f"error writing part block {part_index}: {cause}")
    self._part_index = part_index

  @property
  def part_index(self) -> int:
    return self._part_index

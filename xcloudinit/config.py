#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""xcloudinit configuration file

A configuration file is a JSON or YAML document describing one cloud-init
multi-part document. For example:

    gzip: false
    base64_encode: false
    part:
      - content_type: text/cloud-config
        content_file: cloud-config.yaml
      - content_type: text/x-shellscript
        filename: setup.sh
        content: |
          #!/bin/bash
          echo hello

A part's "content_file" is read as UTF-8 text, relative to the directory
containing the configuration file, and used as that part's content.
"""

from typing import Optional, List, cast

import os
import json
import yaml
try:
  from yaml import CLoader as Loader
except ImportError:
  from yaml import Loader  #type: ignore[misc]

from .internal_types import JsonableDict, JsonableList
from .exceptions import CloudInitConfigError
from .model import CloudInitConfig
from .constants import (
    XCLOUDINIT_CONFIG_ENV_VAR,
    XCLOUDINIT_CONFIG_DIRNAME,
    XCLOUDINIT_CONFIG_FILENAME_BASE,
  )

def locate_config_file(config_path: Optional[str]=None, starting_dir: Optional[str]=None, scan_parent_dirs: bool=True) -> str:
  if starting_dir is None:
    starting_dir = '.'
  starting_dir = os.path.abspath(os.path.expanduser(starting_dir))
  if config_path is None:
    config_path = os.environ.get(XCLOUDINIT_CONFIG_ENV_VAR, None)
    if config_path == '':
      config_path = None
  if config_path is None:
    config_path = starting_dir
  else:
    config_path = os.path.abspath(os.path.join(starting_dir, os.path.expanduser(config_path)))
  test_path = config_path
  if not os.path.exists(test_path):
    raise FileNotFoundError(f"xcloudinit: Config file not found: '{config_path}'")
  if os.path.isdir(test_path):
    tails: List[str] = []
    for ext in ('.json', '.yaml'):
      tails.append(XCLOUDINIT_CONFIG_FILENAME_BASE + ext)
    for ext in ('.json', '.yaml'):
      tails.append(os.path.join(XCLOUDINIT_CONFIG_DIRNAME, XCLOUDINIT_CONFIG_FILENAME_BASE + ext))
    while True:
      for tail in tails:
        p = os.path.join(test_path, tail)
        if os.path.isfile(p):
          return p
      old_dir = test_path
      test_path = os.path.dirname(test_path)
      if not scan_parent_dirs or old_dir == test_path:
        if scan_parent_dirs:
          raise FileNotFoundError(f"xcloudinit: Config file not found in dir or parent dirs: '{config_path}'")
        raise FileNotFoundError(f"xcloudinit: Config file not found in dir: '{config_path}'")
  if os.path.isfile(test_path):
    return test_path
  raise FileNotFoundError(f"xcloudinit: Config file path not directory or file: '{config_path}'")

class XCloudInitConfigFile:
  _config_file: str
  _config_data: JsonableDict

  def __init__(self, config_path: Optional[str]=None, starting_dir: Optional[str]=None, scan_parent_dirs: bool=True):
    self._config_file = locate_config_file(config_path=config_path, starting_dir=starting_dir, scan_parent_dirs=scan_parent_dirs)
    with open(self._config_file, encoding='utf-8') as f:
      config_text = f.read()
    if self._config_file.endswith('.yaml') or self._config_file.endswith('.yml'):
      config_data = yaml.load(config_text, Loader=Loader)
    else:
      config_data = json.loads(config_text)
    if not isinstance(config_data, dict):
      raise CloudInitConfigError(f"xcloudinit: Config file must contain a mapping: '{self._config_file}'")
    self._config_data = config_data

  @property
  def config_file(self) -> str:
    return self._config_file

  @property
  def config_data(self) -> JsonableDict:
    return self._config_data

  @property
  def config_dir(self) -> str:
    return os.path.dirname(self._config_file)

  def _resolve_part(self, part_data: JsonableDict) -> JsonableDict:
    if not isinstance(part_data, dict) or not 'content_file' in part_data:
      return part_data
    result = dict(part_data)
    content_file = result.pop('content_file')
    if not isinstance(content_file, str):
      raise CloudInitConfigError(f"content_file must be a string: {content_file!r}", attribute='content_file')
    if 'content' in result:
      raise CloudInitConfigError("A part cannot have both content and content_file", attribute='content_file')
    pathname = os.path.abspath(os.path.join(self.config_dir, os.path.expanduser(content_file)))
    with open(pathname, encoding='utf-8') as f:
      result['content'] = f.read()
    return result

  def create_config(
        self,
        gzip: Optional[bool]=None,
        base64_encode: Optional[bool]=None,
        boundary: Optional[str]=None,
      ) -> CloudInitConfig:
    """Builds a CloudInitConfig from the file; arguments that are not None override file values"""
    data = dict(self._config_data)
    raw_parts = data.pop('parts', data.pop('part', None))
    if isinstance(raw_parts, list):
      data['parts'] = [ self._resolve_part(x) for x in cast(JsonableList, raw_parts) ]
    elif not raw_parts is None:
      data['parts'] = raw_parts
    config = CloudInitConfig.from_jsonable(data)
    overrides = dict(gzip=gzip, base64_encode=base64_encode, boundary=boundary)
    overrides = dict((k, v) for k, v in overrides.items() if not v is None)
    if len(overrides) > 0:
      config = config.replace(**overrides)
    return config

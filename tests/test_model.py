import pytest

from xcloudinit import (
    CloudInitConfig,
    CloudInitPart,
    CloudInitConfigError,
    with_defaults,
    validate_config,
  )

def test_defaults_fill_unset_values():
  config = with_defaults(CloudInitConfig([ CloudInitPart('abc') ]))
  assert config.gzip is True
  assert config.base64_encode is True
  assert config.boundary == 'MIMEBOUNDARY'
  assert config.parts[0].content_type == 'text/plain'

def test_defaults_replace_empty_content_type():
  config = with_defaults(CloudInitConfig([ CloudInitPart('abc', content_type='') ]))
  assert config.parts[0].content_type == 'text/plain'

def test_defaults_never_overwrite_explicit_values():
  original = CloudInitConfig(
      [ CloudInitPart('abc', content_type='text/cloud-config') ],
      gzip=False,
      base64_encode=False,
      boundary='//',
    )
  config = with_defaults(original)
  assert config == original
  assert config.gzip is False
  assert config.base64_encode is False

def test_defaults_are_idempotent():
  config = CloudInitConfig([ CloudInitPart('abc'), CloudInitPart('', content_type='text/x-shellscript') ])
  once = with_defaults(config)
  assert with_defaults(once) == once

def test_defaults_do_not_mutate_input():
  parts = [ CloudInitPart('abc') ]
  config = CloudInitConfig(parts)
  with_defaults(config)
  assert config.gzip is None
  assert config.boundary is None
  assert config.parts[0].content_type is None
  assert parts[0].content_type is None

def test_gzip_without_base64_is_rejected():
  config = CloudInitConfig([ CloudInitPart('abc') ], gzip=True, base64_encode=False)
  with pytest.raises(CloudInitConfigError) as exc_info:
    validate_config(config)
  assert exc_info.value.attribute == 'base64_encode'
  assert 'Expected base64_encode to be set to true when gzip is true' in str(exc_info.value)

def test_unset_gzip_with_base64_disabled_is_rejected_after_defaulting():
  with pytest.raises(CloudInitConfigError):
    validate_config(CloudInitConfig([ CloudInitPart('abc') ], base64_encode=False))

@pytest.mark.parametrize('gzip,base64_encode', [
    (None, None),
    (True, True),
    (False, True),
    (False, False),
    (False, None),
  ])
def test_valid_combinations(gzip, base64_encode):
  validate_config(CloudInitConfig([ CloudInitPart('abc') ], gzip=gzip, base64_encode=base64_encode))

def test_validator_does_not_check_part_count():
  validate_config(CloudInitConfig([], gzip=False, base64_encode=False))

def test_from_jsonable_accepts_part_key():
  config = CloudInitConfig.from_jsonable(dict(
      gzip=False,
      part=[ dict(content='baz', content_type='text/x-shellscript', filename='a.sh') ],
    ))
  assert config.gzip is False
  assert config.base64_encode is None
  assert config.parts == (CloudInitPart('baz', content_type='text/x-shellscript', filename='a.sh'),)

def test_to_jsonable_round_trip(two_part_config):
  assert CloudInitConfig.from_jsonable(two_part_config.to_jsonable()) == two_part_config

def test_from_jsonable_rejects_unknown_keys():
  with pytest.raises(CloudInitConfigError) as exc_info:
    CloudInitConfig.from_jsonable(dict(parts=[ dict(content='a', mergetype='x') ]))
  assert exc_info.value.attribute == 'mergetype'

def test_from_jsonable_rejects_wrong_types():
  with pytest.raises(CloudInitConfigError) as exc_info:
    CloudInitConfig.from_jsonable(dict(parts=[ dict(content='a') ], gzip='yes'))
  assert exc_info.value.attribute == 'gzip'
  with pytest.raises(CloudInitConfigError):
    CloudInitConfig.from_jsonable(dict(parts=[ dict(content_type='text/plain') ]))
  with pytest.raises(CloudInitConfigError):
    CloudInitPart(None)  # type: ignore[arg-type]

def test_replace_returns_new_config(shell_config):
  replaced = shell_config.replace(boundary='XYZ')
  assert replaced.boundary == 'XYZ'
  assert shell_config.boundary is None
  assert replaced.parts == shell_config.parts

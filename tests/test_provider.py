import pulumi

from xcloudinit import CloudInitConfig, CloudInitPart, render
from xcloudinit.runtime_support import CloudInitConfigProvider

PARTS = [ dict(content='baz', content_type='text/x-shellscript') ]

def failure_props(result):
  return sorted(x.property for x in result.failures)

def test_check_fills_defaults():
  result = CloudInitConfigProvider().check({}, dict(parts=[ dict(content='abc', content_type='') ]))
  assert result.failures == []
  assert result.inputs == dict(
      parts=[ dict(content='abc', content_type='text/plain') ],
      gzip=True,
      base64_encode=True,
      boundary='MIMEBOUNDARY',
    )

def test_check_requires_parts():
  result = CloudInitConfigProvider().check({}, dict(gzip=False, base64_encode=False))
  assert failure_props(result) == [ 'parts' ]
  assert 'part must have a configuration value' in result.failures[0].reason
  result = CloudInitConfigProvider().check({}, dict(parts=[]))
  assert failure_props(result) == [ 'parts' ]

def test_check_accepts_empty_content():
  result = CloudInitConfigProvider().check({}, dict(parts=[ dict(content='') ]))
  assert result.failures == []

def test_check_rejects_gzip_without_base64():
  result = CloudInitConfigProvider().check({}, dict(parts=PARTS, gzip=True, base64_encode=False))
  assert failure_props(result) == [ 'base64_encode' ]
  assert 'Expected base64_encode to be set to true when gzip is true' in result.failures[0].reason

def test_check_rejects_unset_gzip_without_base64():
  result = CloudInitConfigProvider().check({}, dict(parts=PARTS, base64_encode=False))
  assert failure_props(result) == [ 'base64_encode' ]

def test_check_defers_unknown_values():
  unknown = pulumi.output.Unknown()
  result = CloudInitConfigProvider().check({}, dict(parts=unknown, gzip=unknown, base64_encode=False, boundary=unknown))
  assert result.failures == []
  result = CloudInitConfigProvider().check({}, dict(parts=[ dict(content=unknown) ]))
  assert result.failures == []

def test_check_reports_bad_types():
  result = CloudInitConfigProvider().check({}, dict(
      parts=[ 'not a dict', dict(content=3, filename=4, extra='x') ],
      gzip='yes',
      base64_encode=1,
      boundary='',
    ))
  assert failure_props(result) == [ 'base64_encode', 'boundary', 'gzip', 'parts', 'parts', 'parts', 'parts' ]

def test_check_rejects_illegal_boundary():
  result = CloudInitConfigProvider().check({}, dict(parts=PARTS, boundary='no"quotes'))
  assert failure_props(result) == [ 'boundary' ]

def test_create_renders_and_uses_checksum_as_id():
  provider = CloudInitConfigProvider()
  inputs = provider.check({}, dict(parts=PARTS, gzip=False, base64_encode=False)).inputs
  result = provider.create(inputs)
  expected = render(CloudInitConfig([ CloudInitPart('baz', content_type='text/x-shellscript') ], gzip=False, base64_encode=False))
  assert result.id == expected.id
  assert result.outs['rendered'] == expected.rendered
  assert result.outs['rendered_id'] == expected.id
  assert result.outs['parts'] == PARTS

def test_create_ignores_pulumi_internal_part_keys():
  provider = CloudInitConfigProvider()
  inputs = provider.check({}, dict(parts=PARTS)).inputs
  inputs['parts'] = [ dict(inputs['parts'][0], __defaults=[]) ]
  outs = provider.create(inputs).outs
  assert outs['rendered_id'] == provider.create(provider.check({}, dict(parts=PARTS)).inputs).outs['rendered_id']

def test_update_re_renders():
  provider = CloudInitConfigProvider()
  old = provider.create(provider.check({}, dict(parts=PARTS)).inputs).outs
  new_inputs = provider.check(old, dict(parts=[ dict(content='other') ])).inputs
  outs = provider.update('id', old, new_inputs).outs
  assert outs['rendered'] != old['rendered']

def test_diff_is_stable_for_identical_inputs():
  provider = CloudInitConfigProvider()
  inputs = provider.check({}, dict(parts=PARTS)).inputs
  outs = provider.create(inputs).outs
  result = provider.diff(outs['rendered_id'], outs, provider.check(outs, dict(parts=PARTS)).inputs)
  assert result.changes is False
  assert 'rendered' in result.stables

def test_diff_replaces_on_any_input_change():
  provider = CloudInitConfigProvider()
  outs = provider.create(provider.check({}, dict(parts=PARTS)).inputs).outs
  for change in (dict(boundary='OTHER'), dict(gzip=False), dict(parts=[ dict(content='changed') ])):
    new_inputs = provider.check(outs, dict(dict(parts=PARTS), **change)).inputs
    result = provider.diff(outs['rendered_id'], outs, new_inputs)
    assert result.changes is True
    assert 'rendered' in result.replaces
    assert list(change)[0] in result.replaces

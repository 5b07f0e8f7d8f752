import pytest

from xcloudinit import CloudInitConfig, CloudInitPart


@pytest.fixture
def shell_config() -> CloudInitConfig:
  return CloudInitConfig(
      [ CloudInitPart('baz', content_type='text/x-shellscript') ],
      gzip=False,
      base64_encode=False,
    )

@pytest.fixture
def two_part_config() -> CloudInitConfig:
  return CloudInitConfig(
      [
        CloudInitPart('foo1', content_type='text/x-shellscript', filename='foofile1.txt', merge_type='list()+dict()+str()'),
        CloudInitPart('bar1', content_type='text/x-shellscript', filename='barfile1.txt', merge_type='list()+dict()+str()'),
      ],
    )

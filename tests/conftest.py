from __future__ import annotations

from unittest.mock import patch

import pytest

from strata_oss.common.config import get_settings
from strata_oss.infra.storage.client import Credentials, StorageConfig
from strata_oss.infra.storage.oss_storage import OSSStorage
from tests.infra.fake_s3 import BUCKET, FakeS3Client


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def fake_s3():
    client = FakeS3Client()
    client.add_bucket(BUCKET)
    return client


@pytest.fixture()
def credentials():
    return Credentials(access_key_id="test-key", access_key_secret="test-secret")


@pytest.fixture()
def storage_config():
    return StorageConfig(bucket=BUCKET, region="oss-cn-hangzhou", prefix="mongo")


@pytest.fixture()
def storage(fake_s3, storage_config, credentials):
    with patch.object(OSSStorage, "_build_client", return_value=fake_s3):
        yield OSSStorage(config=storage_config, credentials=credentials)

"""S3 fixtures for tests, backed by moto."""
import boto3
import pytest
from moto import mock_aws

from storage_api.adapter import StorageAdapter
from storage_api.settings import MIN_UPLOAD_PART_SIZE, Settings
from tests.consts import TEST_BUCKET_NAME, TEST_REGION


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so nothing can reach a real AWS account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("S3_BUCKET_NAME", raising=False)


@pytest.fixture
def mocked_aws(aws_credentials):
    """Mock all AWS calls and create the fixed test bucket."""
    with mock_aws():
        s3_client = boto3.client("s3", region_name=TEST_REGION)
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)
        yield


@pytest.fixture
def s3_client(mocked_aws):
    return boto3.client("s3", region_name=TEST_REGION)


@pytest.fixture
def prefix_settings() -> Settings:
    return Settings(
        s3_bucket_name=TEST_BUCKET_NAME,
        aws_region=TEST_REGION,
        upload_part_size=MIN_UPLOAD_PART_SIZE,
        _env_file=None,
    )


@pytest.fixture
def bucket_settings() -> Settings:
    return Settings(
        s3_bucket_name=None,
        aws_region=TEST_REGION,
        upload_part_size=MIN_UPLOAD_PART_SIZE,
        _env_file=None,
    )


@pytest.fixture
def prefix_adapter(mocked_aws, prefix_settings) -> StorageAdapter:
    """Adapter storing containers as folders inside the test bucket."""
    return StorageAdapter(prefix_settings)


@pytest.fixture
def bucket_adapter(mocked_aws, bucket_settings) -> StorageAdapter:
    """Adapter storing each container in its own bucket."""
    return StorageAdapter(bucket_settings)


@pytest.fixture(params=["prefix", "bucket"])
def adapter(request, mocked_aws, prefix_settings, bucket_settings) -> StorageAdapter:
    """The same test, run once per storage mode."""
    if request.param == "prefix":
        return StorageAdapter(prefix_settings)
    return StorageAdapter(bucket_settings)

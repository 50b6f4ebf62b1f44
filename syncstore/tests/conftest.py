import httpx
import pytest

from s3_fakes import BUCKET, FakeS3Client, presigned_handler
from syncstore.storage import ObjectStoreTransport, S3FileApiDriver


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def http_client(s3_client) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(presigned_handler(s3_client)))


@pytest.fixture
def driver(s3_client, http_client) -> S3FileApiDriver:
    return S3FileApiDriver(ObjectStoreTransport(s3_client, BUCKET), http_client=http_client)

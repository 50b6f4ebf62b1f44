import httpx

from s3_fakes import BUCKET, FakeS3Client, client_error
from syncstore.config import Config
from syncstore.target import MinioSyncTarget, check_config


def _config(**overrides) -> Config:
    values = {"endpoint": "minio.local", "bucket": BUCKET, "port": 9000, "use_ssl": False}
    values.update(overrides)
    return Config(**values)


def test_check_config_ok(monkeypatch):
    client = FakeS3Client()
    monkeypatch.setattr(Config, "create_s3_client", lambda self: client)

    result = check_config(_config())

    assert result.ok is True
    assert result.error_message == ""
    assert ("head_bucket", BUCKET) in client.calls


def test_check_config_missing_bucket(monkeypatch):
    monkeypatch.setattr(Config, "create_s3_client", lambda self: FakeS3Client())

    result = check_config(_config(bucket="other-bucket"))

    assert result.ok is False
    assert result.error_message == "MinIO bucket not found: other-bucket"


def test_check_config_reports_provider_code(monkeypatch):
    client = FakeS3Client()

    def head_bucket(Bucket):
        raise client_error("InvalidAccessKeyId", "HeadBucket", "The key is wrong")

    client.head_bucket = head_bucket
    monkeypatch.setattr(Config, "create_s3_client", lambda self: client)

    result = check_config(_config())

    assert result.ok is False
    assert result.error_message.endswith("(Code InvalidAccessKeyId)")


def test_check_config_never_raises_on_invalid_options():
    result = check_config(_config(endpoint=""))
    assert result.ok is False
    assert "SYNC_ENDPOINT" in result.error_message


def test_check_config_disables_repeats_and_closes_driver(monkeypatch):
    seen = {}
    original = Config.create_file_api

    def create_file_api(self, **kwargs):
        seen.update(kwargs)
        driver = original(self, **kwargs)
        driver_close = driver.close

        def close():
            seen["closed"] = True
            driver_close()

        driver.close = close
        return driver

    monkeypatch.setattr(Config, "create_s3_client", lambda self: FakeS3Client())
    monkeypatch.setattr(Config, "create_file_api", create_file_api)

    check_config(_config())

    assert seen["repeat_count"] == 0
    assert seen["closed"] is True


def test_check_config_opens_no_http_client(monkeypatch):
    created = []
    monkeypatch.setattr(Config, "create_s3_client", lambda self: FakeS3Client())
    monkeypatch.setattr(httpx, "Client", lambda *args, **kwargs: created.append(kwargs))

    for _ in range(3):
        assert check_config(_config()).ok is True

    assert created == []


def test_sync_target_close_releases_driver(monkeypatch):
    monkeypatch.setattr(Config, "create_s3_client", lambda self: FakeS3Client())
    target = MinioSyncTarget(_config(log_format="text"))
    first = target.file_api()

    target.close()

    assert target.file_api() is not first


def test_sync_target_metadata_and_cached_file_api(monkeypatch):
    monkeypatch.setattr(Config, "create_s3_client", lambda self: FakeS3Client())
    target = MinioSyncTarget(_config(log_format="text"))

    assert MinioSyncTarget.id() == 11
    assert MinioSyncTarget.target_name() == "minio"
    assert MinioSyncTarget.label() == "MinIO"
    assert MinioSyncTarget.supports_config_check() is True
    assert target.is_authenticated() is True
    assert target.file_api() is target.file_api()
    assert target.file_api().logger is target.logger

import os
from dataclasses import dataclass
from pathlib import Path


def _load_dotenv_if_available() -> None:
    """Best-effort .env loading without hard dependency."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    # Prefer loading the syncstore/.env next to this file (works no matter the cwd)
    try:
        env_path = Path(__file__).resolve().parent / ".env"
        load_dotenv(dotenv_path=env_path, override=False)
    except Exception:
        pass
    # Also try default resolution (cwd-based) as a fallback
    load_dotenv(override=False)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    # Connection
    endpoint: str
    bucket: str
    access_key: str | None = None
    secret_key: str | None = None
    port: int | None = None
    use_ssl: bool = True
    region: str = "us-east-1"

    # Driver behaviour
    presign_ttl_seconds: int = 3600
    request_repeat_count: int = 3
    http_timeout_seconds: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file_path: str | None = None

    def validate(self) -> None:
        if not self.endpoint:
            raise ValueError("SYNC_ENDPOINT is required")

        if "://" in self.endpoint:
            raise ValueError("SYNC_ENDPOINT must be a host name without scheme (use SYNC_USE_SSL)")

        if not self.bucket:
            raise ValueError("SYNC_BUCKET is required")

        if self.port is not None and (self.port < 1 or self.port > 65535):
            raise ValueError("SYNC_PORT must be between 1 and 65535")

        # S3 caps presigned URLs at seven days
        if self.presign_ttl_seconds < 1 or self.presign_ttl_seconds > 604800:
            raise ValueError("SYNC_PRESIGN_TTL_SECONDS must be between 1 and 604800")

        if self.request_repeat_count < 0 or self.request_repeat_count > 10:
            raise ValueError("SYNC_REQUEST_REPEAT_COUNT must be between 0 and 10")

        if self.http_timeout_seconds <= 0:
            raise ValueError("SYNC_HTTP_TIMEOUT_SECONDS must be > 0")

        if self.log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("LOG_LEVEL must be DEBUG, INFO, WARNING, ERROR, or CRITICAL")

        if self.log_format not in {"json", "text"}:
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")

        if self.log_file_path:
            log_dir = Path(self.log_file_path).parent
            if not log_dir.exists():
                raise ValueError(f"LOG_FILE_PATH directory does not exist: {log_dir}")

    def endpoint_url(self) -> str:
        scheme = "https" if self.use_ssl else "http"
        if self.port:
            return f"{scheme}://{self.endpoint}:{self.port}"
        return f"{scheme}://{self.endpoint}"

    def create_s3_client(self):
        """
        Create the boto3 S3 client for this connection.

        Path-style addressing is forced so MinIO deployments without
        wildcard DNS keep working.
        """
        import boto3
        from botocore.config import Config as BotoConfig

        return boto3.client(
            "s3",
            endpoint_url=self.endpoint_url(),
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            region_name=self.region,
            use_ssl=self.use_ssl,
            config=BotoConfig(s3={"addressing_style": "path"}),
        )

    def create_file_api(self, delta_algorithm=None, logger=None, repeat_count=None):
        """
        Create the file driver based on configuration.

        Args:
            delta_algorithm: Optional incremental-diff callable used by ``delta()``
            logger: Logger handed to the driver
            repeat_count: Overrides SYNC_REQUEST_REPEAT_COUNT

        Returns:
            S3FileApiDriver bound to ``self.bucket``
        """
        from syncstore.storage import ObjectStoreTransport, S3FileApiDriver

        transport = ObjectStoreTransport(self.create_s3_client(), self.bucket)
        return S3FileApiDriver(
            transport,
            http_timeout_seconds=self.http_timeout_seconds,
            presign_ttl_seconds=self.presign_ttl_seconds,
            repeat_count=self.request_repeat_count if repeat_count is None else repeat_count,
            delta_algorithm=delta_algorithm,
            logger=logger,
        )


def load_config() -> Config:
    _load_dotenv_if_available()

    port = os.environ.get("SYNC_PORT", "").strip()

    config = Config(
        endpoint=os.environ.get("SYNC_ENDPOINT", "").strip(),
        bucket=os.environ.get("SYNC_BUCKET", "").strip(),
        access_key=os.environ.get("SYNC_ACCESS_KEY"),
        secret_key=os.environ.get("SYNC_SECRET_KEY"),
        port=int(port) if port else None,
        use_ssl=_env_bool("SYNC_USE_SSL", "true"),
        region=os.environ.get("SYNC_REGION", "us-east-1"),
        presign_ttl_seconds=int(os.environ.get("SYNC_PRESIGN_TTL_SECONDS", "3600")),
        request_repeat_count=int(os.environ.get("SYNC_REQUEST_REPEAT_COUNT", "3")),
        http_timeout_seconds=float(os.environ.get("SYNC_HTTP_TIMEOUT_SECONDS", "30")),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_format=os.environ.get("LOG_FORMAT", "json"),
        log_file_path=os.environ.get("LOG_FILE_PATH") or None,
    )

    config.validate()
    return config

"""MinIO / S3-compatible sync target."""

from __future__ import annotations

from dataclasses import dataclass

from syncstore.config import Config
from syncstore.core.errors import error_code
from syncstore.core.logging import setup_logger
from syncstore.storage import S3FileApiDriver


@dataclass
class ConfigCheckResult:
    ok: bool = False
    error_message: str = ""


class MinioSyncTarget:
    """Builds and caches the file driver for one configured bucket."""

    def __init__(self, config: Config, delta_algorithm=None):
        self.config = config
        self.delta_algorithm = delta_algorithm
        self.logger = setup_logger("syncstore", config)
        self._file_api: S3FileApiDriver | None = None

    @staticmethod
    def id() -> int:
        return 11

    @staticmethod
    def target_name() -> str:
        return "minio"

    @staticmethod
    def label() -> str:
        return "MinIO"

    @staticmethod
    def description() -> str:
        return "A service offered by Minio that provides object storage through a web service interface."

    @staticmethod
    def supports_config_check() -> bool:
        return True

    def is_authenticated(self) -> bool:
        # Static credentials: nothing to refresh
        return True

    def file_api(self) -> S3FileApiDriver:
        if self._file_api is None:
            self._file_api = self.config.create_file_api(
                delta_algorithm=self.delta_algorithm,
                logger=self.logger,
            )
        return self._file_api

    def close(self) -> None:
        if self._file_api is not None:
            self._file_api.close()
            self._file_api = None

    @staticmethod
    def check_config(options: Config) -> ConfigCheckResult:
        return check_config(options)


def check_config(options: Config) -> ConfigCheckResult:
    """
    Probe the configured bucket without raising.

    Used by settings screens to test connection parameters before they are
    saved. Every failure is reported through ``error_message``, suffixed with
    the provider error code when there is one.
    """
    output = ConfigCheckResult()
    try:
        options.validate()
        with options.create_file_api(repeat_count=0) as file_api:
            if not file_api.transport.bucket_exists(options.bucket):
                raise ValueError(f"MinIO bucket not found: {options.bucket}")
        output.ok = True
    except Exception as exc:  # noqa: BLE001 - reported to the caller, never raised
        output.error_message = str(exc)
        code = error_code(exc)
        if code:
            output.error_message += f" (Code {code})"
    return output

"""File driver for S3-compatible object stores (MinIO, AWS S3, R2)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, List, Optional

import httpx

from syncstore.core.errors import (
    BatchDeleteError,
    ErrorKind,
    FetchError,
    FetchResponseError,
    NotSupportedError,
    PermissionDeniedError,
    RawResponseError,
    classify_body,
    classify_error,
    parse_error_body,
)
from syncstore.storage.adapter import DeltaAlgorithm, FileApiDriver
from syncstore.storage.paths import make_key, make_prefix
from syncstore.storage.stats import FileStat, ListResult, metadata_to_stat, metadata_to_stats
from syncstore.storage.transport import ObjectStoreTransport

# Provider hard limit for DeleteObjects
S3_MAX_DELETES = 1000


def chunk_delete_keys(paths: List[str], size: int = S3_MAX_DELETES) -> Iterator[List[dict]]:
    """Yield ``{"Key": path}`` records in input order, ``size`` at a time."""
    records = [{"Key": path} for path in paths]
    while records:
        chunk = records[:size]
        del records[:size]
        yield chunk


class S3FileApiDriver(FileApiDriver):
    """File driver backed by an S3-compatible bucket."""

    def __init__(
        self,
        transport: ObjectStoreTransport,
        http_client: Optional[httpx.Client] = None,
        http_timeout_seconds: float = 30.0,
        presign_ttl_seconds: int = 3600,
        repeat_count: int = 3,
        delta_algorithm: Optional[DeltaAlgorithm] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the driver.

        Args:
            transport: Client handle plus bucket name
            http_client: Client used to fetch presigned URLs. When omitted the
                driver creates one on first use and closes it in ``close()``
            http_timeout_seconds: Timeout for the client the driver creates
            presign_ttl_seconds: Lifetime of presigned GET URLs
            repeat_count: Retry hint handed to the caller
            delta_algorithm: Incremental-diff routine used by ``delta()``
            logger: Defaults to this module's logger
        """
        self.transport = transport
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self.http_timeout_seconds = http_timeout_seconds
        self.presign_ttl_seconds = presign_ttl_seconds
        self.repeat_count = repeat_count
        self.delta_algorithm = delta_algorithm
        self.logger = logger or logging.getLogger(__name__)

    @property
    def bucket(self) -> str:
        return self.transport.bucket

    @property
    def http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=self.http_timeout_seconds)
        return self._http_client

    def close(self) -> None:
        """Release the HTTP client if this driver created it."""
        if self._owns_http_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def __enter__(self) -> "S3FileApiDriver":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _extra(self, key: str, operation: str) -> dict:
        return {"bucket": self.bucket, "key": key, "operation": operation}

    def request_repeat_count(self) -> int:
        return self.repeat_count

    def list(self, path: str) -> ListResult:
        prefix = make_prefix(path)
        keys = self.transport.list_keys(prefix)
        self.logger.debug(f"Listed {len(keys)} object(s)", extra=self._extra(prefix, "list"))
        return ListResult(items=metadata_to_stats(keys), has_more=False, context={})

    def stat(self, path: str) -> Optional[FileStat]:
        key = make_key(path)
        try:
            metadata = self.transport.stat_object(key)
        except Exception as exc:
            if classify_error(exc).is_not_found:
                return None
            raise
        return metadata_to_stat(metadata, path)

    def get(self, path: str, options: Optional[dict] = None) -> str | Path | None:
        """
        Read an object through a presigned URL.

        The URL is fetched with our own HTTP client rather than through
        ``get_object`` so that blob downloads stream straight to disk and
        errors come back as the provider's raw XML payload.

        Options:
            target: ``"file"`` streams the body to ``path`` and returns that
                path. The file only appears once the download completed.
            response_format: Only ``"text"`` is supported for in-memory
                reads. Anything else raises ``ValueError`` before a request
                is made.
        """
        key = make_key(path)
        options = options or {}
        response_format = options.get("response_format", "text")

        target = options.get("target")
        if target == "file" and not options.get("path"):
            raise ValueError("options['path'] is required when target is 'file'")
        if target != "file" and response_format != "text":
            raise ValueError(f"Unsupported response_format: {response_format}")

        try:
            url = self.transport.presigned_url(key, self.presign_ttl_seconds)
            if target == "file":
                return self._fetch_blob(url, Path(options["path"]))
            return self._fetch_text(url)
        except httpx.TransportError as exc:
            raise FetchError(str(exc) or type(exc).__name__) from exc
        except FetchResponseError as exc:
            classified = classify_body(parse_error_body(exc.output))
            if classified.kind is ErrorKind.AUTHORIZATION_MALFORMED:
                raise RawResponseError(exc.output) from exc
            if classified.kind is ErrorKind.NOT_FOUND:
                self.logger.debug("Object not found", extra=self._extra(key, "get"))
                return None
            if classified.kind is ErrorKind.ACCESS_DENIED:
                raise PermissionDeniedError() from exc
            raise

    def _fetch_text(self, url: str) -> str:
        response = self.http_client.get(url)
        output = response.text
        if not response.is_success:
            raise FetchResponseError(response.status_code, response.reason_phrase, output)
        return output

    def _fetch_blob(self, url: str, destination: Path) -> Path:
        with self.http_client.stream("GET", url) as response:
            if not response.is_success:
                response.read()
                raise FetchResponseError(response.status_code, response.reason_phrase, response.text)

            destination.parent.mkdir(parents=True, exist_ok=True)
            partial = destination.with_name(destination.name + ".part")
            try:
                with open(partial, "wb") as handle:
                    for chunk in response.iter_bytes():
                        handle.write(chunk)
                partial.replace(destination)
            except BaseException:
                partial.unlink(missing_ok=True)
                raise

        return destination

    def mkdir(self, path: str = "") -> bool:
        # Key based storage: directories exist implicitly
        return True

    def put(self, path: str, content: str | bytes | None, options: Optional[dict] = None) -> None:
        key = make_key(path)
        options = options or {}

        # Some clients cannot send str bodies
        if isinstance(content, str):
            content = content.encode("utf-8")

        try:
            if options.get("source") == "file":
                self._upload_file_from(options.get("path"), key)
                return
            self.transport.put_object(key, content if content is not None else b"")
        except Exception as exc:
            if classify_error(exc).is_access_denied:
                raise PermissionDeniedError() from exc
            raise

    def _upload_file_from(self, local_path: str | None, key: str) -> None:
        if not local_path or not Path(local_path).exists():
            raise FileNotFoundError(f"upload_file_from: file does not exist: {local_path}")
        body = Path(local_path).read_bytes()
        self.transport.put_object(key, body)

    def delete(self, path: str) -> None:
        key = make_key(path)
        try:
            self.transport.remove_object(key)
        except Exception as exc:
            if classify_error(exc).is_not_found:
                self.logger.debug("Delete of missing object ignored", extra=self._extra(key, "delete"))
                return
            raise

    def batch_deletes(self, paths: List[str]) -> None:
        for chunk in chunk_delete_keys(paths):
            self.logger.info(
                f"Deleting {len(chunk)} object(s)",
                extra=self._extra(chunk[0]["Key"], "batch_deletes"),
            )
            try:
                response = self.transport.remove_objects(chunk)
            except Exception as exc:
                if classify_error(exc).is_not_found:
                    continue
                raise

            failures = [
                error
                for error in (response or {}).get("Errors", []) or []
                if not classify_error(error).is_not_found
            ]
            if failures:
                raise BatchDeleteError(failures)

    def move(self, old_path: str, new_path: str) -> None:
        old_key = make_key(old_path)
        try:
            self.transport.copy_object(old_key, make_key(new_path))
        except Exception as exc:
            if classify_error(exc).is_not_found:
                self.logger.debug("Move of missing object ignored", extra=self._extra(old_key, "move"))
                return
            raise

        # Not transactional: a failed cleanup leaves both copies behind
        try:
            self.delete(old_path)
        except Exception as exc:  # noqa: BLE001 - best-effort cleanup
            self.logger.warning(
                f"Copied but failed to delete source: {exc}",
                extra=self._extra(old_key, "move"),
            )

    def delta(self, path: str, options: Optional[dict] = None) -> Any:
        if self.delta_algorithm is None:
            raise NotSupportedError("delta: no delta algorithm configured")

        def get_dir_stats(dir_path: str) -> List[FileStat]:
            return self.list(dir_path).items

        return self.delta_algorithm(path, get_dir_stats, options)

    def set_timestamp(self, *args, **kwargs) -> None:
        raise NotSupportedError("Not implemented")

    def format(self) -> None:
        raise NotSupportedError("Not supported")

    def clear_root(self) -> None:
        keys = self.transport.list_keys("")
        self.logger.info(f"Clearing {len(keys)} object(s) from bucket root", extra=self._extra("", "clear_root"))
        self.batch_deletes(keys)

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from lxml import etree

PERMISSION_DENIED_MESSAGE = "Do not have proper permissions to Bucket"
REJECTED_BY_TARGET = "rejectedByTarget"

_XML_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


class SyncStoreError(Exception):
    error_type = "UNKNOWN"

    def __init__(self, message: str = "", code: str | None = None):
        super().__init__(message)
        self.code = code


class PermissionDeniedError(SyncStoreError):
    error_type = "PERMISSION_DENIED"

    def __init__(self, message: str = PERMISSION_DENIED_MESSAGE):
        super().__init__(message, code=REJECTED_BY_TARGET)


class FetchError(SyncStoreError):
    error_type = "FETCH"


class FetchResponseError(SyncStoreError):
    """Non-2xx answer to a presigned URL fetch. ``output`` holds the raw body."""

    error_type = "FETCH_RESPONSE"

    def __init__(self, status: int, reason: str, output: str):
        super().__init__(f"{status} {reason}".strip())
        self.status = status
        self.output = output


class RawResponseError(SyncStoreError):
    """Provider body re-raised verbatim for the caller to surface."""

    error_type = "RAW_RESPONSE"

    def __init__(self, output: str):
        super().__init__(output)
        self.output = output


class BatchDeleteError(SyncStoreError):
    error_type = "BATCH_DELETE"

    def __init__(self, errors: list[dict]):
        keys = ", ".join(str(item.get("Key")) for item in errors[:5])
        more = f" (+{len(errors) - 5} more)" if len(errors) > 5 else ""
        super().__init__(f"Failed to delete {len(errors)} object(s): {keys}{more}")
        self.errors = errors
        self.Code = errors[0].get("Code") if errors else None


class NotSupportedError(SyncStoreError):
    error_type = "NOT_SUPPORTED"


class ErrorKind(enum.Enum):
    NOT_FOUND = "NotFound"
    ACCESS_DENIED = "AccessDenied"
    AUTHORIZATION_MALFORMED = "AuthorizationMalformed"
    OTHER = "Other"


@dataclass(frozen=True)
class ClassifiedError:
    kind: ErrorKind
    raw: Any = None

    @property
    def is_not_found(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND

    @property
    def is_access_denied(self) -> bool:
        return self.kind is ErrorKind.ACCESS_DENIED


# Checked in order; substring match like the provider SDKs report them
# ("NoSuchKey", "NotFound", bare "404" from HEAD requests).
_ERROR_MARKERS: tuple[tuple[ErrorKind, tuple[str, ...]], ...] = (
    (ErrorKind.AUTHORIZATION_MALFORMED, ("AuthorizationHeaderMalformed",)),
    (ErrorKind.ACCESS_DENIED, ("AccessDenied",)),
    (ErrorKind.NOT_FOUND, ("NoSuchKey", "NotFound", "404")),
)


def _field(raw: Any, name: str) -> Any:
    if isinstance(raw, dict):
        return raw.get(name)
    return getattr(raw, name, None)


def error_code(raw: Any) -> str | None:
    """
    Extract the provider error code from a failure of unknown shape.

    Looks at, in order: a ``name`` field, a ``code`` field, a ``Code`` field,
    and the botocore ``response["Error"]["Code"]`` field. Returns None when
    none of them carries a non-empty value.
    """
    if raw is None:
        return None

    for name in ("name", "code", "Code"):
        value = _field(raw, name)
        if value:
            return str(value)

    response = _field(raw, "response")
    if isinstance(response, dict):
        value = (response.get("Error") or {}).get("Code")
        if value:
            return str(value)

    return None


def parse_error_body(body: str | bytes | None) -> dict | None:
    """
    Parse an S3 XML error payload into ``{"Error": {"Code": ..., ...}}``.

    Returns None for empty bodies, malformed XML, or documents that are not
    an ``<Error>`` element.
    """
    if not body:
        return None
    if isinstance(body, str):
        # lxml rejects str input that carries an encoding declaration
        body = body.encode("utf-8")
    try:
        root = etree.fromstring(body, _XML_PARSER)
    except etree.XMLSyntaxError:
        return None

    if etree.QName(root).localname != "Error":
        return None

    fields = {
        etree.QName(child).localname: (child.text or "")
        for child in root
        if isinstance(child.tag, str)
    }
    return {"Error": fields}


def _kind_for_code(code: str) -> ErrorKind:
    for kind, markers in _ERROR_MARKERS:
        if any(marker in code for marker in markers):
            return kind
    return ErrorKind.OTHER


def classify_error(raw: Any, body: dict | None = None) -> ClassifiedError:
    """
    Map a failure of any shape to one of the known provider conditions.

    ``body`` is an already parsed error payload (see ``parse_error_body``).
    When given, its ``Error.Code`` is used if the raw failure carries no code
    of its own. Never raises.
    """
    try:
        code = error_code(raw)
        if code is None and body:
            code = error_code(body.get("Error"))
        if code is None:
            return ClassifiedError(ErrorKind.OTHER, raw)
        return ClassifiedError(_kind_for_code(code), raw)
    except Exception:  # noqa: BLE001 - classification must never raise
        return ClassifiedError(ErrorKind.OTHER, raw)


def classify_body(body: dict | None) -> ClassifiedError:
    """Classify a parsed XML payload on its own ``Error.Code``."""
    if not body:
        return ClassifiedError(ErrorKind.OTHER, body)
    return classify_error(body.get("Error"))

from types import SimpleNamespace

from botocore.exceptions import ClientError

from syncstore.core.errors import (
    BatchDeleteError,
    ErrorKind,
    FetchResponseError,
    PermissionDeniedError,
    classify_body,
    classify_error,
    error_code,
    parse_error_body,
)


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "HeadObject")


def test_classify_botocore_errors():
    assert classify_error(_client_error("404")).kind is ErrorKind.NOT_FOUND
    assert classify_error(_client_error("NoSuchKey")).kind is ErrorKind.NOT_FOUND
    assert classify_error(_client_error("AccessDenied")).kind is ErrorKind.ACCESS_DENIED
    assert (
        classify_error(_client_error("AuthorizationHeaderMalformed")).kind
        is ErrorKind.AUTHORIZATION_MALFORMED
    )
    assert classify_error(_client_error("SlowDown")).kind is ErrorKind.OTHER


def test_classify_checks_name_then_code_then_Code():
    assert classify_error(SimpleNamespace(name="NotFound")).kind is ErrorKind.NOT_FOUND
    assert classify_error({"code": "AccessDenied"}).kind is ErrorKind.ACCESS_DENIED
    assert classify_error({"Code": "NoSuchKey"}).kind is ErrorKind.NOT_FOUND
    # name wins over code
    raw = SimpleNamespace(name="AccessDenied", code="NoSuchKey")
    assert classify_error(raw).kind is ErrorKind.ACCESS_DENIED


def test_classify_uses_body_when_raw_has_no_code():
    body = {"Error": {"Code": "NoSuchKey"}}
    assert classify_error(RuntimeError("boom"), body).kind is ErrorKind.NOT_FOUND


def test_classify_never_raises_on_odd_shapes():
    class Exploding:
        @property
        def name(self):
            raise RuntimeError("no")

    for raw in (None, "text", 42, [], {}, RuntimeError("x"), Exploding()):
        result = classify_error(raw)
        assert result.kind is ErrorKind.OTHER
        assert result.raw is raw


def test_error_code_missing():
    assert error_code(None) is None
    assert error_code(ValueError("x")) is None
    assert error_code(_client_error("SlowDown")) == "SlowDown"


def test_parse_error_body():
    body = parse_error_body(
        "<?xml version='1.0' encoding='UTF-8'?>"
        "<Error><Code>AccessDenied</Code><Message>Access Denied</Message></Error>"
    )
    assert body == {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}
    assert classify_body(body).kind is ErrorKind.ACCESS_DENIED


def test_parse_error_body_rejects_non_error_documents():
    assert parse_error_body("") is None
    assert parse_error_body("not xml at all") is None
    assert parse_error_body("<ListBucketResult></ListBucketResult>") is None
    assert classify_body(None).kind is ErrorKind.OTHER


def test_permission_denied_error_marker():
    error = PermissionDeniedError()
    assert error.code == "rejectedByTarget"
    assert str(error) == "Do not have proper permissions to Bucket"
    assert error.error_type == "PERMISSION_DENIED"


def test_batch_delete_error_message():
    error = BatchDeleteError([{"Key": "a", "Code": "InternalError"}])
    assert "a" in str(error)
    assert error.Code == "InternalError"
    assert classify_error(error).kind is ErrorKind.OTHER


def test_parse_error_body_strips_s3_namespace():
    body = parse_error_body(
        b'<?xml version="1.0" encoding="UTF-8"?>\n'
        b'<Error xmlns="http://s3.amazonaws.com/doc/2006-03-01/">'
        b"<Code>NoSuchKey</Code><!-- trace --><Key>notes/a.md</Key></Error>"
    )
    assert body == {"Error": {"Code": "NoSuchKey", "Key": "notes/a.md"}}
    assert classify_body(body).is_not_found


def test_parse_error_body_not_found_code():
    body = parse_error_body("<Error><Code>NotFound</Code></Error>")
    assert classify_body(body).kind is ErrorKind.NOT_FOUND


def test_fetch_response_error_carries_no_provider_code():
    error = FetchResponseError(404, "Not Found", "")
    assert error.status == 404
    assert error_code(error) is None
    assert classify_error(error).kind is ErrorKind.OTHER

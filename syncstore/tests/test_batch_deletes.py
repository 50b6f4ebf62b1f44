import math

import pytest

from s3_fakes import client_error
from syncstore.core.errors import BatchDeleteError
from syncstore.storage.s3_driver import S3_MAX_DELETES, chunk_delete_keys


def test_chunk_delete_keys_wraps_and_splits_in_order():
    chunks = list(chunk_delete_keys(["a", "b", "c"], size=2))
    assert chunks == [[{"Key": "a"}, {"Key": "b"}], [{"Key": "c"}]]
    assert list(chunk_delete_keys([])) == []


def test_batch_deletes_2500_keys_uses_three_ordered_chunks(driver, s3_client):
    paths = [f"items/{index:05d}.md" for index in range(2500)]
    for path in paths:
        s3_client.add(path)

    driver.batch_deletes(paths)

    assert [len(batch) for batch in s3_client.delete_batches] == [1000, 1000, 500]
    flattened = [key for batch in s3_client.delete_batches for key in batch]
    assert flattened == paths
    assert s3_client.objects == {}


def test_batch_deletes_tolerates_missing_keys(driver, s3_client):
    s3_client.report_missing_in_batches = True
    s3_client.add("present.md")

    driver.batch_deletes(["present.md", "gone-1.md", "gone-2.md"])

    assert s3_client.objects == {}


def test_batch_deletes_keeps_duplicates(driver, s3_client):
    s3_client.add("a.md")
    driver.batch_deletes(["a.md", "a.md"])
    assert s3_client.delete_batches == [["a.md", "a.md"]]


def test_batch_deletes_empty_input_makes_no_calls(driver, s3_client):
    driver.batch_deletes([])
    assert s3_client.delete_batches == []


def test_batch_deletes_reports_other_per_key_errors(driver, s3_client):
    s3_client.batch_errors = [{"Key": "a.md", "Code": "InternalError", "Message": "oops"}]
    paths = [f"k{index}" for index in range(1500)]

    with pytest.raises(BatchDeleteError) as info:
        driver.batch_deletes(paths)

    assert info.value.errors[0]["Key"] == "a.md"
    # remaining chunks are not submitted
    assert len(s3_client.delete_batches) == 1


def test_batch_deletes_chunk_not_found_error_is_swallowed(driver, s3_client, monkeypatch):
    calls = []

    def remove_objects(records):
        calls.append(len(records))
        if len(calls) == 1:
            raise client_error("NoSuchKey", "DeleteObjects")
        return {}

    monkeypatch.setattr(driver.transport, "remove_objects", remove_objects)

    driver.batch_deletes([f"k{index}" for index in range(1001)])

    assert calls == [1000, 1]


def test_batch_deletes_chunk_error_aborts(driver, monkeypatch):
    calls = []

    def remove_objects(records):
        calls.append(len(records))
        raise client_error("AccessDenied", "DeleteObjects")

    monkeypatch.setattr(driver.transport, "remove_objects", remove_objects)

    with pytest.raises(Exception) as info:
        driver.batch_deletes([f"k{index}" for index in range(2001)])

    assert info.value.response["Error"]["Code"] == "AccessDenied"
    assert calls == [1000]


@pytest.mark.parametrize("count", [0, 1, 999, 1000, 1001, 3500])
def test_clear_root_removes_everything(driver, s3_client, count):
    for index in range(count):
        s3_client.add(f"dir{index % 3}/{index}.md")

    driver.clear_root()

    assert s3_client.objects == {}
    assert len(s3_client.delete_batches) == math.ceil(count / S3_MAX_DELETES)
    assert ("list_objects_v2", "") in s3_client.calls

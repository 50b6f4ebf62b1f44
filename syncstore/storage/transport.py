"""Thin request/response wrappers around the boto3 S3 client."""

from __future__ import annotations

from typing import Any, List

from botocore.exceptions import ClientError

from syncstore.core.errors import classify_error, error_code


class ObjectStoreTransport:
    """
    One method per store capability, each issuing exactly one client call.

    Holds the client handle and the bucket name; both are fixed at
    construction. Errors from the client propagate unchanged so callers can
    classify them.
    """

    def __init__(self, client: Any, bucket: str):
        self.client = client
        self.bucket = bucket

    def list_objects(self, prefix: str) -> List[dict]:
        """Return every object under ``prefix`` (recursive, all pages drained)."""
        objects: List[dict] = []
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            objects.extend(page.get("Contents", []) or [])
        return objects

    def list_keys(self, prefix: str) -> List[str]:
        return [obj["Key"] for obj in self.list_objects(prefix) if obj.get("Key")]

    def presigned_url(self, key: str, expires_in: int = 3600) -> str:
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in,
        )

    def put_object(self, key: str, body: bytes) -> dict:
        return self.client.put_object(Bucket=self.bucket, Key=key, Body=body)

    def stat_object(self, key: str) -> dict:
        return self.client.head_object(Bucket=self.bucket, Key=key)

    def copy_object(self, source_key: str, dest_key: str) -> dict:
        return self.client.copy_object(
            Bucket=self.bucket,
            Key=dest_key,
            CopySource={"Bucket": self.bucket, "Key": source_key},
        )

    def remove_object(self, key: str) -> dict:
        return self.client.delete_object(Bucket=self.bucket, Key=key)

    def remove_objects(self, records: List[dict]) -> dict:
        """
        Delete up to 1000 ``{"Key": ...}`` records in one request.

        Quiet mode: the response only lists failures, under ``Errors``.
        """
        return self.client.delete_objects(
            Bucket=self.bucket,
            Delete={"Objects": records, "Quiet": True},
        )

    def bucket_exists(self, bucket: str | None = None) -> bool:
        try:
            self.client.head_bucket(Bucket=bucket or self.bucket)
            return True
        except ClientError as exc:
            if classify_error(exc).is_not_found or error_code(exc) == "NoSuchBucket":
                return False
            raise

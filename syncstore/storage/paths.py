"""Logical sync paths to object keys."""

from __future__ import annotations

SEPARATOR = "/"


def make_key(path: str | None) -> str:
    """
    Convert a logical sync path into the object key addressing one item.

    Empty or missing paths address the bucket root. Keys are otherwise used
    as given: no encoding, no case folding, no separator changes.
    """
    if not path:
        return ""
    return path


def make_prefix(path: str | None) -> str:
    """
    Convert a logical directory path into a listing prefix.

    A single trailing separator is appended when the key is non-empty and
    does not already end with one, so that ``a`` lists ``a/1`` but not ``ab/1``.
    """
    key = make_key(path)
    if key and not key.endswith(SEPARATOR):
        key = f"{key}{SEPARATOR}"
    return key


def basename(path: str) -> str:
    if not path:
        return ""
    return path.rstrip(SEPARATOR).rsplit(SEPARATOR, 1)[-1]

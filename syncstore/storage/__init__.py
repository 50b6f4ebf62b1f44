"""Object-store file drivers for the sync engine."""

from syncstore.storage.adapter import DeltaAlgorithm, FileApiDriver
from syncstore.storage.s3_driver import S3FileApiDriver
from syncstore.storage.stats import FileStat, ListResult
from syncstore.storage.transport import ObjectStoreTransport

__all__ = [
    "DeltaAlgorithm",
    "FileApiDriver",
    "FileStat",
    "ListResult",
    "ObjectStoreTransport",
    "S3FileApiDriver",
]

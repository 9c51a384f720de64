"""
Storage module for NexusLearn.

Uploaded PDFs and generated podcast audio live behind ``StorageProvider`` so
the API and worker work the same against local disk or S3.
"""

from abc import ABC, abstractmethod
from typing import Any


class StorageProvider(ABC):
    """Object storage keyed by slash-separated object keys."""

    @abstractmethod
    def upload_bytes(
        self, data: bytes, object_key: str, content_type: str | None = None
    ) -> str:
        """Store ``data`` under ``object_key`` and return a provider reference
        such as ``local://pdfs/u1/j1.pdf`` or ``s3://bucket/pdfs/u1/j1.pdf``."""

    @abstractmethod
    def download_bytes(self, object_key: str) -> bytes:
        """Raises FileNotFoundError when nothing is stored under the key."""

    @abstractmethod
    def get_file_url(self, object_key: str, expires_in: int = 3600) -> str: ...

    @abstractmethod
    def file_exists(self, object_key: str) -> bool: ...

    @abstractmethod
    def delete_file(self, object_key: str) -> None: ...


PROVIDERS = ("local", "s3")


def create_storage_provider(provider: str, **settings: Any) -> StorageProvider:
    """Build the provider named ``provider`` from its keyword settings."""
    if provider == "local":
        from .local_storage import LocalStorage

        return LocalStorage(**settings)
    if provider == "s3":
        from .s3_storage import S3Storage

        return S3Storage(**settings)
    raise ValueError(
        f"Unsupported storage provider: {provider} (expected one of {PROVIDERS})"
    )

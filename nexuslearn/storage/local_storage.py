"""
Local filesystem storage, used for development.

Objects are files under ``base_path``; the API serves them under ``/files/``.
"""

from pathlib import Path

from loguru import logger

from . import StorageProvider


class LocalStorage(StorageProvider):
    def __init__(self, base_path: str | Path, base_url: str = "/"):
        self.root = Path(base_path).resolve()
        self.base_url = base_url.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, object_key: str) -> Path:
        path = (self.root / object_key).resolve()
        if not path.is_relative_to(self.root):
            raise ValueError(f"Object key escapes storage root: {object_key}")
        return path

    def upload_bytes(
        self, data: bytes, object_key: str, content_type: str | None = None
    ) -> str:
        target = self._path(object_key)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.debug(f"Wrote {len(data)} bytes to {target}")
        return f"local://{object_key}"

    def download_bytes(self, object_key: str) -> bytes:
        source = self._path(object_key)
        if not source.is_file():
            raise FileNotFoundError(f"local://{object_key}")
        return source.read_bytes()

    def get_file_url(self, object_key: str, expires_in: int = 3600) -> str:
        # expires_in does not apply; local files are served statically
        return f"{self.base_url}/files/{object_key}"

    def file_exists(self, object_key: str) -> bool:
        return self._path(object_key).is_file()

    def delete_file(self, object_key: str) -> None:
        self._path(object_key).unlink(missing_ok=True)

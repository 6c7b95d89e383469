import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator
from fastapi import UploadFile

# Stored binaries are served statically under this prefix
UPLOADS_URL_PREFIX = "/uploads"


def public_url(filename: str) -> str:
    return f"{UPLOADS_URL_PREFIX}/{filename}"


class FileTooLargeError(Exception):
    def __init__(self, limit: int):
        super().__init__(f"File exceeds the maximum size of {limit} bytes")
        self.limit = limit


class EmptyFileError(Exception):
    pass


@dataclass
class StoredObject:
    filename: str
    path: str
    size: int


class LocalStorage:
    def __init__(self, upload_dir: str, chunk_size: int = 1024 * 1024):
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.chunk_size = chunk_size

    async def save_file(self, file: UploadFile, max_size: int) -> StoredObject:
        """
        Stream an upload to disk under a generated unique name.

        Reading stops as soon as the payload crosses max_size; the partial
        object is removed and FileTooLargeError raised, so an oversized
        upload never reaches the database. Empty payloads are refused too.
        """
        file_ext = Path(file.filename or "").suffix
        unique_filename = f"{uuid.uuid4()}{file_ext}"
        file_path = self.upload_dir / unique_filename

        size = 0
        try:
            with open(file_path, "wb") as f:
                while True:
                    chunk = await file.read(self.chunk_size)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > max_size:
                        raise FileTooLargeError(max_size)
                    f.write(chunk)
            if size == 0:
                raise EmptyFileError()
        except BaseException:
            file_path.unlink(missing_ok=True)
            raise

        return StoredObject(filename=unique_filename, path=str(file_path), size=size)

    def get_file_path(self, filename: str) -> Path:
        """Get full path to a file"""
        return self.upload_dir / filename

    def delete_file(self, filename: str) -> bool:
        """Delete a file, False if it was already gone. OSError propagates."""
        file_path = self.get_file_path(filename)
        if file_path.exists():
            file_path.unlink()
            return True
        return False

    def iter_objects(self) -> Iterator[Path]:
        for entry in self.upload_dir.iterdir():
            if entry.is_file():
                yield entry

# app/utils/file_upload.py

import logging
import uuid
from pathlib import Path
from typing import List, Optional

from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import UploadError

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE = settings.max_upload_size_mb * 1024 * 1024


class PhotoStorage:
    """Stores listing photos on disk with UUID naming and returns public URLs."""

    def __init__(self, base_storage_path: str = "storage", base_url: str = None):
        """
        Initialize the photo storage.

        Args:
            base_storage_path: Base directory for file storage (relative to project root)
            base_url: Public URL prefix the storage directory is mounted under
        """
        self.base_storage_path = Path(base_storage_path)
        self.base_url = (base_url or f"{settings.app_url}/storage").rstrip("/")
        self.allowed_extensions = {f".{ext.lower()}" for ext in settings.allowed_file_types}
        (self.base_storage_path / "posts").mkdir(parents=True, exist_ok=True)

    def _get_file_extension(self, filename: str) -> str:
        """Extract file extension from filename."""
        return Path(filename).suffix.lower()

    def _validate_image(self, file: UploadFile) -> None:
        if not file.filename:
            raise UploadError("No filename provided")

        extension = self._get_file_extension(file.filename)
        if extension not in self.allowed_extensions:
            raise UploadError(
                f"Invalid file type. Allowed types: {', '.join(sorted(self.allowed_extensions))}"
            )

    async def _read(self, file: UploadFile) -> bytes:
        try:
            contents = await file.read()
        except Exception as e:
            raise UploadError(f"Error reading file: {str(e)}")
        finally:
            await file.seek(0)  # Reset file pointer

        if len(contents) > MAX_IMAGE_SIZE:
            raise UploadError(
                f"File size exceeds maximum allowed size of {MAX_IMAGE_SIZE / (1024*1024)}MB"
            )
        if not contents:
            raise UploadError("Empty file uploaded")
        return contents

    async def upload(self, owner_id: int, files: Optional[List[UploadFile]]) -> List[str]:
        """
        Save every photo of a listing and return their public URLs.

        Args:
            owner_id: Id of the user the photos belong to
            files: Uploaded files, may be empty

        Returns:
            List of URLs in upload order

        Raises:
            UploadError: If any file is invalid or cannot be written. Files
                already written for this call are removed.
        """
        saved: List[str] = []
        folder = f"posts/{owner_id}"
        folder_path = self.base_storage_path / folder
        folder_path.mkdir(parents=True, exist_ok=True)

        try:
            for file in files or []:
                self._validate_image(file)
                contents = await self._read(file)

                uuid_filename = f"{uuid.uuid4()}{self._get_file_extension(file.filename)}"
                try:
                    with open(folder_path / uuid_filename, "wb") as f:
                        f.write(contents)
                except OSError as e:
                    raise UploadError(f"Error saving file: {str(e)}", 500)

                saved.append(f"{folder}/{uuid_filename}")
        except UploadError:
            for relative_path in saved:
                self.delete(relative_path)
            raise

        logger.info(f"Stored {len(saved)} photo(s) for user {owner_id}")
        return [f"{self.base_url}/{relative_path}" for relative_path in saved]

    def delete(self, relative_path: str) -> bool:
        """
        Delete a stored photo.

        Args:
            relative_path: Relative path to the file (e.g., 'posts/1/uuid.jpg')

        Returns:
            True if deleted successfully, False otherwise
        """
        file_path = self.base_storage_path / relative_path
        try:
            if file_path.exists() and file_path.is_file():
                file_path.unlink()
                return True
        except OSError as e:
            logger.warning(f"Could not delete {file_path}: {e}")
        return False


# Create a singleton instance
photo_storage = PhotoStorage(settings.upload_dir)

import logging
import os
import shutil
from uuid import uuid4

from fastapi import UploadFile

from campus_eats.config import settings

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".heic", ".pdf"}


def save_upload(file: UploadFile, folder: str) -> str:
    """Copy an uploaded file under ``settings.upload_dir/folder``; returns its file id."""
    ext = os.path.splitext(file.filename or "")[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValueError(f"Unsupported file type: {ext or 'none'}")

    target_dir = os.path.join(settings.upload_dir, folder)
    os.makedirs(target_dir, exist_ok=True)

    file_id = f"{uuid4().hex}{ext}"
    with open(os.path.join(target_dir, file_id), "wb") as out:
        shutil.copyfileobj(file.file, out)

    logger.info(f"Stored upload {file.filename} as {folder}/{file_id}")
    return file_id


def delete_upload(file_id: str, folder: str) -> None:
    path = os.path.join(settings.upload_dir, folder, file_id)
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    logger.info(f"Removed upload {folder}/{file_id}")

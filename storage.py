# storage.py
from datetime import datetime
import logging
import os

from flask import current_app, url_for
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}
FOLDERS = {"receipts", "products"}

class UploadError(ValueError):
    pass

def _size_of(file):
    stream = file.stream
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size

def save_upload(file, folder="receipts"):
    """Store an uploaded image and return its public URL.

    Raises UploadError for a missing file, an unknown folder, a disallowed
    extension or a file over MAX_UPLOAD_BYTES; nothing is written then.
    """
    if file is None or not file.filename:
        raise UploadError("No file provided")
    if folder not in FOLDERS:
        raise UploadError(f"Unknown upload folder: {folder}")
    name = secure_filename(file.filename).lower()
    ext = name.rsplit(".", 1)[-1] if "." in name else ""
    if ext not in ALLOWED_EXTENSIONS:
        raise UploadError("Only PNG, JPG, GIF or WEBP images are accepted")
    limit = current_app.config["MAX_UPLOAD_BYTES"]
    if _size_of(file) > limit:
        raise UploadError(f"File size must be less than {limit // (1024 * 1024)}MB")

    target_dir = os.path.join(current_app.config["UPLOAD_FOLDER"], folder)
    os.makedirs(target_dir, exist_ok=True)
    stored = f"{datetime.now().strftime('%Y%m%d%H%M%S%f')}-{name}"
    file.save(os.path.join(target_dir, stored))
    logger.info("Stored upload %s/%s", folder, stored)
    return url_for("shop.uploaded_file", filename=f"{folder}/{stored}", _external=True)

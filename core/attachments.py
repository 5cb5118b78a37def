"""
Binary attachment removal (uploaded resumes).
"""
import logging

from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)


def delete_attachment(path, storage=None):
    """
    Best-effort removal of a stored file.

    Never raises: a missing file or a storage error is logged and reported
    through the return value so callers can carry on with record deletion.

    Returns:
        bool: True if the file was removed
    """
    if not path:
        return False

    storage = storage or default_storage
    try:
        if not storage.exists(path):
            logger.warning(f"Attachment {path} not found in storage")
            return False
        storage.delete(path)
    except Exception as e:
        logger.warning(f"Could not delete attachment {path}: {e}")
        return False

    logger.info(f"Attachment {path} deleted from storage")
    return True

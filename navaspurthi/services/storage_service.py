"""JSON file storage with atomic writes and exclusive locking."""
import json
import logging
import os
import shutil
import sys
import tempfile
import time
from contextlib import contextmanager
from typing import Any, Dict

from navaspurthi.utils.exceptions import FileWriteError

if sys.platform != "win32":
    import fcntl

logger = logging.getLogger(__name__)

LOCK_POLL_INTERVAL = 0.05


def load_json(file_path: str, attempts: int = 3, retry_delay: float = 0.1) -> Dict[str, Any]:
    """
    Read a UTF-8 JSON document, retrying briefly while another process
    holds the file open for writing on platforms that refuse shared reads.

    Raises:
        FileNotFoundError: If file_path doesn't exist
        json.JSONDecodeError: If the document is not valid JSON
        PermissionError: If every attempt was refused
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    for _ in range(attempts):
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except PermissionError:
            time.sleep(retry_delay)
        except json.JSONDecodeError as e:
            logger.error(f"{file_path} is not valid JSON (line {e.lineno}): {e.msg}")
            raise

    raise PermissionError(f"{file_path} still unreadable after {attempts} attempts")


def save_json(file_path: str, data: Dict[str, Any], backup: bool = True) -> None:
    """
    Replace file_path with `data` in one step.

    Readers see either the old document or the new one. With `backup`,
    the old document is kept as "<file>.backup".

    Raises:
        FileWriteError: If the backup or the write fails
    """
    dir_path = os.path.dirname(file_path)
    if dir_path:
        os.makedirs(dir_path, exist_ok=True)

    if backup and os.path.exists(file_path):
        try:
            shutil.copy2(file_path, f"{file_path}.backup")
        except OSError as e:
            raise FileWriteError(f"Failed to create backup of {file_path}: {e}") from e

    temp_fd, temp_path = tempfile.mkstemp(dir=dir_path or ".", prefix=".tmp_", suffix=".json")
    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, file_path)
    except (OSError, TypeError, ValueError) as e:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise FileWriteError(f"Failed to write file {file_path}: {e}") from e


def ensure_json_file(file_path: str, default: Dict[str, Any]) -> None:
    """Create file_path holding `default` if it doesn't exist yet."""
    if os.path.exists(file_path):
        return
    logger.info(f"Creating data file {file_path}")
    save_json(file_path, default, backup=False)


@contextmanager
def lock_file(file_path: str, timeout: float = 5.0):
    """
    Hold an exclusive lock for file_path.

    The lock lives on a sidecar "<file>.lock" so it also guards the
    replace step in save_json, which swaps the data file's inode.

    Raises:
        TimeoutError: If unable to acquire lock within timeout
    """
    lock_path = f"{file_path}.lock"
    dir_path = os.path.dirname(lock_path)
    if dir_path:
        os.makedirs(dir_path, exist_ok=True)

    start_time = time.time()

    if sys.platform == "win32":
        while True:
            try:
                lock_fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_RDWR)
                break
            except FileExistsError:
                if time.time() - start_time > timeout:
                    raise TimeoutError(f"Could not acquire lock on {file_path} within {timeout}s")
                time.sleep(LOCK_POLL_INTERVAL)
        try:
            yield
        finally:
            os.close(lock_fd)
            try:
                os.remove(lock_path)
            except OSError as e:
                logger.warning(f"Could not remove lock file {lock_path}: {e}")
    else:
        with open(lock_path, "a+") as handle:
            while True:
                try:
                    fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except OSError:
                    if time.time() - start_time > timeout:
                        raise TimeoutError(f"Could not acquire lock on {file_path} within {timeout}s")
                    time.sleep(LOCK_POLL_INTERVAL)
            try:
                yield
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

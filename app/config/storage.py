import logging
import uuid
from pathlib import Path
from app.config.settings import settings
from app.config.validators import sanitize_filename

logger = logging.getLogger(__name__)


class StorageObjectMissing(FileNotFoundError):
    """A stored object was requested by name but is not on disk"""


class LocalFileStorage:
    """Disk-backed blob storage addressed by generated names"""

    def __init__(self, root):
        self.root = Path(root)

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def generate_name(self, original_name: str) -> str:
        """Collision-resistant storage name; the user-supplied name is only kept as a suffix"""
        return f"{uuid.uuid4().hex}-{sanitize_filename(original_name)}"

    def _path(self, name: str) -> Path:
        # Names come from generate_name, but never let one escape the root
        if Path(name).name != name or name in ("", ".", ".."):
            raise ValueError(f"Invalid storage name: {name!r}")
        return self.root / name

    def save(self, name: str, data: bytes) -> Path:
        path = self._path(name)
        self.ensure_root()
        with open(path, "xb") as fh:
            fh.write(data)
        logger.info(f"Stored {len(data)} bytes as {path}")
        return path

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()

    def resolve(self, name: str) -> Path:
        path = self._path(name)
        if not path.is_file():
            raise StorageObjectMissing(str(path))
        return path

    def delete(self, name: str) -> None:
        path = self._path(name)
        if not path.exists():
            raise StorageObjectMissing(str(path))
        path.unlink()
        logger.info(f"Removed stored file {path}")

    def relative_path(self, name: str) -> str:
        return f"{self.root.name}/{name}"


todo_file_storage = LocalFileStorage(Path(settings.UPLOAD_DIR) / "todos")
profile_storage = LocalFileStorage(Path(settings.UPLOAD_DIR) / "profiles")


def get_file_storage() -> LocalFileStorage:
    """Dependency returning storage for todo attachments"""
    return todo_file_storage


def get_profile_storage() -> LocalFileStorage:
    """Dependency returning storage for profile pictures"""
    return profile_storage

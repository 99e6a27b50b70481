import os
import re
import json
import logging
import tempfile
from dotenv import load_dotenv, find_dotenv

# Load environment variables from .env file, searching parent directories if needed
load_dotenv(find_dotenv(usecwd=True))

# Configuration
STORE_DIR = os.environ.get("BRIEVIFY_STORE_DIR", ".brievify")
KEY_PREFIX = "brievify_"

# Logical keys
AUTH_KEY = "auth"
USERS_KEY = "users"
ONBOARDING_KEY = "onboarding_data"
HISTORY_KEY = "campaign_history"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

logger = logging.getLogger(__name__)


class _Absent:
    """Sentinel for a key that was never set, was cleared, or is unreadable."""

    def __repr__(self):
        return "ABSENT"

    def __bool__(self):
        return False


ABSENT = _Absent()


class PersistentStore:
    """Durable key-value storage of JSON documents, one file per key."""

    def __init__(self, root_dir=None):
        self.root_dir = os.path.abspath(root_dir or STORE_DIR)
        os.makedirs(self.root_dir, exist_ok=True)

    def _path(self, key: str) -> str:
        if not isinstance(key, str) or not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return os.path.join(self.root_dir, f"{KEY_PREFIX}{key}.json")

    def put(self, key: str, value) -> None:
        """
        Serialize value and durably associate it with key.

        The document is written to a temporary file in the same directory and
        moved into place, so readers see either the old or the new value.
        """
        path = self._path(key)
        payload = json.dumps(value, indent=2)
        fd, tmp_path = tempfile.mkstemp(dir=self.root_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug(f"Stored {key} ({len(payload)} bytes)")

    def get(self, key: str, default=ABSENT):
        """
        Return the last stored value for key.

        Args:
            key: Logical record name
            default: Returned when the record is missing or corrupt

        Returns:
            The decoded value, or default (ABSENT unless supplied)
        """
        path = self._path(key)
        if not os.path.exists(path):
            return default
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable record {key}: {e}")
            return default

    def clear(self, key: str) -> None:
        path = self._path(key)
        try:
            os.remove(path)
            logger.debug(f"Cleared {key}")
        except FileNotFoundError:
            pass

    def contains(self, key: str) -> bool:
        return self.get(key) is not ABSENT

    def keys(self):
        names = []
        for filename in sorted(os.listdir(self.root_dir)):
            if filename.startswith(KEY_PREFIX) and filename.endswith(".json"):
                names.append(filename[len(KEY_PREFIX):-len(".json")])
        return names

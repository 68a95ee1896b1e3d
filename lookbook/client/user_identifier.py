"""Pseudonymous user identifier persisted on the client.

The identifier is a random UUID4 stored in a small JSON file. It is a
correlation key for analytics only, never an authenticated identity.
"""

import json
import logging
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

USER_ID_KEY = "lookbook-user-id"


class UserIdentifier:
    """Get-or-create access to the stored user id.

    Usage:
        identifier = UserIdentifier(Path.home() / ".lookbook" / "user.json")
        user_id = identifier.get_or_create()
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def get_existing(self) -> str | None:
        """Return the stored id, or None when absent or unreadable."""
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read user identifier from {self.path}: {e}")
            return None
        value = data.get(USER_ID_KEY) if isinstance(data, dict) else None
        return value if isinstance(value, str) and value else None

    def get_or_create(self) -> str:
        """Return the stored id, generating and persisting one if missing.

        If storage is unavailable a temporary id is returned.
        """
        existing = self.get_existing()
        if existing:
            return existing

        user_id = str(uuid.uuid4())
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({USER_ID_KEY: user_id}), encoding="utf-8")
            logger.info(f"Generated new user identifier: {user_id}")
        except OSError as e:
            logger.warning(f"User identifier storage unavailable, using temporary id: {e}")
        return user_id

    def clear(self) -> None:
        """Forget the stored id."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to clear user identifier: {e}")

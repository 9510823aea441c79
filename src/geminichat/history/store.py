"""Chat session store.

Keeps the ordered list of saved conversations and mirrors it to a storage
backend under one key. The whole list is read once and rewritten on every
change. Persistence problems are logged and swallowed here: a chat must keep
working when the disk is full or the history file is corrupt.
"""

import json
import logging
import time
from collections.abc import Callable
from uuid import uuid4

from pydantic import ValidationError

from ..config import STORAGE_KEY
from ..exceptions import ImportValidationError, PersistenceError
from ..llm.models import Message
from .base import StorageBackend
from .models import ChatEntry, ChatEntryList, StorageStats

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _serializable(entry: ChatEntry) -> bool:
    """False for entries whose text cannot be written as UTF-8 (lone surrogates)."""
    try:
        entry.model_dump_json()
    except ValueError:
        return False
    return True


class ChatSessionStore:
    """Ordered, id-keyed collection of saved conversations.

    Entries are kept most-recently-created first: saving a new id inserts it
    at the front, saving a known id replaces that entry where it is.

    The store also tracks the active session id, but every operation that
    needs one accepts it explicitly as well.
    """

    def __init__(
        self,
        backend: StorageBackend,
        storage_key: str = STORAGE_KEY,
        clock: Callable[[], int] | None = None,
    ):
        """Initialize the store.

        Args:
            backend: Where the serialized history is kept
            storage_key: Key the history is stored under
            clock: Returns the current time in epoch milliseconds
        """
        self._backend = backend
        self._storage_key = storage_key
        self._clock = clock or _now_ms
        self._entries: list[ChatEntry] = []
        self._active_session_id: str | None = None

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def active_session_id(self) -> str | None:
        return self._active_session_id

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, session_id: object) -> bool:
        return any(entry.id == session_id for entry in self._entries)

    # Persistence

    def load_from_storage(self) -> None:
        """Replace the in-memory list with what the backend holds.

        Missing data gives an empty store. Unreadable data also gives an empty
        store (logged). Individually invalid entries are skipped.
        """
        self._entries = []
        try:
            raw = self._backend.read(self._storage_key)
        except PersistenceError as e:
            logger.error("Error loading chat histories: %s", e)
            return
        if raw is None:
            return

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Chat history under %r is not valid JSON: %s", self._storage_key, e)
            return
        if not isinstance(data, list):
            logger.error("Chat history under %r is not a list", self._storage_key)
            return

        seen: set[str] = set()
        for item in data:
            try:
                entry = ChatEntry.model_validate(item)
            except ValidationError as e:
                logger.warning("Skipping invalid chat entry: %s", e.errors()[0].get("msg"))
                continue
            if entry.id in seen:
                logger.warning("Skipping duplicate chat entry %s", entry.id)
                continue
            if not _serializable(entry):
                logger.warning("Skipping unserializable chat entry %s", entry.id)
                continue
            seen.add(entry.id)
            self._entries.append(entry)

        logger.info("Loaded %d chats from %s storage", len(self._entries), self._backend.backend_type)

    def _serialize(self, indent: int | None = None) -> str:
        try:
            return ChatEntryList.dump_json(self._entries, indent=indent).decode("utf-8")
        except ValueError as e:
            logger.error("Dropping chats that cannot be serialized: %s", e)
            self._entries = [entry for entry in self._entries if _serializable(entry)]
        return ChatEntryList.dump_json(self._entries, indent=indent).decode("utf-8")

    def _persist(self) -> bool:
        """Write the whole list to the backend; failures are only logged."""
        try:
            self._backend.write(self._storage_key, self._serialize())
        except PersistenceError as e:
            logger.error("Error saving chat histories: %s", e)
            return False
        return True

    # Sessions

    def create_session(self) -> str:
        """Generate a fresh session id and make it the active one.

        No entry is created until a non-empty transcript is saved.
        """
        session_id = uuid4().hex
        while session_id in self:
            session_id = uuid4().hex
        self._active_session_id = session_id
        return session_id

    def activate(self, session_id: str) -> bool:
        """Make a saved conversation the active session.

        Returns:
            False if no entry with that id exists
        """
        if session_id not in self:
            return False
        self._active_session_id = session_id
        return True

    # Entries

    def save(self, transcript: list[Message], session_id: str | None = None) -> ChatEntry | None:
        """Upsert a snapshot of ``transcript`` and persist the store.

        Args:
            transcript: Messages to save; an empty transcript is ignored
            session_id: Entry id (defaults to the active session, which is
                created if there is none)

        Returns:
            The saved entry, or None for an empty transcript or one that
            cannot be serialized (logged)
        """
        if not transcript:
            return None

        sid = session_id or self._active_session_id or self.create_session()
        entry = ChatEntry.from_transcript(sid, transcript, self._clock())
        if not _serializable(entry):
            logger.error("Chat %s contains text that cannot be stored, not saved", sid)
            return None

        index = self._index_of(sid)
        if index is None:
            self._entries.insert(0, entry)
        else:
            self._entries[index] = entry

        self._persist()
        return entry.model_copy(deep=True)

    def load(self, session_id: str) -> ChatEntry | None:
        """Return a copy of the entry with that id, or None."""
        index = self._index_of(session_id)
        if index is None:
            return None
        return self._entries[index].model_copy(deep=True)

    def list_all(self) -> list[ChatEntry]:
        """Return copies of all entries, most recently created first."""
        return [entry.model_copy(deep=True) for entry in self._entries]

    def delete(self, session_id: str) -> bool:
        """Remove an entry.

        Returns:
            True if the entry existed
        """
        index = self._index_of(session_id)
        if index is None:
            return False
        del self._entries[index]
        self._persist()
        return True

    def clear_all(self) -> None:
        """Remove every entry."""
        self._entries = []
        self._persist()

    def _index_of(self, session_id: str) -> int | None:
        for index, entry in enumerate(self._entries):
            if entry.id == session_id:
                return index
        return None

    # Import / export

    def export_as_json(self) -> str:
        """Serialize the whole store for backup."""
        return self._serialize(indent=2)

    def import_from_json(self, text: str) -> bool:
        """Replace the whole store with an exported history.

        Returns:
            True on success; False if the payload is rejected, in which case
            the store is left untouched
        """
        try:
            entries = self._parse_import(text)
        except ImportValidationError as e:
            logger.error("Error importing chats: %s", e)
            return False

        self._entries = entries
        self._persist()
        logger.info("Imported %d chats", len(entries))
        return True

    @staticmethod
    def _parse_import(text: str) -> list[ChatEntry]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ImportValidationError(f"not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise ImportValidationError("top-level value must be a list")
        try:
            entries = ChatEntryList.validate_python(data)
        except ValidationError as e:
            raise ImportValidationError(f"invalid chat entry: {e.errors()[0].get('msg')}") from e

        ids = [entry.id for entry in entries]
        if len(ids) != len(set(ids)):
            raise ImportValidationError("duplicate chat ids")
        for entry in entries:
            if not _serializable(entry):
                raise ImportValidationError(f"chat {entry.id} contains text that cannot be stored")
        return entries

    def storage_stats(self) -> StorageStats:
        """Count and serialized size of the current store."""
        return StorageStats(
            count=len(self._entries),
            size_in_bytes=len(self._serialize().encode("utf-8")),
            storage_key=self._storage_key,
        )

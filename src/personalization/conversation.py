"""Append-only conversation history.

The conversation lives in memory and is written to the key-value store as one
JSON blob on every flush. Timestamps are stored as timezone-naive ISO-8601
strings and read back with exact fidelity.
"""

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from src.personalization.exceptions import PersistenceError
from src.personalization.models import Message, Role
from src.personalization.storage import CONVERSATION_KEY, KeyValueStore

# Configure module logger
logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_EPOCH = datetime(1970, 1, 1)
_MICROSECOND = timedelta(microseconds=1)


def message_record(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "role": message.role.value,
        "text": message.text,
        "timestamp": message.timestamp.isoformat(),
    }


def serialize_messages(messages: Sequence[Message]) -> str:
    """Encode messages as a JSON list of {id, role, text, timestamp}."""
    return json.dumps([message_record(message) for message in messages])


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive local datetime.

    Offset timestamps, including the trailing ``Z`` form, are converted to local
    time and stripped of their zone so they compare with ``datetime.now()``.
    """
    if isinstance(value, str) and value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    timestamp = datetime.fromisoformat(value)
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone().replace(tzinfo=None)
    return timestamp


def deserialize_messages(blob: str) -> List[Message]:
    """Decode a history blob.

    Raises:
        ValueError: If the blob is not valid JSON or an entry is malformed.
    """
    entries = json.loads(blob)
    if not isinstance(entries, list):
        raise ValueError("History blob must be a JSON list")

    messages = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"History entry must be an object, got {type(entry).__name__}")
        try:
            messages.append(
                Message(
                    id=str(entry["id"]),
                    role=Role(entry["role"]),
                    text=str(entry["text"]),
                    timestamp=parse_timestamp(entry["timestamp"]),
                )
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed history entry: {e}") from e
    return messages


class ConversationLog:
    """Ordered user/assistant messages persisted through a key-value store.

    ``append`` only changes memory; ``flush`` writes the whole conversation.
    When a flush fails the in-memory conversation stays the source of truth
    until a later flush succeeds.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = CONVERSATION_KEY,
        clock: Optional[Clock] = None,
    ):
        self.store = store
        self.key = key
        self.clock = clock or datetime.now
        self._messages: List[Message] = []

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    async def load(self) -> List[Message]:
        """Replace the in-memory conversation with the persisted one.

        Absent or unparsable history is treated as empty.

        Returns:
            The loaded messages.
        """
        try:
            blob = await self.store.get(self.key)
        except UnicodeDecodeError as e:
            logger.warning(
                "Discarding undecodable conversation history",
                extra={"key": self.key, "error": str(e)},
            )
            self._messages = []
            return []

        if blob is None:
            logger.debug(f"No persisted history under '{self.key}'")
            self._messages = []
            return []

        try:
            messages = deserialize_messages(blob)
        except ValueError as e:
            logger.warning(
                "Discarding unparsable conversation history",
                extra={"key": self.key, "error": str(e)},
            )
            messages = []

        self._messages = messages
        logger.info(f"Loaded {len(messages)} messages from '{self.key}'")
        return list(messages)

    def _next_timestamp(self) -> datetime:
        timestamp = self.clock()
        if self._messages and timestamp <= self._messages[-1].timestamp:
            # Keep timestamps (and the ids derived from them) strictly increasing
            timestamp = self._messages[-1].timestamp + _MICROSECOND
        return timestamp

    def append(self, role: Role, text: str) -> Message:
        """Create a message and add it to the end of the conversation."""
        timestamp = self._next_timestamp()
        message = Message(
            id=str((timestamp - _EPOCH) // _MICROSECOND),
            role=Role(role),
            text=text,
            timestamp=timestamp,
        )
        self._messages.append(message)
        return message

    async def flush(self) -> None:
        """Write the full conversation to the store.

        Raises:
            PersistenceError: If the store write fails. Not retried.
        """
        try:
            await self.store.set(self.key, serialize_messages(self._messages))
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(self.key, e) from e

        logger.debug(f"Persisted {len(self._messages)} messages to '{self.key}'")

    async def clear(self) -> None:
        """Drop every message and persist the empty conversation."""
        self._messages = []
        await self.flush()
        logger.info(f"Cleared conversation history '{self.key}'")

    def to_records(self) -> List[Dict[str, Any]]:
        return [message_record(m) for m in self._messages]

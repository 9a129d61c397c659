"""
In-memory chat and message repository.
One instance is created at application start and injected into the routes.
"""
import itertools
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request

from models.api_models import Chat, Message
from utils.logger import get_logger

logger = get_logger("store")


def generate_chat_id() -> str:
    """Random grouped-hex chat id (8-4-4-4-12)."""
    return str(uuid.uuid4())


class ChatStore:
    """
    Map-backed CRUD for chats and messages.

    No locking: the store is used from a single event loop, which runs one
    handler step at a time.
    """

    def __init__(self):
        self._chats: dict[str, Chat] = {}
        self._messages: dict[int, Message] = {}
        self._message_ids = itertools.count(1)

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    # Chats

    def get_chats(self, user_id: int) -> list[Chat]:
        """Chats of a user, newest first."""
        chats = [chat for chat in self._chats.values() if chat.user_id == user_id]
        return sorted(chats, key=lambda chat: chat.created_at, reverse=True)

    def get_chat(self, chat_id: str) -> Optional[Chat]:
        return self._chats.get(chat_id)

    def create_chat(self, user_id: int, title: str) -> Chat:
        chat_id = generate_chat_id()
        while chat_id in self._chats:
            chat_id = generate_chat_id()

        chat = Chat(id=chat_id, user_id=user_id, title=title, created_at=self._now())
        self._chats[chat_id] = chat
        logger.debug(f"Created chat {chat_id}")
        return chat

    def update_chat(self, chat_id: str, **changes) -> Optional[Chat]:
        """Apply field changes to a chat. None values are ignored."""
        chat = self._chats.get(chat_id)
        if chat is None:
            return None

        updates = {key: value for key, value in changes.items() if value is not None}
        updated = chat.model_copy(update=updates)
        self._chats[chat_id] = updated
        return updated

    def delete_chat(self, chat_id: str) -> bool:
        """Delete a chat and every message that belongs to it."""
        if self._chats.pop(chat_id, None) is None:
            return False

        message_ids = [mid for mid, msg in self._messages.items() if msg.chat_id == chat_id]
        for message_id in message_ids:
            del self._messages[message_id]

        logger.debug(f"Deleted chat {chat_id} and {len(message_ids)} messages")
        return True

    # Messages

    def get_messages(self, chat_id: str) -> list[Message]:
        """Messages of a chat, oldest first."""
        messages = [msg for msg in self._messages.values() if msg.chat_id == chat_id]
        return sorted(messages, key=lambda msg: (msg.created_at, msg.id))

    def get_message(self, message_id: int) -> Optional[Message]:
        return self._messages.get(message_id)

    def create_message(self, chat_id: str, content: str, is_user_message: bool = True) -> Message:
        message = Message(
            id=next(self._message_ids),
            chat_id=chat_id,
            content=content,
            is_user_message=is_user_message,
            created_at=self._now()
        )
        self._messages[message.id] = message
        return message

    def update_message(self, message_id: int, content: str) -> Optional[Message]:
        message = self._messages.get(message_id)
        if message is None:
            return None

        updated = message.model_copy(update={"content": content})
        self._messages[message_id] = updated
        return updated

    def delete_message(self, message_id: int) -> bool:
        """
        Delete a message. A chat left without messages is deleted with it.
        """
        message = self._messages.pop(message_id, None)
        if message is None:
            return False

        if not any(msg.chat_id == message.chat_id for msg in self._messages.values()):
            logger.info(f"Chat {message.chat_id} has no messages left, deleting it")
            self._chats.pop(message.chat_id, None)

        return True

    def purge_empty_chats(self) -> int:
        """Delete every chat that has no messages. Returns the number deleted."""
        chat_ids_with_messages = {msg.chat_id for msg in self._messages.values()}
        empty = [chat_id for chat_id in self._chats if chat_id not in chat_ids_with_messages]

        for chat_id in empty:
            del self._chats[chat_id]

        if empty:
            logger.info(f"Purged {len(empty)} empty chats")
        return len(empty)

    def count_user_messages(self, chat_id: str) -> int:
        return sum(1 for msg in self._messages.values() if msg.chat_id == chat_id and msg.is_user_message)


def get_store(request: Request) -> ChatStore:
    """FastAPI dependency returning the application's store."""
    return request.app.state.store

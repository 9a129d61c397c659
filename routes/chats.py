"""
Route handlers for chat CRUD operations.
"""
from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from config import Config
from models.api_models import Chat, CreateChatRequest, Message, UpdateChatRequest
from services.store import ChatStore, get_store
from utils.logger import get_logger

router = APIRouter(prefix="/api/chats")
logger = get_logger("routes.chats")


def chat_not_found() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "Chat not found"})


@router.get("", response_model=list[Chat])
async def list_chats(store: ChatStore = Depends(get_store)):
    """List the chats of the default user, newest first. Chats without messages are dropped."""
    store.purge_empty_chats()
    return store.get_chats(Config.DEFAULT_USER_ID)


@router.get("/{chat_id}", response_model=Chat)
async def get_chat(chat_id: str, store: ChatStore = Depends(get_store)):
    chat = store.get_chat(chat_id)
    if chat is None:
        return chat_not_found()
    return chat


@router.post("", response_model=Chat, status_code=status.HTTP_201_CREATED)
async def create_chat(request: CreateChatRequest, store: ChatStore = Depends(get_store)):
    """Create a chat and seed it with the assistant welcome message."""
    chat = store.create_chat(Config.DEFAULT_USER_ID, request.title)
    store.create_message(chat.id, Config.WELCOME_MESSAGE, is_user_message=False)
    logger.info(f"Created chat {chat.id} '{chat.title}'")
    return chat


@router.patch("/{chat_id}", response_model=Chat)
async def update_chat(chat_id: str, request: UpdateChatRequest, store: ChatStore = Depends(get_store)):
    chat = store.update_chat(chat_id, title=request.title)
    if chat is None:
        return chat_not_found()
    return chat


@router.delete("/{chat_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chat(chat_id: str, store: ChatStore = Depends(get_store)):
    """Delete a chat with all of its messages."""
    if not store.delete_chat(chat_id):
        return chat_not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{chat_id}/messages", response_model=list[Message])
async def list_messages(chat_id: str, store: ChatStore = Depends(get_store)):
    return store.get_messages(chat_id)

"""
Route handlers for sending, editing and deleting messages.
"""
from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from models.api_models import Message, SendMessageRequest, SendMessageResponse, UpdateMessageRequest
from services.chat_service import ChatService
from services.store import ChatStore, get_store
from services.title_generator import TitleGenerator, get_title_generator
from utils.logger import get_logger

router = APIRouter(prefix="/api/messages")
logger = get_logger("routes.messages")


def message_not_found() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "Message not found"})


@router.post(
    "",
    response_model=SendMessageResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED
)
async def send_message(
    request: SendMessageRequest,
    store: ChatStore = Depends(get_store),
    titles: TitleGenerator = Depends(get_title_generator)
):
    """
    Persist a user message, answer it with the selected model and persist the answer.

    Provider failures do not fail the request: the assistant message then
    carries an apology text instead.
    """
    if store.get_chat(request.chat_id) is None:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "Chat not found"})

    user_message = store.create_message(request.chat_id, request.content, request.is_user_message)

    if not request.is_user_message:
        return SendMessageResponse(user_message=user_message)

    if titles.should_generate(request.chat_id, request.api_settings):
        titles.schedule(request.chat_id, request.content, request.model_name, request.api_settings)

    history = store.get_messages(request.chat_id)
    ai_content = await ChatService.generate_ai_response(history, request.model_name, request.api_settings)

    # The chat may have been deleted while the model was answering
    if store.get_chat(request.chat_id) is None:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "Chat not found"})

    ai_message = store.create_message(request.chat_id, ai_content, is_user_message=False)
    logger.info(f"Chat {request.chat_id}: stored reply of {len(ai_content)} characters")

    return SendMessageResponse(user_message=user_message, ai_response_message=ai_message)


@router.patch("/{message_id}", response_model=Message)
async def update_message(message_id: int, request: UpdateMessageRequest, store: ChatStore = Depends(get_store)):
    message = store.update_message(message_id, request.content)
    if message is None:
        return message_not_found()
    return message


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(message_id: int, store: ChatStore = Depends(get_store)):
    """Delete a message; a chat left empty is deleted too."""
    if not store.delete_message(message_id):
        return message_not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

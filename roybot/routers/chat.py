from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from typing import Optional
import logging

from roybot.core.utils.dependencies import get_ai_provider, get_chat_log, get_user_repository
from roybot.core.utils.rate_limiter import limiter
from roybot.db.chat_log import ChatLogStore
from roybot.db.repositories import UserRepository
from roybot.schemas.chat import (
    ApiChatRequest,
    ChatRequest,
    ChatResponse,
    ExerciseRequest,
    ExerciseSuggestion,
    SaveConversationRequest,
)
from roybot.services.ai_provider import AIProvider, AIProviderError
from roybot.services.chat import (
    DEFAULT_USER_NAME,
    FALLBACK_REPLY,
    resolve_user_name,
    send_to_bot,
    suggest_exercise,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

def _error_reply(text: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ChatResponse(response=text, status="error").model_dump(),
    )

async def _log_message(chat_log: ChatLogStore, text: str) -> None:
    result = await chat_log.append(text)
    if not result.success:
        logger.warning(f"Chat message was not logged: {result.error}")

async def _reply(message: str, user_name: str, provider: Optional[AIProvider], chat_log: ChatLogStore):
    await _log_message(chat_log, message)

    if provider is None:
        logger.error("Chat request received but no AI provider is configured")
        return _error_reply(FALLBACK_REPLY)

    try:
        reply = await send_to_bot(provider, message, user_name)
    except AIProviderError as e:
        logger.error(f"AI provider failed for {user_name}: {e}")
        return _error_reply(FALLBACK_REPLY)

    return ChatResponse(response=reply, status="success")

@router.post("/chat", response_model=ChatResponse, summary="Send a message to ROY")
@limiter.limit("30/minute")
async def chat(
    request: Request,
    data: ChatRequest,
    provider: Optional[AIProvider] = Depends(get_ai_provider),
    chat_log: ChatLogStore = Depends(get_chat_log),
):
    """
    Forwards a user message to the completion service and returns ROY's reply.

    - **Rate Limit**: 30 requests per minute.
    - The message is appended to the chat log before the completion call.

    Returns:
    - **ChatResponse**: `{"response": ..., "status": "success"}`.

    Errors:
    - **422**: If the message is empty.
    - **500**: `{"response": <friendly text>, "status": "error"}` when the provider is missing or fails.
    """
    return await _reply(data.message, DEFAULT_USER_NAME, provider, chat_log)

@router.post("/api/chat", response_model=ChatResponse, summary="Send a message to ROY as a named user")
@limiter.limit("30/minute")
async def api_chat(
    request: Request,
    data: ApiChatRequest,
    provider: Optional[AIProvider] = Depends(get_ai_provider),
    chat_log: ChatLogStore = Depends(get_chat_log),
    users: UserRepository = Depends(get_user_repository),
):
    """
    Same as `POST /chat`, addressing the user by name.

    The name comes from `userName`, otherwise from the stored user `uid`, otherwise "User".
    """
    user_name = await resolve_user_name(data.user_name, data.uid, users)
    return await _reply(data.message, user_name, provider, chat_log)

@router.post("/api/exercise", response_model=ExerciseSuggestion)
@limiter.limit("30/minute")
async def exercise(request: Request, data: ExerciseRequest):
    suggestion = suggest_exercise(data.context, data.user_name)
    logger.info(f"Generated exercise for {data.user_name or DEFAULT_USER_NAME}")
    return ExerciseSuggestion(exercise=suggestion)

@router.post("/api/save-conversation")
@limiter.limit("30/minute")
async def save_conversation(
    request: Request,
    data: SaveConversationRequest,
    chat_log: ChatLogStore = Depends(get_chat_log),
):
    """Appends both sides of an exchange to the chat log."""
    for text in (data.message, data.response):
        (await chat_log.append(text)).unwrap()
    logger.info(f"Saved conversation for {data.user_name}")
    return {"success": True}

from typing import Optional

from fastapi import Depends, Request

from roybot.db.chat_log import ChatLogStore
from roybot.db.repositories import ConversationRepository, ExerciseRepository, UserRepository
from roybot.db.session import ConnectionManager
from roybot.services.ai_provider import AIProvider

# Resources are created once in the application lifespan and kept on app.state

def get_connection_manager(request: Request) -> ConnectionManager:
    return request.app.state.db

def get_chat_log(request: Request) -> ChatLogStore:
    return request.app.state.chat_log

def get_ai_provider(request: Request) -> Optional[AIProvider]:
    return request.app.state.ai_provider

def get_user_repository(manager: ConnectionManager = Depends(get_connection_manager)) -> UserRepository:
    return UserRepository(manager)

def get_conversation_repository(manager: ConnectionManager = Depends(get_connection_manager)) -> ConversationRepository:
    return ConversationRepository(manager)

def get_exercise_repository(manager: ConnectionManager = Depends(get_connection_manager)) -> ExerciseRepository:
    return ExerciseRepository(manager)

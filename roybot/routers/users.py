from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from typing import List

from roybot.core.utils.dependencies import (
    get_conversation_repository,
    get_exercise_repository,
    get_user_repository,
)
from roybot.core.utils.rate_limiter import limiter
from roybot.db.repositories import ConversationRepository, ExerciseRepository, UserRepository
from roybot.schemas.conversation import ConversationFields, ConversationRecord
from roybot.schemas.exercise import ExerciseFields, ExerciseRecord
from roybot.schemas.user import UserCreate, UserRead, UserUpdate
from roybot.services.registration import register_user
from roybot.services.users import UserService

router = APIRouter(prefix="/api/users", tags=["users"])

@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED, summary="Sign up a new user")
@limiter.limit("10/minute")
async def create_user(request: Request, user: UserCreate, users: UserRepository = Depends(get_user_repository)):
    """
    Registers a new user.

    - **Rate Limit**: 10 requests per minute.
    - The password is hashed before being stored.

    Raises:
    - **HTTPException** (400): If the email is already registered.
    - **HTTPException** (422): If the payload is invalid.
    """
    return await register_user(user, users)

@router.get("", response_model=UserRead, summary="Find a user by email")
async def get_user_by_email(email: str = Query(...), users: UserRepository = Depends(get_user_repository)):
    user = (await users.get_by_email(email)).unwrap()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserRead.model_validate(user.model_dump())

@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int, users: UserRepository = Depends(get_user_repository)):
    return await UserService.get_user(user_id, users)

@router.patch("/{user_id}", response_model=UserRead)
async def update_user(user_id: int, user_update: UserUpdate, users: UserRepository = Depends(get_user_repository)):
    """
    Partial update of a user's name, email or password.
    Only fields present in the body are changed.
    """
    return await UserService.update_user(user_id, user_update, users)

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, users: UserRepository = Depends(get_user_repository)):
    """Deletes the user together with their conversations and exercises."""
    if not (await users.delete(user_id)).unwrap():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

async def _require_user(user_id: int, users: UserRepository) -> None:
    if (await users.get_by_id(user_id)).unwrap() is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

@router.get("/{user_id}/conversations", response_model=List[ConversationRecord])
async def list_conversations(
    user_id: int,
    conversations: ConversationRepository = Depends(get_conversation_repository),
):
    """Conversations of a user, most recent first."""
    return (await conversations.list_by_parent(user_id)).unwrap()

@router.post("/{user_id}/conversations", response_model=ConversationRecord, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    user_id: int,
    conversation: ConversationFields,
    users: UserRepository = Depends(get_user_repository),
    conversations: ConversationRepository = Depends(get_conversation_repository),
):
    await _require_user(user_id, users)
    if conversation.title is None:
        conversation = ConversationFields(title="New Chat")
    conversation_id = (await conversations.create(conversation, parent_id=user_id)).unwrap()
    return (await conversations.get_by_id(conversation_id)).unwrap()

@router.get("/{user_id}/exercises", response_model=List[ExerciseRecord])
async def list_exercises(
    user_id: int,
    exercises: ExerciseRepository = Depends(get_exercise_repository),
):
    """Exercises of a user, most recent first."""
    return (await exercises.list_by_parent(user_id)).unwrap()

@router.post("/{user_id}/exercises", response_model=ExerciseRecord, status_code=status.HTTP_201_CREATED)
async def create_exercise(
    user_id: int,
    exercise: ExerciseFields,
    users: UserRepository = Depends(get_user_repository),
    exercises: ExerciseRepository = Depends(get_exercise_repository),
):
    await _require_user(user_id, users)
    exercise_id = (await exercises.create(exercise, parent_id=user_id)).unwrap()
    return (await exercises.get_by_id(exercise_id)).unwrap()

from fastapi import APIRouter, Depends, HTTPException, Response, status

from roybot.core.utils.dependencies import get_conversation_repository, get_exercise_repository
from roybot.db.repositories import ConversationRepository, ExerciseRepository
from roybot.schemas.conversation import ConversationChanges, ConversationRecord
from roybot.schemas.exercise import ExerciseChanges, ExerciseRecord

# Conversations and exercises addressed by their own id. There is no ownership
# check: any caller can read or change any row.
conversations_router = APIRouter(prefix="/api/conversations", tags=["conversations"])
exercises_router = APIRouter(prefix="/api/exercises", tags=["exercises"])

def _not_found(entity: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")

@conversations_router.get("/{conversation_id}", response_model=ConversationRecord)
async def get_conversation(
    conversation_id: int,
    conversations: ConversationRepository = Depends(get_conversation_repository),
):
    conversation = (await conversations.get_by_id(conversation_id)).unwrap()
    if conversation is None:
        raise _not_found("Conversation")
    return conversation

@conversations_router.patch("/{conversation_id}", response_model=ConversationRecord)
async def update_conversation(
    conversation_id: int,
    changes: ConversationChanges,
    conversations: ConversationRepository = Depends(get_conversation_repository),
):
    if not (await conversations.update(conversation_id, changes)).unwrap():
        raise _not_found("Conversation")
    return (await conversations.get_by_id(conversation_id)).unwrap()

@conversations_router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: int,
    conversations: ConversationRepository = Depends(get_conversation_repository),
):
    if not (await conversations.delete(conversation_id)).unwrap():
        raise _not_found("Conversation")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@exercises_router.get("/{exercise_id}", response_model=ExerciseRecord)
async def get_exercise(
    exercise_id: int,
    exercises: ExerciseRepository = Depends(get_exercise_repository),
):
    exercise = (await exercises.get_by_id(exercise_id)).unwrap()
    if exercise is None:
        raise _not_found("Exercise")
    return exercise

@exercises_router.patch("/{exercise_id}", response_model=ExerciseRecord)
async def update_exercise(
    exercise_id: int,
    changes: ExerciseChanges,
    exercises: ExerciseRepository = Depends(get_exercise_repository),
):
    if not (await exercises.update(exercise_id, changes)).unwrap():
        raise _not_found("Exercise")
    return (await exercises.get_by_id(exercise_id)).unwrap()

@exercises_router.delete("/{exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_exercise(
    exercise_id: int,
    exercises: ExerciseRepository = Depends(get_exercise_repository),
):
    if not (await exercises.delete(exercise_id)).unwrap():
        raise _not_found("Exercise")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

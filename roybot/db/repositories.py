from typing import Optional

from roybot.db.repository import Repository
from roybot.db.result import Result
from roybot.models.conversations import Conversation
from roybot.models.exercises import Exercise
from roybot.models.users import User
from roybot.schemas.conversation import ConversationChanges, ConversationFields, ConversationRecord
from roybot.schemas.exercise import ExerciseChanges, ExerciseFields, ExerciseRecord
from roybot.schemas.user import UserChanges, UserFields, UserRecord


class UserRepository(Repository[UserRecord]):
    entity = "user"
    table = User.__table__
    fields_schema = UserFields
    changes_schema = UserChanges
    record_schema = UserRecord

    async def get_by_email(self, email: str) -> Result[Optional[UserRecord]]:
        return await self.find_one(self.table.c.email == email, "fetch user by email")


class ConversationRepository(Repository[ConversationRecord]):
    entity = "conversation"
    table = Conversation.__table__
    fields_schema = ConversationFields
    changes_schema = ConversationChanges
    record_schema = ConversationRecord
    parent_column = "user_id"


class ExerciseRepository(Repository[ExerciseRecord]):
    entity = "exercise"
    table = Exercise.__table__
    fields_schema = ExerciseFields
    changes_schema = ExerciseChanges
    record_schema = ExerciseRecord
    parent_column = "user_id"

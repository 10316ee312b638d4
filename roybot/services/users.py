from fastapi import HTTPException, status

from roybot.core.utils.hash import get_password_hash
from roybot.db.repositories import UserRepository
from roybot.schemas.user import UserRead, UserUpdate

class UserService:
    @staticmethod
    async def get_user(user_id: int, users: UserRepository) -> UserRead:
        user = (await users.get_by_id(user_id)).unwrap()
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        return UserRead.model_validate(user.model_dump())

    @staticmethod
    async def update_user(user_id: int, user_update: UserUpdate, users: UserRepository) -> UserRead:
        """Partial update; a new password is stored as its hash"""
        # name, email and password_hash are NOT NULL, so an explicit null means "leave as is"
        update_data = {
            field: value
            for field, value in user_update.model_dump(exclude_unset=True).items()
            if value is not None
        }

        if "password" in update_data:
            update_data["password_hash"] = get_password_hash(update_data.pop("password"))

        updated = (await users.update(user_id, update_data)).unwrap()
        if not updated:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        return await UserService.get_user(user_id, users)

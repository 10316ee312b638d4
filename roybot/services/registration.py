from fastapi import HTTPException, status
import logging

from roybot.schemas.user import UserCreate, UserRead, UserFields
from roybot.db.repositories import UserRepository
from roybot.core.utils.hash import get_password_hash

logger = logging.getLogger(__name__)

async def register_user(user_data: UserCreate, users: UserRepository) -> UserRead:
    # Email uniqueness is only enforced here, the users table has no constraint
    existing = (await users.get_by_email(user_data.email)).unwrap()
    if existing is not None:
        logger.warning(f"Registration failed: email {user_data.email} already exists")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists."
        )

    created = await users.create(UserFields(
        name=user_data.name,
        email=user_data.email,
        password_hash=get_password_hash(user_data.password),
    ))
    if not created.success:
        logger.error(f"Could not create user {user_data.email}: {created.error}")
    user_id = created.unwrap()

    new_user = (await users.get_by_id(user_id)).unwrap()
    logger.info(f"User registered: {new_user.id}")
    return UserRead.model_validate(new_user.model_dump())

from typing import Optional

from beanie import PydanticObjectId

from lumina.models.identifier import Identifier
from lumina.schemas.user import DEFAULT_BIO, User, default_avatar


async def get_user_by_identifier(identifier: Identifier) -> Optional[User]:
    if identifier.is_email:
        return await User.find_one(User.email == identifier.value)
    return await User.find_one(User.phone == identifier.value)


async def get_user_by_id(user_id: str) -> Optional[User]:
    if not PydanticObjectId.is_valid(user_id):
        return None
    return await User.get(PydanticObjectId(user_id))


async def create_user(
    name: str,
    identifier: Identifier,
    password_hash: Optional[str] = None,
    email: Optional[str] = None,
) -> User:
    user = User(
        name=name,
        email=identifier.value if identifier.is_email else email,
        phone=None if identifier.is_email else identifier.value,
        password=password_hash,
        avatar=default_avatar(name),
        bio=DEFAULT_BIO,
        email_verified=identifier.is_email,
        phone_verified=not identifier.is_email,
    )
    await user.insert()
    return user


async def set_password(user: User, password_hash: str) -> None:
    user.password = password_hash
    await user.save()


def serialize_user(user) -> dict:
    """Public profile fields; never includes the password hash."""
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "avatar": user.avatar,
        "bio": user.bio,
    }

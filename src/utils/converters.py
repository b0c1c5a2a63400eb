"""Conversions between database models and pydantic schemas."""

from models.item import ItemModel
from models.user import UserModel
from schemas.item import Item
from schemas.user import User


def user_to_model(user: User) -> UserModel:
    return UserModel(
        user_id=user.user_id,
        username=user.username,
        password_hash=user.password_hash,
        role=user.role,
        create_at=user.create_at,
    )


def model_to_user(model: UserModel) -> User:
    return User(
        user_id=model.user_id,
        username=model.username,
        password_hash=model.password_hash,
        role=model.role,
        create_at=model.create_at,
    )


def model_to_item(model: ItemModel) -> Item:
    return Item.model_validate(model)

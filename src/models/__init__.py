"""Database models package.

Importing this package registers every model with ``Base.metadata``.
"""

from .base import Base
from .user import UserModel
from .item import ItemModel
from .contact_message import ContactMessageModel

__all__ = ["Base", "UserModel", "ItemModel", "ContactMessageModel"]

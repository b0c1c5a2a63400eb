"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes,
following Google Python Style Guide and FastAPI best practices.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from utils import contact_manager
from utils import inventory_manager
from utils import session_manager
from utils import user_manager

# Singleton for SessionManager (login sessions live in process memory)
_session_manager_instance: session_manager.SessionManager = None


def get_session_manager() -> session_manager.SessionManager:
    """Get SessionManager singleton instance.

    Returns:
        SessionManager instance (singleton).
    """
    global _session_manager_instance
    if _session_manager_instance is None:
        _session_manager_instance = session_manager.SessionManager()
    return _session_manager_instance


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_inventory_manager(
    db: Session = Depends(get_db),
) -> inventory_manager.InventoryManager:
    """Get InventoryManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        InventoryManager instance.
    """
    return inventory_manager.InventoryManager(db)


def get_contact_manager(db: Session = Depends(get_db)) -> contact_manager.ContactManager:
    """Get ContactManager instance with request-scoped DB session."""
    return contact_manager.ContactManager(db)


# Type aliases for dependency injection
SessionManagerDep = Annotated[
    session_manager.SessionManager, Depends(get_session_manager)
]
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
InventoryManagerDep = Annotated[
    inventory_manager.InventoryManager, Depends(get_inventory_manager)
]
ContactManagerDep = Annotated[
    contact_manager.ContactManager, Depends(get_contact_manager)
]

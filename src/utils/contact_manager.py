import logging
from datetime import datetime

import pytz
from sqlalchemy.orm import Session

from core.exceptions import ValidationError
from models.contact_message import ContactMessageModel

logger = logging.getLogger(__name__)


class ContactManager:
    """Stores messages sent through the contact form."""

    def __init__(self, db: Session):
        self.db = db

    def submit(
        self, name: str, email: str, subject: str, message: str
    ) -> ContactMessageModel:
        """Save a contact message. Every field is required."""
        fields = [f.strip() if f else "" for f in (name, email, subject, message)]
        if not all(fields):
            raise ValidationError("All fields are required.")
        name, email, subject, message = fields

        model = ContactMessageModel(
            name=name,
            email=email,
            subject=subject,
            message=message,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Received contact message %s from %s", model.id, email)
        return model

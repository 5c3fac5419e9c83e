"""
Email Message Model

One row per ingested mailbox message. The fetcher that fills this table
is outside this package; the import engine only reads thread_id and
flips processed once a message has been reconciled.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Boolean, Index
from ..database import Base


class EmailMessage(Base):
    __tablename__ = "email_messages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Mailbox identifiers
    external_message_id = Column(String(255), unique=True, nullable=False)
    thread_id = Column(String(255), nullable=True, index=True)

    sender = Column(String(255), nullable=True)
    subject = Column(Text, nullable=True)
    snippet = Column(Text, nullable=True)
    received_at = Column(DateTime, nullable=True)

    # Flipped by the import engine; unprocessed rows show up for review
    processed = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_email_messages_processed_received", "processed", "received_at"),
    )

    def __repr__(self):
        return f"<EmailMessage {self.external_message_id} processed={self.processed}>"

"""Email job model — bookkeeping for messages on the email channel."""

import enum

from sqlalchemy import Column, String, DateTime, Text

from estate_scraper.models.base import Base, CreatedAtMixin, IdMixin


class EmailJobStatus(str, enum.Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class EmailJob(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "email_jobs"

    recipient_email = Column(String(255), nullable=False)
    subject = Column(String(255))
    status = Column(String(20), nullable=False, default=EmailJobStatus.PENDING.value)
    sent_at = Column(DateTime(timezone=True))
    error_message = Column(Text)

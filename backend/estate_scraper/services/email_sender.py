"""Outbound email delivery.

Only a logging sender ships; a real SMTP or API backed sender plugs in
by implementing ``send`` and being returned from ``get_email_sender``.
"""

import logging
from abc import ABC, abstractmethod

from estate_scraper.schemas.messages import EmailJobMessage

logger = logging.getLogger(__name__)


class EmailSender(ABC):
    @abstractmethod
    def send(self, message: EmailJobMessage) -> None:
        """Deliver one email. Raising marks the job FAILED."""


class LoggingEmailSender(EmailSender):
    def send(self, message: EmailJobMessage) -> None:
        logger.info(
            f"Email {message.email_type} to {message.recipient_email} "
            f"(job {message.job_id}): {message.data}"
        )


def get_email_sender() -> EmailSender:
    return LoggingEmailSender()

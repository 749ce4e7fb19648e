"""Email provider protocol."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class EmailMessage:
    """An outbound HTML email."""

    to: str
    subject: str
    body: str
    from_name: str


class IEmailProvider(Protocol):
    """Protocol for outbound email transports."""

    async def send(self, message: EmailMessage) -> None:
        """
        Send one email.

        Args:
            message: The email to deliver

        Raises:
            EmailSendError: If the transport rejected or failed the send
        """
        ...

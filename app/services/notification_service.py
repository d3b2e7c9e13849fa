"""Notifier boundary and its LINE messaging implementation."""
from abc import ABC, abstractmethod
from linebot.v3.messaging import (
    Configuration,
    ApiClient,
    MessagingApi,
    PushMessageRequest,
    TextMessage
)
from linebot.v3.messaging.exceptions import ApiException
from typing import Optional
import logging

from app.config import settings


# Configure logging
logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Delivers a due reminder to its owner."""

    @abstractmethod
    def notify(
        self,
        reminder_id: str,
        user_id: str,
        title: str,
        description: Optional[str]
    ) -> bool:
        """Deliver a due reminder. Returns True when delivery succeeded."""
        pass


class LineNotifier(Notifier):
    """Notifier that pushes reminder messages through the LINE Messaging API.

    The owning user ID of a reminder is used as the LINE push target. Each
    call makes a single push attempt bounded by ``settings.line_api_timeout``.
    A failed push is not queued: the reminder stays due and the poller
    delivers it again on its next tick, unless an action has been logged in
    the meantime.
    """

    def __init__(self, access_token: Optional[str] = None):
        """Initialize notifier with LINE Messaging API credentials."""
        self.configuration = Configuration(
            access_token=access_token if access_token is not None else settings.line_channel_access_token
        )

    def _send_message(self, user_id: str, message: str) -> bool:
        """
        Send a LINE push message.

        Args:
            user_id: LINE user ID
            message: Message text to send

        Returns:
            True if message sent successfully, False otherwise
        """
        try:
            with ApiClient(self.configuration) as api_client:
                line_bot_api = MessagingApi(api_client)

                push_message_request = PushMessageRequest(
                    to=user_id,
                    messages=[TextMessage(text=message)]
                )

                line_bot_api.push_message(
                    push_message_request,
                    _request_timeout=settings.line_api_timeout
                )

                logger.info(f"Successfully sent message to user {user_id}")
                return True

        except ApiException as e:
            logger.error(
                f"LINE API error sending message to {user_id}: "
                f"Status {e.status}, Body: {e.body}"
            )
            return False

        except Exception as e:
            logger.error(f"Unexpected error sending message to {user_id}: {str(e)}")
            return False

    @staticmethod
    def format_message(title: str, description: Optional[str]) -> str:
        """Build the push text for a due reminder."""
        message = f"[Reminder] {title}"
        if description:
            message += f"\n{description}"
        return message

    def notify(
        self,
        reminder_id: str,
        user_id: str,
        title: str,
        description: Optional[str]
    ) -> bool:
        """
        Push a due reminder to its owner.

        Args:
            reminder_id: ID of the due reminder
            user_id: LINE user ID of the owner
            title: Reminder title
            description: Reminder description (optional)

        Returns:
            True if message sent successfully, False otherwise
        """
        if not user_id:
            logger.error(f"Cannot notify reminder {reminder_id}: user_id is required")
            return False

        logger.info(f"Notifying user {user_id} of due reminder {reminder_id}")
        return self._send_message(user_id, self.format_message(title, description))

"""
User-visible notifications for calendar failures
"""

from datetime import datetime
from typing import Any

from src.utils.mixins import LoggerMixin


class LoggingNotificationSink(LoggerMixin):
    """通知をログに出力し、直近の履歴を保持する"""

    def __init__(self, max_history: int = 100) -> None:
        self.notification_history: list[dict[str, Any]] = []
        self.max_history = max_history

    def notify(self, message: str) -> None:
        self.logger.warning("Calendar notice", notice=message)
        self.notification_history.append(
            {"message": message, "timestamp": datetime.now()}
        )
        if len(self.notification_history) > self.max_history:
            self.notification_history = self.notification_history[
                -self.max_history :
            ]

    @property
    def messages(self) -> list[str]:
        return [item["message"] for item in self.notification_history]

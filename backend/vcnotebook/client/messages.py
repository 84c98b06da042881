"""Transient user-visible messages."""

import enum
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Deque, List, Optional

logger = logging.getLogger(__name__)


class MessageLevel(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Message:
    text: str
    level: MessageLevel
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Collects messages for the UI to show as toasts.

    Keeps the last `maxlen` messages; an optional listener is called for
    each new one.
    """

    def __init__(
        self,
        listener: Optional[Callable[[Message], None]] = None,
        maxlen: int = 50,
    ):
        self.listener = listener
        self._messages: Deque[Message] = deque(maxlen=maxlen)

    def show(self, text: str, level: MessageLevel = MessageLevel.INFO) -> Message:
        message = Message(text=text, level=level)
        self._messages.append(message)
        log_level = logging.ERROR if level == MessageLevel.ERROR else logging.INFO
        logger.log(log_level, text, extra={"message_level": level.value})
        if self.listener is not None:
            self.listener(message)
        return message

    def info(self, text: str) -> Message:
        return self.show(text, MessageLevel.INFO)

    def success(self, text: str) -> Message:
        return self.show(text, MessageLevel.SUCCESS)

    def error(self, text: str) -> Message:
        return self.show(text, MessageLevel.ERROR)

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def errors(self) -> List[Message]:
        return [m for m in self._messages if m.level == MessageLevel.ERROR]

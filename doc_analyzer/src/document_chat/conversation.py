from typing import Awaitable, Callable, List

from doc_analyzer.logger import GLOBAL_LOGGER as log
from doc_analyzer.models.documents import ChatMessage

GREETING = (
    "Hello! I'm ready to help you analyze your uploaded documents. "
    "Ask me anything about the content you've shared."
)
ERROR_REPLY = (
    "I apologize, but I encountered an error while processing your message. "
    "Please try again."
)


class Conversation:
    """Append-only chat log of one workspace, opened by the assistant greeting."""

    def __init__(self, greeting: str = GREETING):
        self._messages: List[ChatMessage] = [ChatMessage(role="assistant", content=greeting)]

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def append(self, role: str, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self._messages.append(message)
        return message

    async def ask(self, text: str, responder: Callable[[str], Awaitable[str]]) -> ChatMessage:
        """
        Record the user's message, await the responder and record its reply.
        A failing responder is logged and answered with ERROR_REPLY instead.
        """
        text = (text or "").strip()
        if not text:
            raise ValueError("message must not be empty")

        self.append("user", text)

        try:
            reply = await responder(text)
        except Exception as e:
            log.error("Error sending message | error=%s", str(e))
            reply = ERROR_REPLY

        return self.append("assistant", reply)

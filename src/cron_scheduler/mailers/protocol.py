from typing import List, Protocol, runtime_checkable


class MessageBuilder(Protocol):
    def set_text_body(self, body: str) -> "MessageBuilder":
        ...

    def set_subject(self, subject: str) -> "MessageBuilder":
        ...

    def set_to(self, addresses: List[str]) -> "MessageBuilder":
        ...

    async def send(self) -> bool:
        """Send the message. Return True if it was accepted for delivery."""
        ...


@runtime_checkable
class Mailer(Protocol):
    def compose(self) -> MessageBuilder:
        """Start a new message."""
        ...

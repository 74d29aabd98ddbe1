from .protocol import Mailer, MessageBuilder

__all__ = ["Mailer", "MessageBuilder"]

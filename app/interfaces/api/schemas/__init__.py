from .notify_message import NotifyMessageRead

__all__ = ["NotifyMessageRead"]

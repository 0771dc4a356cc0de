"""Notifier port — abstract interface for outbound order notifications."""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Abstract interface for notification delivery adapters."""

    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> dict:
        """Deliver a message to ``to``.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...

"""Notifier protocol — operational notification channel abstraction."""
from typing import Protocol


class Notifier(Protocol):
    """Channel for sizing outcomes.

    ``send_alert`` carries operational errors that need a human (broken price
    feed, swap bound violations); ``send_log`` carries routine decisions,
    including business rejections.
    """

    async def send_alert(self, message: str, subject: str = "") -> bool: ...

    async def send_log(self, message: str, silent: bool = True) -> bool: ...

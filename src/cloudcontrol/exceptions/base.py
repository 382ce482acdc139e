"""Root of the Cloud Control error hierarchy.

Errors raised by the bridge are read by two audiences: the operator at
the console, who gets `user_message` and `recovery_hint`, and the log
file, which gets `technical_message` with the API or parser detail.
`recoverable` tells the caller whether the bridge keeps running (a
rejected scale write) or has to give up (no cluster client at startup).
"""

from typing import Optional


class CloudControlError(Exception):
    """Base class for errors raised by Cloud Control."""

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
    ):
        """
        Args:
            user_message: One line for the console
            technical_message: Detail for the log file (defaults to user_message)
            recoverable: True if the bridge can carry on after this error
            recovery_hint: What the operator can do about it
        """
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    def get_full_message(self) -> str:
        """Console text: the message, then the hint if there is one."""
        if not self.recovery_hint:
            return self.user_message
        return f"{self.user_message}\n\nSuggestion: {self.recovery_hint}"

"""Errors raised when the server refuses a request."""


class Rejected(Exception):
    """A refused request, carrying the reason that is sent back to the peer."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def reply(self) -> str:
        """Return the reply line the server sends for this refusal."""
        return f"REJECTED ({self.reason})\n"
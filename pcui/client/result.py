"""
Operation Result.

Every resource operation returns exactly one OperationResult. Failures are
values, not exceptions: the shell inspects `failed` to decide whether a
navigation step may proceed.
"""

from pydantic import BaseModel, ConfigDict


def failure_message(command: str, error: object) -> str:
    """Format the one-line failure text shown to the operator."""
    return f"{command} failed. <{error}>"


class OperationResult(BaseModel):
    """Outcome of one command against the remote service."""

    url: str
    message: str = ""
    content: bytes | None = None
    failed: bool = False
    error: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def success(cls, url: str, message: str = "", content: bytes | None = None) -> "OperationResult":
        return cls(url=url, message=message, content=content)

    @classmethod
    def failure(cls, url: str, command: str, error: object) -> "OperationResult":
        text = failure_message(command, error)
        return cls(url=url, message=text, failed=True, error=text)

    def with_message(self, message: str) -> "OperationResult":
        """Return a copy carrying a post-processed message."""
        return self.model_copy(update={"message": message})

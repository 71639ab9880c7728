"""Page-level messages shown above the page body."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Banner:
    """A single message; `detail` is only rendered in local environments."""

    message: str
    kind: str = "error"
    detail: str | None = None

    @classmethod
    def from_exception(cls, message: str, exc: Exception) -> "Banner":
        detail = f"{type(exc).__name__}: {exc}".strip()
        return cls(message=message, detail=detail or None)

    @classmethod
    def success(cls, message: str) -> "Banner":
        return cls(message=message, kind="success")

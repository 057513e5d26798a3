from dataclasses import dataclass
from typing import Literal, Optional, Protocol

InsightTask = Literal["resume", "coding", "portfolio"]


@dataclass(frozen=True)
class InsightRequest:
    task: InsightTask
    target_role: str
    input_excerpt: str


class InsightProviderError(RuntimeError):
    def __init__(self, message: str, *, code: str = "provider_error"):
        super().__init__(message)
        self.code = code


class InsightProvider(Protocol):
    name: str
    model: str

    def complete(self, request: InsightRequest) -> Optional[str]: ...

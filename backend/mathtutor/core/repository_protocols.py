"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO; the pure functions that
      consume their results are never async themselves
"""

from datetime import datetime
from typing import Protocol

from mathtutor.core.domain_types import AiCallType, UserId


class CurriculumReader(Protocol):
    """Read side of the curriculum document store."""
    async def get_levels(self) -> list[dict]: ...


class UsageLogRepository(Protocol):
    """Contract for AI usage log persistence — implemented by shell."""
    async def count_since(
        self, user_id: UserId, call_type: AiCallType, since: datetime,
    ) -> int: ...
    async def record(self, user_id: UserId, call_type: AiCallType) -> None: ...


class TextCompletionClient(Protocol):
    """Anything that turns a single user prompt into model text."""
    async def complete(self, prompt: str, *, max_tokens: int | None = None) -> str: ...

from __future__ import annotations

from dataclasses import dataclass

from .config import Settings
from .store import Store


@dataclass(slots=True, frozen=True)
class TurnContext:
    """Request-scoped state threaded from the route through the graph into tool handlers."""

    conversation_id: str
    user_id: str | None
    settings: Settings
    store: Store

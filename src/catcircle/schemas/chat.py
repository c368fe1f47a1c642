"""Chat message model (direct and group)."""

from __future__ import annotations

from catcircle.schemas.base import CamelModel


class ChatMessage(CamelModel):
    id: str
    sender_id: str
    text: str | None = None
    image_url: str | None = None
    timestamp: int

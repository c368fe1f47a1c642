"""Session bootstrap — everything the app needs once a user is known."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from catcircle.errors import AuthError
from catcircle.schemas.chat import ChatMessage
from catcircle.schemas.mall import PurchaseRecord
from catcircle.schemas.profiles import OwnerProfile
from catcircle.shared.api_client import ApiClient

logger = logging.getLogger(__name__)


@dataclass
class Session:
    user: OwnerProfile
    purchases: list[PurchaseRecord] = field(default_factory=list)
    following: list[str] = field(default_factory=list)
    messages: dict[str, list[ChatMessage]] = field(default_factory=dict)


async def load_session(api: ApiClient, user_id: str) -> Session:
    """Fetch the user plus their purchases, follows and DMs.

    The three collections are requested concurrently and applied together:
    if any request fails the error propagates and no ``Session`` is built.
    """
    user = await api.get_current_user(user_id)
    if user is None:
        raise AuthError(f"No account with id {user_id!r}")

    purchases, following, messages = await asyncio.gather(
        api.get_purchases(user.id),
        api.get_following(user.id),
        api.get_direct_messages(user.id),
    )
    logger.debug(
        "Session for %s: %d purchases, %d follows, %d threads",
        user.id, len(purchases), len(following), len(messages),
    )
    return Session(user=user, purchases=purchases, following=following, messages=messages)

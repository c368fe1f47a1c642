"""Sign up / sign in against the local user table."""

from __future__ import annotations

import logging
import re

from catcircle.errors import AuthError
from catcircle.schemas.base import new_id
from catcircle.schemas.config import RewardSettings
from catcircle.schemas.profiles import CatProfile, OwnerProfile
from catcircle.shared.fixtures import CAT_BREEDS
from catcircle.shared.storage import LocalDB

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class AuthService:
    """Account creation and the persisted session pointer.

    Every rejection raises ``AuthError`` before anything is written.
    """

    def __init__(self, db: LocalDB, *, rewards: RewardSettings | None = None) -> None:
        self.db = db
        self.rewards = rewards or RewardSettings()

    def sign_up(
        self,
        account_name: str,
        email: str,
        cat_name: str,
        cat_breed: str = "Other",
    ) -> OwnerProfile:
        account_name, email, cat_name = account_name.strip(), email.strip(), cat_name.strip()
        if not account_name or not email or not cat_name:
            raise AuthError("Your name, email, and cat's name are all required!")
        if not EMAIL_RE.match(email):
            raise AuthError("Please enter a valid email address.")
        if cat_breed not in CAT_BREEDS:
            raise AuthError(f"Unknown breed {cat_breed!r}. Choose one of: {', '.join(CAT_BREEDS)}")

        lowered = email.lower()
        if any(u.email and u.email.lower() == lowered for u in self.db.get_users()):
            raise AuthError("This email is already registered. Please sign in.")

        owner_id = new_id("owner", 5)
        cat_id = new_id("cat", 5)
        user = OwnerProfile(
            id=owner_id,
            account_name=account_name,
            email=email,
            avatar=f"https://i.pravatar.cc/150?u={owner_id}",
            bio="New member of the CatCircle family!",
            coin_balance=self.rewards.signup_balance,
            cats=[
                CatProfile(
                    id=cat_id,
                    owner_id=owner_id,
                    name=cat_name,
                    breed=cat_breed,
                    age=1,
                    gender="Female",
                    neutered=True,
                    personality=["Curious"],
                    avatar=f"https://picsum.photos/seed/{cat_id}/200/200",
                    bio="The start of a grand adventure.",
                )
            ],
            interests=[cat_breed],
        )
        self.db.save_user(user)
        self.db.set_current_user_id(user.id)
        logger.info("Registered %s (%s)", user.account_name, user.id)
        return user

    def sign_in(self, name_or_email: str) -> OwnerProfile:
        """Match an account name or email, ignoring case."""
        wanted = name_or_email.strip().lower()
        for user in self.db.get_users():
            if user.account_name.lower() == wanted or (user.email and user.email.lower() == wanted):
                self.db.set_current_user_id(user.id)
                return user
        raise AuthError("User not found. Check your name/email or Sign Up!")

    def sign_out(self) -> None:
        self.db.set_current_user_id(None)
        self.db.set_token(None)

    def current_user(self) -> OwnerProfile | None:
        user_id = self.db.get_current_user_id()
        return self.db.find_user(user_id) if user_id else None

    def require_user(self) -> OwnerProfile:
        user = self.current_user()
        if user is None:
            raise AuthError("Not signed in. Run `catcircle signin` or `catcircle signup` first.")
        return user

"""Owner and cat profile edits. Every change re-saves the whole owner record."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from catcircle.errors import ValidationFailed
from catcircle.schemas.base import new_id
from catcircle.schemas.profiles import CatProfile, OwnerProfile
from catcircle.shared.api_client import ApiClient
from catcircle.shared.fixtures import CAT_BREEDS

# Fields an owner may edit directly; balances and counters change only through
# their own operations.
EDITABLE_OWNER_FIELDS = frozenset({"account_name", "avatar", "bio", "interests"})
EDITABLE_CAT_FIELDS = frozenset(
    {"name", "breed", "age", "gender", "neutered", "personality", "health_tags", "avatar", "bio"}
)


def _check_fields(changes: dict[str, Any], allowed: frozenset[str]) -> None:
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValidationFailed(f"Cannot edit field(s): {', '.join(unknown)}")


def _validated_cat(data: dict[str, Any]) -> CatProfile:
    if data.get("breed") not in CAT_BREEDS:
        raise ValidationFailed(f"Unknown breed {data.get('breed')!r}. Choose one of: {', '.join(CAT_BREEDS)}")
    try:
        return CatProfile.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailed(f"Invalid cat profile: {exc}") from exc


class ProfileService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def _save(self, owner: OwnerProfile, **changes: Any) -> OwnerProfile:
        try:
            updated = OwnerProfile.model_validate({**owner.model_dump(), **changes})
        except ValidationError as exc:
            raise ValidationFailed(f"Invalid profile: {exc}") from exc
        await self.api.update_user(updated)
        return updated

    async def update_owner(self, owner: OwnerProfile, **changes: Any) -> OwnerProfile:
        _check_fields(changes, EDITABLE_OWNER_FIELDS)
        return await self._save(owner, **changes)

    async def add_cat(self, owner: OwnerProfile, name: str, breed: str = "Other", **fields: Any) -> CatProfile:
        _check_fields(fields, EDITABLE_CAT_FIELDS)
        if not name.strip():
            raise ValidationFailed("Your cat needs a name.")
        cat_id = new_id("cat", 5)
        cat = _validated_cat({
            "avatar": f"https://picsum.photos/seed/{cat_id}/200/200",
            **fields,
            "id": cat_id,
            "owner_id": owner.id,
            "name": name.strip(),
            "breed": breed,
        })
        await self._save(owner, cats=[*owner.cats, cat])
        return cat

    async def update_cat(self, owner: OwnerProfile, cat_id: str, **changes: Any) -> OwnerProfile:
        _check_fields(changes, EDITABLE_CAT_FIELDS)
        if not any(c.id == cat_id for c in owner.cats):
            raise ValidationFailed(f"{owner.account_name} has no cat with id {cat_id!r}")
        cats = [
            _validated_cat({**c.model_dump(), **changes}) if c.id == cat_id else c
            for c in owner.cats
        ]
        return await self._save(owner, cats=cats)

    async def delete_cat(self, owner: OwnerProfile, cat_id: str) -> OwnerProfile:
        if not any(c.id == cat_id for c in owner.cats):
            raise ValidationFailed(f"{owner.account_name} has no cat with id {cat_id!r}")
        return await self._save(owner, cats=[c for c in owner.cats if c.id != cat_id])

"""Profile lookups used to resolve review author names."""

from __future__ import annotations

from typing import Iterable

from django.db import DatabaseError

from apps.common.exceptions import BackendError

from .models import Profile


class ProfileStore:
    async def display_names(self, user_ids: Iterable[str]) -> dict[str, str]:
        """Return ``{user_id: full_name}`` for the given ids, skipping blank names."""

        ids = list(user_ids)
        if not ids:
            return {}
        names: dict[str, str] = {}
        try:
            rows = Profile.objects.filter(user_id__in=ids).values_list("user_id", "full_name")
            async for user_id, full_name in rows:
                if full_name and full_name.strip():
                    names[str(user_id)] = full_name.strip()
        except DatabaseError as exc:
            raise BackendError(f"profile lookup failed: {exc}") from exc
        return names

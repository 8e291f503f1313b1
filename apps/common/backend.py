"""Container for the persistence stores used by the service layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.apps import apps

if TYPE_CHECKING:
    from apps.accounts.stores import ProfileStore
    from apps.history.stores import WatchProgressStore
    from apps.reviews.stores import ReviewStore


@dataclass(slots=True)
class Backend:
    """Explicitly constructed bundle of stores, injected into services."""

    reviews: ReviewStore
    profiles: ProfileStore
    progress: WatchProgressStore

    @classmethod
    def from_settings(cls) -> Backend:
        from apps.accounts.stores import ProfileStore
        from apps.history.stores import WatchProgressStore
        from apps.reviews.stores import ReviewStore

        return cls(
            reviews=ReviewStore(),
            profiles=ProfileStore(),
            progress=WatchProgressStore(),
        )


def get_backend() -> Backend:
    """Return the backend owned by the ``common`` app config."""

    config = apps.get_app_config("common")
    if config.backend is None:
        config.backend = Backend.from_settings()
    return config.backend

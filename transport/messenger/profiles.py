"""
User Profile Cache

Memoizes Messenger user display metadata for the life of the process.

Policy:
- Hits return immediately, with no freshness check.
- Successful fetches are cached; fallbacks are not, so a later call
  retries the remote lookup.
- Entries are never evicted or refreshed. With `max_entries` set, a full
  cache stops admitting new users instead of replacing existing ones.
"""

import logging
from typing import Optional

from .credentials import CredentialResolver
from .graph import GraphAPIError, GraphClient
from .schemas import UserProfile

logger = logging.getLogger(__name__)


class ProfileCache:
    """In-memory user_id -> UserProfile mapping backed by the Graph API."""

    def __init__(
        self,
        resolver: CredentialResolver,
        graph: GraphClient,
        max_entries: Optional[int] = None,
    ):
        self._resolver = resolver
        self._graph = graph
        self._max_entries = max_entries
        self._profiles: dict[str, UserProfile] = {}

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._profiles

    @property
    def is_full(self) -> bool:
        return self._max_entries is not None and len(self._profiles) >= self._max_entries

    def clear(self) -> None:
        self._profiles.clear()

    async def get(self, user_id: str, page_id: str) -> UserProfile:
        """
        Return the profile of `user_id` as seen by `page_id`.

        Never raises: any failure degrades to UserProfile.fallback().
        """
        cached = self._profiles.get(user_id)
        if cached is not None:
            return cached

        access_token = self._resolver.resolve(page_id)
        if not access_token:
            return UserProfile.fallback(user_id)

        try:
            data = await self._graph.get_user_profile(user_id, access_token)
            profile = UserProfile(
                name=data["name"],
                profile_pic=data.get("profile_pic"),
            )
        except GraphAPIError as e:
            logger.error(f"Failed to fetch profile for user {user_id}: {e.message}")
            return UserProfile.fallback(user_id)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed profile response for user {user_id}: {e}")
            return UserProfile.fallback(user_id)

        if self.is_full:
            logger.warning(
                f"Profile cache full ({self._max_entries} entries), not caching user {user_id}"
            )
        else:
            self._profiles[user_id] = profile
        return profile

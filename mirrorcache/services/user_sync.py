"""
mirrorcache.services.user_sync — Current User
==============================================

The logged-in account is explicit cache state: it is stored when READY
arrives and refreshed on USER_UPDATE.  Anything that needs it before then
gets :class:`~mirrorcache.errors.CurrentUserMissing`, never a default.
"""

from __future__ import annotations

import logging

from mirrorcache.engine.backend import Backend
from mirrorcache.engine.events import EventType, Handler
from mirrorcache.engine.models import CurrentUser
from mirrorcache.engine.payloads import ReadyPayload, UserPayload
from mirrorcache.errors import CurrentUserMissing

logger = logging.getLogger(__name__)


async def require_current_user(backend: Backend) -> CurrentUser:
    """Return the cached current user or raise :class:`CurrentUserMissing`."""
    user = await backend.get_current_user()
    if user is None:
        raise CurrentUserMissing()
    return user


class UserSync:
    def __init__(self, backend: Backend) -> None:
        self.backend = backend

    def handlers(self) -> dict[EventType, Handler]:
        return {
            EventType.READY: self.on_ready,
            EventType.USER_UPDATE: self.on_user_update,
        }

    async def on_ready(self, ready: ReadyPayload) -> None:
        await self.backend.set_current_user(CurrentUser.from_payload(ready.user))
        logger.info("Current user set → %s (%d)", ready.user.username, ready.user.id)

    async def on_user_update(self, user: UserPayload) -> None:
        await self.backend.set_current_user(CurrentUser.from_payload(user))

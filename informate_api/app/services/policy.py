"""
Authorization hook for event mutations.

``EventService.update_event`` and ``delete_event`` call
``policy.check(actor, action, event_row)`` before writing.  Policies
decide who may change an event without the service knowing about
roles or ownership.

* ``AnyUserPolicy`` (``EVENT_EDIT_POLICY=any``): every authenticated
  caller may edit any event.  This is how the mobile backend behaved
  from the start; the app hides the edit buttons instead.
* ``CreatorOnlyPolicy`` (``EVENT_EDIT_POLICY=creator``): only the user
  who created the event may change it.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Type

from ..core.errors import ForbiddenError

logger = logging.getLogger(__name__)


class EventPolicy:
    name = "base"

    def check(self, actor: Optional[Any], action: str, event_row: Mapping[str, Any]) -> None:
        """Raise ``ForbiddenError`` if ``actor`` may not perform ``action``.

        ``actor`` is the authenticated ``UserRead`` or ``None`` for
        internal calls; ``event_row`` is the stored event.
        """
        raise NotImplementedError


class AnyUserPolicy(EventPolicy):
    name = "any"

    def check(self, actor, action, event_row) -> None:
        return None


class CreatorOnlyPolicy(EventPolicy):
    name = "creator"

    def check(self, actor, action, event_row) -> None:
        if actor is None:
            return None
        if event_row["creator_id"] != actor.user_id:
            logger.info(
                "User %s denied %s on event %s (creator %s)",
                actor.user_id, action, event_row["event_id"], event_row["creator_id"],
            )
            raise ForbiddenError("Hanya pembuat event yang dapat mengubah event ini")
        return None


POLICIES: Dict[str, Type[EventPolicy]] = {
    AnyUserPolicy.name: AnyUserPolicy,
    CreatorOnlyPolicy.name: CreatorOnlyPolicy,
}


def build_policy(name: str) -> EventPolicy:
    try:
        return POLICIES[name]()
    except KeyError:
        raise ValueError(f"Unknown event edit policy: {name!r}") from None

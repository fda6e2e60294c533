from typing import Callable

from ..domain.entities import NotificationKind, User

# (user_id, subject, body); must not block or raise into the caller
Dispatch = Callable[[int, str, str], None]


class INotifier:
    def notify(self, user_id: int, subject: str, body: str) -> bool: ...


def can_notify(user: User | None, kind: NotificationKind) -> bool:
    """True only if ``user`` has explicitly opted in to ``kind``.

    A missing user, a missing preferences mapping and an unset key all
    count as opted out.
    """
    if user is None or not user.notification_preferences:
        return False
    return user.notification_preferences.get(kind.value) is True

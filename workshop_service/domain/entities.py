from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import ClassVar


class Role(str, Enum):
    MENTOR = "mentor"
    LEARNER = "learner"


class EnrollmentStatus(str, Enum):
    PENDING = "pending"
    ENROLLED = "enrolled"
    COMPLETED = "completed"


class NotificationKind(str, Enum):
    ENROLLMENT = "enrollment"
    WORKSHOP_UPDATE = "workshopUpdate"
    NEW_ACTIVITY = "newActivity"


def default_notification_preferences() -> dict[str, bool]:
    return {kind.value: True for kind in NotificationKind}


class Capability(str, Enum):
    MANAGE_WORKSHOPS = "manage_workshops"
    CONFIRM_ENROLLMENTS = "confirm_enrollments"


@dataclass(frozen=True)
class User:
    id: int | None
    name: str
    email: str
    role: Role
    workshop_ids: tuple[int, ...] = ()
    notification_preferences: dict[str, bool] | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Activity:
    id: int
    title: str
    description: str
    schedule: datetime | None
    workshop_id: int | None


@dataclass(frozen=True)
class Workshop:
    id: int
    title: str
    description: str
    mentor_id: int | None
    activities: tuple[Activity, ...] = ()

    @property
    def activity_ids(self) -> list[int]:
        return [a.id for a in self.activities]


@dataclass(frozen=True)
class Enrollment:
    id: int
    learner_id: int
    workshop_id: int
    status: EnrollmentStatus
    created_at: datetime | None = None


# --- Resolved caller identity:

@dataclass(frozen=True)
class Identity:
    id: int
    name: str
    email: str

    capabilities: ClassVar[frozenset[Capability]] = frozenset()
    role: ClassVar[Role]

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities


@dataclass(frozen=True)
class Mentor(Identity):
    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.MANAGE_WORKSHOPS, Capability.CONFIRM_ENROLLMENTS}
    )
    role: ClassVar[Role] = Role.MENTOR


@dataclass(frozen=True)
class Learner(Identity):
    role: ClassVar[Role] = Role.LEARNER


def identity_for(user: User) -> Identity:
    cls = Mentor if user.role == Role.MENTOR else Learner
    return cls(id=user.id, name=user.name, email=user.email)

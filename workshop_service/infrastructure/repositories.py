from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from .metrics import db_queries_total
from .models import ActivityORM, EnrollmentORM, UserORM, WorkshopORM
from ..domain.entities import (
    Activity,
    Enrollment,
    EnrollmentStatus,
    Role,
    User,
    Workshop,
)
from ..application.use_cases import enrollment, register_user


def activity_to_domain(a: ActivityORM) -> Activity:
    return Activity(
        id=a.id,
        title=a.title,
        description=a.description,
        schedule=a.schedule,
        workshop_id=a.workshop_id,
    )

def workshop_to_domain(w: WorkshopORM) -> Workshop:
    return Workshop(
        id=w.id,
        title=w.title,
        description=w.description,
        mentor_id=w.mentor_id,
        activities=tuple(activity_to_domain(a) for a in w.activities),
    )

def user_to_domain(u: UserORM) -> User:
    return User(
        id=u.id,
        name=u.name,
        email=u.email,
        role=Role(u.role),
        workshop_ids=tuple(w.id for w in u.workshops),
        notification_preferences=dict(u.notification_preferences)
        if u.notification_preferences is not None else None,
    )

def enrollment_to_domain(e: EnrollmentORM) -> Enrollment:
    return Enrollment(
        id=e.id,
        learner_id=e.learner_id,
        workshop_id=e.workshop_id,
        status=EnrollmentStatus(e.status),
        created_at=e.created_at,
    )


class UserRepository(register_user.IUserRepository, enrollment.IUserRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, user_id: int) -> User | None:
        db_queries_total.inc()
        row = self.db.get(UserORM, user_id)
        return user_to_domain(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        db_queries_total.inc()
        row = self.db.execute(select(UserORM).where(UserORM.email == email)).scalars().first()
        return user_to_domain(row) if row else None

    def create(self, name: str, email: str, password_hash: str, role: Role) -> User:
        row = UserORM(name=name, email=email, password_hash=password_hash, role=role.value)
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return user_to_domain(row)

    def add_workshop(self, user_id: int, workshop_id: int) -> User:
        row = self.db.get(UserORM, user_id)
        row.workshops.append(self.db.get(WorkshopORM, workshop_id))
        self.db.commit(); self.db.refresh(row)
        return user_to_domain(row)

    def enrolled_workshops(self, user_id: int) -> list[Workshop] | None:
        db_queries_total.inc()
        row = self.db.execute(
            select(UserORM)
            .where(UserORM.id == user_id)
            .options(selectinload(UserORM.workshops).selectinload(WorkshopORM.activities))
        ).scalars().first()
        if row is None:
            return None
        return [workshop_to_domain(w) for w in row.workshops]

    def update_preferences(self, user_id: int, changes: dict[str, bool]) -> User | None:
        row = self.db.get(UserORM, user_id)
        if row is None:
            return None
        # reassign so the JSON column is flagged dirty
        row.notification_preferences = {**(row.notification_preferences or {}), **changes}
        self.db.commit(); self.db.refresh(row)
        return user_to_domain(row)


class WorkshopRepository(enrollment.IWorkshopRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, workshop_id: int) -> Workshop | None:
        db_queries_total.inc()
        row = self.db.get(WorkshopORM, workshop_id)
        return workshop_to_domain(row) if row else None

    def learners_of(self, workshop_id: int) -> list[User]:
        """Users whose workshop list contains ``workshop_id``."""
        db_queries_total.inc()
        rows = self.db.execute(
            select(UserORM)
            .where(UserORM.workshops.any(WorkshopORM.id == workshop_id))
            .order_by(UserORM.id)
        ).scalars().all()
        return [user_to_domain(r) for r in rows]


class EnrollmentRepository(enrollment.IEnrollmentRepository):
    def __init__(self, db: Session): self.db = db

    def create(self, learner_id: int, workshop_id: int) -> Enrollment:
        row = EnrollmentORM(
            learner_id=learner_id,
            workshop_id=workshop_id,
            status=EnrollmentStatus.PENDING.value,
        )
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return enrollment_to_domain(row)

    def find(self, learner_id: int, workshop_id: int) -> Enrollment | None:
        db_queries_total.inc()
        row = self._first(learner_id, workshop_id)
        return enrollment_to_domain(row) if row else None

    def confirm(self, learner_id: int, workshop_id: int) -> Enrollment | None:
        row = self._first(learner_id, workshop_id)
        if row is None:
            return None
        row.status = EnrollmentStatus.ENROLLED.value
        self.db.commit(); self.db.refresh(row)
        return enrollment_to_domain(row)

    def _first(self, learner_id: int, workshop_id: int) -> EnrollmentORM | None:
        return self.db.execute(
            select(EnrollmentORM)
            .where(EnrollmentORM.learner_id == learner_id, EnrollmentORM.workshop_id == workshop_id)
            .order_by(EnrollmentORM.id)
        ).scalars().first()

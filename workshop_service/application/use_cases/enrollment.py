from dataclasses import dataclass

import structlog

from ...domain.entities import Enrollment, NotificationKind, User, Workshop
from ...domain.errors import AlreadyEnrolledError, NotFoundError
from ...infrastructure.metrics import enrollment_transitions_total
from ..notifications import Dispatch, can_notify

logger = structlog.get_logger()


class IUserRepository:
    def get(self, user_id: int) -> User | None: ...
    def add_workshop(self, user_id: int, workshop_id: int) -> User: ...
    def enrolled_workshops(self, user_id: int) -> list[Workshop] | None: ...

class IWorkshopRepository:
    def get(self, workshop_id: int) -> Workshop | None: ...

class IEnrollmentRepository:
    def create(self, learner_id: int, workshop_id: int) -> Enrollment: ...
    def confirm(self, learner_id: int, workshop_id: int) -> Enrollment | None: ...


@dataclass(frozen=True)
class EnrollmentRequested:
    learner: User
    workshop: Workshop
    enrollment: Enrollment


class EnrollmentWorkflow:
    """Learner enrollment: request (-> pending) and mentor confirmation (-> enrolled).

    Notifications go through ``dispatch`` after the state change has been
    persisted. The dispatcher schedules delivery and returns immediately, so a
    slow or failing mail server never affects the outcome of a transition.
    """

    def __init__(
        self,
        users: IUserRepository,
        workshops: IWorkshopRepository,
        enrollments: IEnrollmentRepository,
        dispatch: Dispatch,
    ):
        self.users = users
        self.workshops = workshops
        self.enrollments = enrollments
        self.dispatch = dispatch

    def request(self, learner_id: int, workshop_id: int) -> EnrollmentRequested:
        workshop = self.workshops.get(workshop_id)
        if workshop is None:
            raise NotFoundError("Workshop not found.")

        learner = self.users.get(learner_id)
        if learner is None:
            raise NotFoundError("User not found.")

        # only the user's own list is consulted, not the enrollments table
        if workshop_id in learner.workshop_ids:
            raise AlreadyEnrolledError("User is already enrolled in this workshop.")

        learner = self.users.add_workshop(learner_id, workshop_id)
        enrollment = self.enrollments.create(learner_id, workshop_id)
        enrollment_transitions_total.labels(transition="requested").inc()
        logger.info(
            "enrollment_requested",
            enrollment_id=enrollment.id,
            learner_id=learner_id,
            workshop_id=workshop_id,
        )

        mentor = self.users.get(workshop.mentor_id) if workshop.mentor_id is not None else None
        if can_notify(mentor, NotificationKind.ENROLLMENT):
            self.dispatch(
                mentor.id,
                "New enrollment request",
                f"A learner has enrolled in your workshop: {workshop.title}.",
            )

        return EnrollmentRequested(learner=learner, workshop=workshop, enrollment=enrollment)

    def confirm(self, learner_id: int, workshop_id: int) -> Enrollment:
        enrollment = self.enrollments.confirm(learner_id, workshop_id)
        if enrollment is None:
            raise NotFoundError("Enrollment not found.")
        enrollment_transitions_total.labels(transition="confirmed").inc()
        logger.info(
            "enrollment_confirmed",
            enrollment_id=enrollment.id,
            learner_id=learner_id,
            workshop_id=workshop_id,
        )

        learner = self.users.get(learner_id)
        if learner is None:
            raise NotFoundError("User not found.")

        if can_notify(learner, NotificationKind.ENROLLMENT):
            workshop = self.workshops.get(workshop_id)
            title = workshop.title if workshop else f"#{workshop_id}"
            self.dispatch(
                learner.id,
                "Enrollment confirmed",
                f"Your enrollment in the workshop {title} has been confirmed.",
            )
        return enrollment

    def list_enrolled(self, user_id: int) -> list[Workshop]:
        workshops = self.users.enrolled_workshops(user_id)
        if workshops is None:
            raise NotFoundError("User not found.")
        return workshops

import pytest

from workshop_service.application.use_cases.enrollment import EnrollmentWorkflow
from workshop_service.domain.entities import EnrollmentStatus
from workshop_service.domain.errors import AlreadyEnrolledError, NotFoundError
from workshop_service.infrastructure.repositories import (
    EnrollmentRepository,
    UserRepository,
    WorkshopRepository,
)


@pytest.fixture
def dispatched():
    return []


@pytest.fixture
def workflow(session, dispatched):
    return EnrollmentWorkflow(
        users=UserRepository(session),
        workshops=WorkshopRepository(session),
        enrollments=EnrollmentRepository(session),
        dispatch=lambda user_id, subject, body: dispatched.append((user_id, subject, body)),
    )


def test_request_then_confirm(workflow, dispatched, make_user, make_workshop):
    mentor = make_user(role="mentor")
    workshop = make_workshop(mentor, title="Bookbinding")
    learner = make_user()

    result = workflow.request(learner.id, workshop.id)
    assert result.enrollment.status is EnrollmentStatus.PENDING
    assert result.learner.workshop_ids == (workshop.id,)
    assert dispatched[-1][0] == mentor.id

    enrollment = workflow.confirm(learner.id, workshop.id)
    assert enrollment.id == result.enrollment.id
    assert enrollment.status is EnrollmentStatus.ENROLLED
    assert dispatched[-1][0] == learner.id
    assert len(dispatched) == 2

def test_request_errors_are_checked_in_order(workflow, make_user, make_workshop):
    learner = make_user()
    with pytest.raises(NotFoundError, match="Workshop"):
        workflow.request(999, 999)
    workshop = make_workshop(make_user(role="mentor"))
    with pytest.raises(NotFoundError, match="User"):
        workflow.request(999, workshop.id)

    workflow.request(learner.id, workshop.id)
    with pytest.raises(AlreadyEnrolledError):
        workflow.request(learner.id, workshop.id)

def test_preferences_read_at_dispatch_time(workflow, dispatched, session, make_user, make_workshop):
    """Opting out between request and confirmation suppresses the confirmation email"""
    workshop = make_workshop(make_user(role="mentor"))
    learner = make_user()
    workflow.request(learner.id, workshop.id)
    dispatched.clear()

    UserRepository(session).update_preferences(learner.id, {"enrollment": False})
    workflow.confirm(learner.id, workshop.id)
    assert dispatched == []

def test_confirm_unknown_pair(workflow, dispatched):
    with pytest.raises(NotFoundError):
        workflow.confirm(1, 1)
    assert dispatched == []

def test_workshop_without_mentor(workflow, dispatched, session, make_user, make_workshop):
    mentor = make_user(role="mentor")
    workshop = make_workshop(mentor)
    workshop.mentor_id = None
    session.commit()

    workflow.request(make_user().id, workshop.id)
    assert dispatched == []

def test_list_enrolled_unknown_user(workflow):
    with pytest.raises(NotFoundError):
        workflow.list_enrolled(999)

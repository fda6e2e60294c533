from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ....application.notifications import Dispatch, INotifier
from ....application.use_cases.enrollment import EnrollmentWorkflow
from ....domain.entities import Identity
from ....domain.errors import AlreadyEnrolledError, NotFoundError
from ....infrastructure.db import get_db
from ....infrastructure.repositories import (
    EnrollmentRepository,
    UserRepository,
    WorkshopRepository,
)
from ..authz import get_current_identity, require_enrollment_confirmer
from ..dependencies import background_dispatch, get_notifier
from ..schemas import (
    ConfirmEnrollmentReq,
    EnrolledWorkshop,
    EnrollmentOut,
    EnrollReq,
    EnrollResp,
    UserPublic,
    WorkshopDetail,
)

router = APIRouter(prefix="/api/learners", tags=["learners"])

def _workflow(db: Session, dispatch: Dispatch) -> EnrollmentWorkflow:
    return EnrollmentWorkflow(
        users=UserRepository(db),
        workshops=WorkshopRepository(db),
        enrollments=EnrollmentRepository(db),
        dispatch=dispatch,
    )

def _no_dispatch(user_id: int, subject: str, body: str) -> None:
    raise RuntimeError("read-only enrollment queries do not notify")

@router.post("/enroll", response_model=EnrollResp)
def enroll(
    payload: EnrollReq,
    background_tasks: BackgroundTasks,
    user_id: int | None = Query(None, alias="userId"),
    identity: Identity = Depends(get_current_identity),
    notifier: INotifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    learner_id = user_id if user_id is not None else identity.id
    workflow = _workflow(db, background_dispatch(background_tasks, notifier))
    try:
        result = workflow.request(learner_id, payload.workshop_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AlreadyEnrolledError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return EnrollResp(
        message="Successfully enrolled in the workshop!",
        user=UserPublic.model_validate(result.learner),
        workshop=EnrolledWorkshop(
            id=result.workshop.id,
            title=result.workshop.title,
            activities=result.workshop.activity_ids,
        ),
    )

@router.post("/confirm-enrollment", response_model=EnrollmentOut)
def confirm_enrollment(
    payload: ConfirmEnrollmentReq,
    background_tasks: BackgroundTasks,
    workshop_id: int = Query(..., alias="workshopId"),
    identity: Identity = Depends(require_enrollment_confirmer),
    notifier: INotifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    workflow = _workflow(db, background_dispatch(background_tasks, notifier))
    try:
        enrollment = workflow.confirm(payload.learner_id, workshop_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return EnrollmentOut.model_validate(enrollment)

@router.get("/enrolled", response_model=list[WorkshopDetail])
def enrolled(
    user_id: int | None = Query(None, alias="userId"),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        workshops = _workflow(db, _no_dispatch).list_enrolled(
            user_id if user_id is not None else identity.id
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [WorkshopDetail.model_validate(w) for w in workshops]

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy import delete
from sqlalchemy.orm import Session

from ....application.notifications import INotifier, can_notify
from ....domain.entities import Identity, NotificationKind
from ....infrastructure.db import get_db
from ....infrastructure.metrics import db_queries_total
from ....infrastructure.models import Activity, Workshop, workshop_activities
from ....infrastructure.repositories import WorkshopRepository
from ..authz import require_workshop_manager
from ..dependencies import background_dispatch, get_notifier
from ..schemas import (
    ActivityCreate,
    ActivityOut,
    ActivityUpdate,
    WorkshopCreate,
    WorkshopDetail,
    WorkshopOut,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/workshops", tags=["workshops"])

def _workshop_out(row: Workshop) -> WorkshopOut:
    return WorkshopOut(
        id=row.id,
        title=row.title,
        description=row.description,
        mentor_id=row.mentor_id,
        activities=[a.id for a in row.activities],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )

def _ensure_owner(workshop: Workshop | None, identity: Identity):
    if workshop is not None and workshop.mentor_id != identity.id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Access denied.")

def _notify_learners(db: Session, workshop: Workshop, kind: NotificationKind,
                     subject: str, body: str, dispatch):
    for learner in WorkshopRepository(db).learners_of(workshop.id):
        if can_notify(learner, kind):
            dispatch(learner.id, subject, body)

@router.get("", response_model=list[WorkshopOut])
def list_workshops(db: Session = Depends(get_db)):
    db_queries_total.inc()
    rows = db.query(Workshop).order_by(Workshop.title).all()
    return [_workshop_out(row) for row in rows]

@router.get("/{workshop_id}", response_model=WorkshopDetail)
def get_workshop(workshop_id: int, db: Session = Depends(get_db)):
    workshop = WorkshopRepository(db).get(workshop_id)
    if not workshop: raise HTTPException(404, "Workshop not found.")
    return WorkshopDetail.model_validate(workshop)

# --- Mentor-only CRUD:

@router.post("", response_model=WorkshopOut, status_code=status.HTTP_201_CREATED)
def create_workshop(
    payload: WorkshopCreate,
    identity: Identity = Depends(require_workshop_manager),
    db: Session = Depends(get_db),
):
    row = Workshop(title=payload.title, description=payload.description, mentor_id=identity.id)
    db.add(row); db.commit(); db.refresh(row)
    logger.info("workshop_created", workshop_id=row.id, mentor_id=identity.id)
    return _workshop_out(row)

@router.post("/activities", response_model=ActivityOut, status_code=status.HTTP_201_CREATED)
def add_activity(
    payload: ActivityCreate,
    background_tasks: BackgroundTasks,
    workshop_id: int = Query(..., alias="workshopId"),
    identity: Identity = Depends(require_workshop_manager),
    notifier: INotifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    workshop = db.get(Workshop, workshop_id)
    if not workshop: raise HTTPException(404, "Workshop not found.")
    _ensure_owner(workshop, identity)

    row = Activity(
        title=payload.title,
        description=payload.description,
        schedule=payload.schedule,
        workshop_id=workshop_id,
    )
    db.add(row)
    workshop.activities.append(row)
    db.commit(); db.refresh(row)

    _notify_learners(
        db, workshop, NotificationKind.NEW_ACTIVITY,
        "New activity",
        f"A new activity was added to {workshop.title}: {row.title}.",
        background_dispatch(background_tasks, notifier),
    )
    return row

@router.put("/activities/{activity_id}", response_model=ActivityOut)
def update_activity(
    activity_id: int,
    payload: ActivityUpdate,
    background_tasks: BackgroundTasks,
    identity: Identity = Depends(require_workshop_manager),
    notifier: INotifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    row = db.get(Activity, activity_id)
    if not row: raise HTTPException(404, "The activity with the given ID was not found.")
    workshop = db.get(Workshop, row.workshop_id) if row.workshop_id is not None else None
    _ensure_owner(workshop, identity)

    row.title = payload.title
    row.description = payload.description
    row.schedule = payload.schedule
    db.commit(); db.refresh(row)

    if workshop is not None:
        _notify_learners(
            db, workshop, NotificationKind.WORKSHOP_UPDATE,
            "Workshop updated",
            f"The activity {row.title} in {workshop.title} was updated.",
            background_dispatch(background_tasks, notifier),
        )
    return row

@router.delete("/activities/{activity_id}", response_model=ActivityOut)
def delete_activity(
    activity_id: int,
    identity: Identity = Depends(require_workshop_manager),
    db: Session = Depends(get_db),
):
    row = db.get(Activity, activity_id)
    if not row: raise HTTPException(404, "The activity with the given ID was not found.")
    if row.workshop_id is not None:
        _ensure_owner(db.get(Workshop, row.workshop_id), identity)

    deleted = ActivityOut.model_validate(row)
    # pull it from every workshop that lists it, not only the owner
    db.execute(delete(workshop_activities).where(workshop_activities.c.activity_id == activity_id))
    db.delete(row); db.commit()
    logger.info("activity_deleted", activity_id=activity_id)
    return deleted

@router.get("/activities/{activity_id}", response_model=ActivityOut)
def get_activity(activity_id: int, db: Session = Depends(get_db)):
    row = db.get(Activity, activity_id)
    if not row: raise HTTPException(404, "The activity with the given ID was not found.")
    return row

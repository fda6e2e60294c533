from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ....domain.entities import Identity
from ....infrastructure.db import get_db
from ....infrastructure.repositories import UserRepository
from ..authz import get_current_identity
from ..schemas import NotificationPreferences, NotificationPreferencesUpdate

router = APIRouter(prefix="/api/users", tags=["users"])

@router.get("/me/notification-preferences", response_model=NotificationPreferences)
def get_preferences(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    user = UserRepository(db).get(identity.id)
    if user is None: raise HTTPException(404, "User not found.")
    return NotificationPreferences.model_validate(user.notification_preferences or {})

@router.put("/me/notification-preferences", response_model=NotificationPreferences)
def update_preferences(
    payload: NotificationPreferencesUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    user = UserRepository(db).update_preferences(identity.id, payload.changes())
    if user is None: raise HTTPException(404, "User not found.")
    return NotificationPreferences.model_validate(user.notification_preferences)

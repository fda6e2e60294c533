from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from ....infrastructure.db import get_db
from ....infrastructure.models import UserORM
from ....infrastructure.rate_limit import limiter, login_limit, signup_limit
from ....infrastructure.repositories import UserRepository
from ....infrastructure.security import PasswordHasher, create_access_token
from ....application.use_cases.register_user import RegisterUser
from ....domain.entities import Identity
from ....domain.errors import EmailAlreadyRegisteredError
from ..authz import get_current_identity
from ..schemas import (
    LoginReq,
    MeResp,
    NotificationPreferences,
    SignupReq,
    TokenResp,
    UserPublic,
)

router = APIRouter(prefix="/api", tags=["auth"])

@router.post("/signup", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
@limiter.limit(signup_limit)
def signup(
    request: Request,
    response: Response,
    payload: SignupReq,
    db: Session = Depends(get_db),
):
    uc = RegisterUser(repo=UserRepository(db), hasher=PasswordHasher())
    try:
        user = uc.execute(payload.name, payload.email, payload.password, payload.role)
    except EmailAlreadyRegisteredError as e:
        raise HTTPException(status_code=400, detail=str(e))
    response.headers["x-auth-token"] = create_access_token(user.id, user.role.value)
    return UserPublic.model_validate(user)

@router.post("/auth", response_model=TokenResp)
@limiter.limit(login_limit)
def login(
    request: Request,
    payload: LoginReq,
    db: Session = Depends(get_db),
):
    row = db.query(UserORM).filter(UserORM.email == payload.email).first()
    if not row or not PasswordHasher().verify(payload.password, row.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password.")
    return TokenResp(access_token=create_access_token(row.id, row.role))

@router.get("/auth/me", response_model=MeResp)
def me(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    user = UserRepository(db).get(identity.id)
    if user is None:
        raise HTTPException(status_code=401, detail="Please authenticate")
    prefs = user.notification_preferences
    return MeResp(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        notification_preferences=NotificationPreferences.model_validate(prefs) if prefs is not None else None,
    )

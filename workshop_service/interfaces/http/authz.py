from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from ...domain.entities import Capability, Identity, identity_for
from ...infrastructure.db import get_db
from ...infrastructure.repositories import UserRepository
from ...infrastructure.security import decode_token

# missing header is handled below so it maps to 401, not 403
bearer = HTTPBearer(auto_error=False)

def get_current_identity(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> Identity:
    if creds is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Please authenticate")
    try:
        user_id = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = UserRepository(db).get(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Please authenticate")
    return identity_for(user)

def require_capability(capability: Capability):
    def _check(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not identity.can(capability):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied.")
        return identity
    return _check

require_workshop_manager = require_capability(Capability.MANAGE_WORKSHOPS)
require_enrollment_confirmer = require_capability(Capability.CONFIRM_ENROLLMENTS)

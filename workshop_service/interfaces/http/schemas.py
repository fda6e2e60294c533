from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from ...domain.entities import EnrollmentStatus, Role

# --- Accounts:

class SignupReq(BaseModel):
    name: str = Field(min_length=5, max_length=50)
    email: EmailStr
    password: str = Field(min_length=5, max_length=255)
    role: Role

    @field_validator("email")
    @classmethod
    def email_length(cls, v: str) -> str:
        if len(v) > 50:
            raise ValueError("email must be at most 50 characters")
        return v

class LoginReq(BaseModel):
    email: EmailStr
    password: str = Field(min_length=5, max_length=255)

class UserPublic(BaseModel):
    id: int = Field(alias="_id")
    name: str
    email: str
    role: Role
    class Config:
        from_attributes = True
        populate_by_name = True

# keys match NotificationKind values as stored on the user
class NotificationPreferences(BaseModel):
    enrollment: bool = False
    workshop_update: bool = Field(False, alias="workshopUpdate")
    new_activity: bool = Field(False, alias="newActivity")
    class Config: populate_by_name = True

class NotificationPreferencesUpdate(BaseModel):
    enrollment: bool | None = None
    workshop_update: bool | None = Field(None, alias="workshopUpdate")
    new_activity: bool | None = Field(None, alias="newActivity")
    class Config: populate_by_name = True

    def changes(self) -> dict[str, bool]:
        return self.model_dump(by_alias=True, exclude_none=True)

class MeResp(UserPublic):
    notification_preferences: NotificationPreferences | None = Field(
        None, alias="notificationPreferences"
    )

class TokenResp(BaseModel):
    access_token: str
    token_type: str = "bearer"

# --- Workshops & activities:

class WorkshopCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)

class ActivityCreate(BaseModel):
    title: str = Field(min_length=5, max_length=50)
    description: str = Field(min_length=10, max_length=255)
    schedule: datetime

ActivityUpdate = ActivityCreate

class ActivityOut(BaseModel):
    id: int
    title: str
    description: str
    schedule: datetime | None = None
    workshop_id: int | None = Field(None, alias="workshopId")
    class Config:
        from_attributes = True
        populate_by_name = True

class WorkshopOut(BaseModel):
    id: int
    title: str
    description: str
    mentor_id: int | None = Field(None, alias="mentorId")
    activities: list[int] = []
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")
    class Config: populate_by_name = True

class WorkshopDetail(BaseModel):
    id: int
    title: str
    description: str
    mentor_id: int | None = Field(None, alias="mentorId")
    activities: list[ActivityOut] = []
    class Config:
        from_attributes = True
        populate_by_name = True

# --- Enrollment:

class EnrollReq(BaseModel):
    workshop_id: int = Field(alias="workshopId")
    class Config: populate_by_name = True

class ConfirmEnrollmentReq(BaseModel):
    learner_id: int = Field(alias="learnerId")
    class Config: populate_by_name = True

class EnrolledWorkshop(BaseModel):
    id: int
    title: str
    activities: list[int]

class EnrollResp(BaseModel):
    message: str
    user: UserPublic
    workshop: EnrolledWorkshop

class EnrollmentOut(BaseModel):
    id: int
    learner_id: int = Field(alias="learnerId")
    workshop_id: int = Field(alias="workshopId")
    status: EnrollmentStatus
    created_at: datetime | None = Field(None, alias="createdAt")
    class Config:
        from_attributes = True
        populate_by_name = True

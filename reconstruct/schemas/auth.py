"""Pydantic schemas for registration, login and external-identity sign-in."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegisterSchema(BaseModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None


class LoginSchema(BaseModel):
    email: str | None = None
    password: str | None = None


class GoogleSignInSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    display_name: str | None = Field(default=None, alias="displayName")
    firebase_uid: str | None = Field(default=None, alias="firebaseUid")
    password: str | None = None
    is_google_sign_in: bool | None = Field(default=None, alias="isGoogleSignIn")
    # the app sends this as a bool or as the string "true"
    store_password: bool | str | None = Field(default=None, alias="storePassword")

    @property
    def wants_password_stored(self) -> bool:
        return self.store_password is True or self.store_password == "true"


class UserOutSchema(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class WelcomeEmailSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    name: str | None = None
    user_id: int | None = Field(default=None, alias="userId")

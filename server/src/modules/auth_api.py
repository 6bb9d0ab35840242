from typing import Any

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field

from server.src.modules.authentification_helpers import (
    CredentialService,
    get_credential_service,
    require_auth,
)
from server.src.modules.logging_helpers import logger

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=3, max_length=30)
    password: str = Field(..., min_length=6)


class LoginPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str
    password: str


@router.post("/register", status_code=201)
def register(
    payload: RegisterPayload,
    credentials: CredentialService = Depends(get_credential_service),
):
    user_id = credentials.register(payload.username, payload.password)
    return {"message": "User created", "id": user_id}


@router.post("/login")
def login(
    payload: LoginPayload,
    response: Response,
    credentials: CredentialService = Depends(get_credential_service),
):
    user_id = credentials.verify_credentials(payload.username, payload.password)
    token = credentials.issue_token(user_id, payload.username)
    credentials.set_session_cookie(response, token)
    logger.info("Login ok: %s", payload.username)
    return {"message": "Logged in", "token": token}


@router.get("/logout")
def logout(
    response: Response,
    credentials: CredentialService = Depends(get_credential_service),
):
    credentials.clear_session_cookie(response)
    return {"message": "Logged out"}


@router.get("/me")
def me(claims: dict[str, Any] = Depends(require_auth)):
    return {"id": claims["sub"], "username": claims["username"], "expires_at": claims.get("exp")}

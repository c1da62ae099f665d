from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from auth.schemas import InvitationAccept, MessageResponse, PasswordResetConfirm, PasswordResetRequest, TokenResponse
from auth.services import auth_service as service
from core.database import get_db
from notification.mailer import get_mailer

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@auth_router.post("/login", response_model=TokenResponse)
def login(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    return TokenResponse(access_token=service.login(db, form.username, form.password))


@auth_router.post("/invitations/accept", response_model=MessageResponse)
def accept_invitation(payload: InvitationAccept, db: Session = Depends(get_db)):
    service.accept_invitation(db, payload)
    return {"message": "Invitation accepted. You can now sign in."}


@auth_router.post("/password-reset/request", response_model=MessageResponse)
def request_password_reset(payload: PasswordResetRequest, db: Session = Depends(get_db), mailer=Depends(get_mailer)):
    service.request_password_reset(db, payload.email, mailer)
    return {"message": service.RESET_REQUESTED}


@auth_router.post("/password-reset/confirm", response_model=MessageResponse)
def confirm_password_reset(payload: PasswordResetConfirm, db: Session = Depends(get_db)):
    service.reset_password(db, payload)
    return {"message": "Password updated. You can now sign in."}

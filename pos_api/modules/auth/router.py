from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pos_api.database.database import get_db
from pos_api.common.responses import success_response
from .dependencies import get_current_user
from .models import User
from .schemas import UserLogin, UserOut
from .service import AuthService

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@auth_router.post("/login")
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """
    Staff login. Returns a bearer token and the user profile.
    """
    token = AuthService(db).login(credentials.email, credentials.password)
    return success_response(token.model_dump(), "Login successful")


@auth_router.get("/me")
def get_current_user_info(current_user: User = Depends(get_current_user)):
    return success_response(UserOut.model_validate(current_user).model_dump(), "User retrieved successfully")

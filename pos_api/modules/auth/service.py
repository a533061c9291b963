import logging
from datetime import datetime

from sqlalchemy.orm import Session

from pos_api.common.exceptions import AuthenticationError
from .models import User
from .schemas import TokenResponse, UserOut
from .utils import verify_password, create_access_token, ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger(__name__)


class AuthService:

    def __init__(self, db: Session):
        self.db = db

    def login(self, email: str, password: str) -> TokenResponse:
        """Check credentials and issue an access token"""
        user = self.db.query(User).filter(User.email == email.lower()).first()

        if not user or not verify_password(password, user.password):
            logger.info(f"Failed login for {email}")
            raise AuthenticationError("Invalid credentials")

        if not user.is_active:
            raise AuthenticationError("Account is deactivated")

        user.last_login = datetime.now()
        self.db.commit()
        self.db.refresh(user)

        token = create_access_token({"sub": str(user.id), "role": user.role.value})
        return TokenResponse(
            token=token,
            expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=UserOut.model_validate(user)
        )

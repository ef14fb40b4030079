"""
Registration, login and bearer-token authentication.

Tokens are signed, time-limited claims ``{userId, email}``; there is no
server-side session and no revocation.
"""
import logging
from typing import Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from config import Settings
from database import USERS, create_document, with_id
from errors import DuplicateUser, InvalidCredentials, MissingToken
from schemas import AuthResponse, TokenClaims, User, UserCreate, UserLogin, UserOut
from security import create_access_token, decode_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Database, settings: Settings):
        self.db = db
        self.users = db[USERS]
        self.settings = settings

    def register(self, payload: UserCreate) -> AuthResponse:
        email = payload.email.lower()
        if self.users.find_one({"email": email}):
            raise DuplicateUser()

        doc = {
            "name": payload.name,
            "email": email,
            "password": get_password_hash(payload.password),
        }
        try:
            user_id = create_document(self.db, USERS, doc)
        except DuplicateKeyError:
            # Lost a race with a concurrent registration for the same email.
            raise DuplicateUser()

        user = UserOut(id=user_id, name=payload.name, email=email)
        logger.info("Registered user %s", user.id)
        return AuthResponse(message="User registered successfully", token=self._issue(user), user=user)

    def login(self, payload: UserLogin) -> AuthResponse:
        doc = self.users.find_one({"email": payload.email.lower()})
        stored = User.model_validate(with_id(doc)) if doc else None
        if stored is None or not verify_password(payload.password, stored.password):
            logger.warning("Failed login attempt")
            raise InvalidCredentials()

        user = UserOut(id=stored.id, name=stored.name, email=stored.email)
        return AuthResponse(message="Login successful", token=self._issue(user), user=user)

    def _issue(self, user: UserOut) -> str:
        return create_access_token(TokenClaims(user_id=user.id, email=user.email), self.settings)


def authenticate(token: Optional[str], settings: Settings) -> TokenClaims:
    if not token:
        raise MissingToken()
    return decode_access_token(token, settings)

"""In-memory user directory and credential checks."""

import hmac
import logging
import threading
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from ridehail.auth.models import AuthResult, ProfileUpdate, SignupRequest, User, UserRole
from ridehail.auth.tokens import TokenService
from ridehail.core.exceptions import InvalidCredentialsError, NotFoundError, UserExistsError

logger = logging.getLogger(__name__)


class AuthService:
    """Users and their credentials, keyed by id and by e-mail.

    Credentials are demo grade: plaintext, compared in constant time. Login
    needs the e-mail exactly as registered; signup refuses an e-mail that
    differs from an existing one only in case.
    """

    def __init__(
        self,
        tokens: TokenService,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._tokens = tokens
        self._clock = clock or (lambda: datetime.now(UTC))
        self._lock = threading.Lock()
        self._users: dict[str, User] = {}
        self._ids_by_email: dict[str, str] = {}
        self._passwords: dict[str, str] = {}

    def load(self, users: Iterable[tuple[User, str]]) -> None:
        with self._lock:
            for user, password in users:
                self._store(user, password)

    def _store(self, user: User, password: str) -> None:
        key = user.email.lower()
        self._users[user.id] = user
        self._ids_by_email[key] = user.id
        self._passwords[key] = password

    def _next_id(self) -> str:
        numeric = [int(uid) for uid in self._users if uid.isdigit()]
        return str(max(numeric, default=0) + 1)

    def _issue(self, user: User) -> AuthResult:
        return AuthResult(
            user=user,
            token=self._tokens.issue(user, "access"),
            refresh_token=self._tokens.issue(user, "refresh"),
        )

    def login(self, email: str, password: str) -> AuthResult:
        key = email.lower()
        with self._lock:
            user_id = self._ids_by_email.get(key)
            stored = self._passwords.get(key, "")
            user = self._users.get(user_id) if user_id else None

        # Compare even for unknown e-mails so both failures take the same path
        matches = hmac.compare_digest(stored.encode(), password.encode())
        if user is None or user.email != email or not matches:
            logger.info("Failed login attempt for %s", email)
            raise InvalidCredentialsError("Invalid email or password")

        logger.info("User %s logged in", user.id)
        return self._issue(user)

    def signup(self, data: SignupRequest) -> AuthResult:
        key = data.email.lower()
        now = self._clock()
        with self._lock:
            if key in self._ids_by_email:
                raise UserExistsError(
                    "User with this email already exists", details={"field": "email"}
                )
            user = User(
                id=self._next_id(),
                email=data.email,
                name=data.name,
                phone=data.phone,
                role=data.role,
                is_verified=False,
                created_at=now,
                updated_at=now,
            )
            self._store(user, data.password)

        logger.info("Created %s account %s", user.role.value, user.id)
        return self._issue(user)

    def verify_token(self, token: str) -> User | None:
        claims = self._tokens.decode(token, "access")
        if claims is None:
            return None
        return self.get_user(claims["sub"])

    def refresh(self, refresh_token: str) -> AuthResult | None:
        claims = self._tokens.decode(refresh_token, "refresh")
        if claims is None:
            return None
        user = self.get_user(claims["sub"])
        return self._issue(user) if user else None

    def get_user(self, user_id: str) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def update_profile(self, user_id: str, updates: ProfileUpdate) -> User:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundError("User not found", code="USER_NOT_FOUND")
            changes = updates.model_dump(exclude_unset=True, exclude_none=True)
            updated = user.model_copy(update={**changes, "updated_at": self._clock()})
            self._users[user_id] = updated
        return updated

    @staticmethod
    def has_permission(user: User | None, required_role: UserRole | str) -> bool:
        if user is None:
            return False
        try:
            required = UserRole(required_role)
        except ValueError:
            return False
        return user.role.level >= required.level

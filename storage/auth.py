"""
Account, session and result-history operations on top of a LocalStore.

Each call reads the whole table it touches, changes it, and writes the whole
table back. Two processes sharing one bucket can overwrite each other.
"""

import json
import uuid
from datetime import datetime, timezone

from passlib.context import CryptContext
from pydantic import ValidationError

from quiz.types import PersonalityResult, SavedResult, User, UserRecord

USERS_KEY = "mindspark_users"
RESULTS_KEY = "mindspark_results"
SESSION_KEY = "mindspark_session"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class AuthError(Exception):
    """Base class for errors shown inline on the login/signup form."""
    pass


class DuplicateUserError(AuthError):
    def __init__(self, message: str = "User already exists"):
        super().__init__(message)


class InvalidCredentialsError(AuthError):
    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso_timestamp(moment: datetime) -> str:
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class AuthService:
    """Accounts and results are shared by every client of the store; the
    session record lives under `session_key`, one per browser client."""

    def __init__(self, store, clock=_utcnow, session_key: str = SESSION_KEY):
        self.store = store
        self._clock = clock
        self.session_key = session_key

    def for_client(self, client_id: str) -> "AuthService":
        """Same accounts and results, with a session private to `client_id`."""
        return AuthService(self.store, self._clock, f"{SESSION_KEY}:{client_id}")

    def _read(self, key: str, default):
        raw = self.store.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, ValueError) as e:
            print(f"  Warning: Unreadable record '{key}': {e}")
            return default

    def _write(self, key: str, value):
        self.store.set_item(key, json.dumps(value))

    def _start_session(self, user: User) -> User:
        self._write(self.session_key, user.to_dict())
        return user

    # ---- Auth ----

    def signup(self, name: str, email: str, password: str) -> User:
        if not name or not name.strip():
            raise AuthError("Name is required")

        users = self._read(USERS_KEY, [])
        if any(u.get("email") == email for u in users):
            raise DuplicateUserError()

        record = UserRecord(
            id=str(uuid.uuid4()),
            name=name.strip(),
            email=email,
            password_hash=pwd_context.hash(password),
        )
        users.append(record.to_dict())
        self._write(USERS_KEY, users)
        print(f"  New account: {record.email}")

        return self._start_session(record.public())

    def login(self, email: str, password: str) -> User:
        users = self._read(USERS_KEY, [])
        for entry in users:
            if entry.get("email") != email:
                continue
            try:
                record = UserRecord.model_validate(entry)
            except ValidationError:
                continue
            if pwd_context.verify(password, record.password_hash):
                return self._start_session(record.public())
        raise InvalidCredentialsError()

    def logout(self):
        self.store.remove_item(self.session_key)

    def get_current_user(self):
        session = self._read(self.session_key, None)
        if not session:
            return None
        try:
            return User.model_validate(session)
        except ValidationError as e:
            print(f"  Warning: Ignoring malformed session: {e}")
            return None

    # ---- Results ----

    def save_result(self, user_id: str, result: PersonalityResult) -> SavedResult:
        """Prepend a new history entry for the user and persist the table."""
        all_results = self._read(RESULTS_KEY, {})
        user_results = all_results.get(user_id, [])

        saved = SavedResult(
            **result.model_dump(),
            id=str(uuid.uuid4()),
            date=_iso_timestamp(self._clock()),
        )
        user_results.insert(0, saved.to_dict())
        all_results[user_id] = user_results
        self._write(RESULTS_KEY, all_results)

        return saved

    def get_history(self, user_id: str) -> list:
        """Return the user's saved results, newest first."""
        all_results = self._read(RESULTS_KEY, {})
        history = []
        for entry in all_results.get(user_id, []):
            try:
                history.append(SavedResult.model_validate(entry))
            except ValidationError as e:
                print(f"  Warning: Skipping unreadable history entry: {e}")
        return history

    def get_saved_result(self, user_id: str, result_id: str):
        for saved in self.get_history(user_id):
            if saved.id == result_id:
                return saved
        return None

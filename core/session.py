import hmac
import uuid
import base64
import hashlib
import logging
import secrets
from typing import Dict, Optional
from pydantic import ValidationError

from core.errors import AccountExists, InvalidCredentials, NotAuthenticated
from core.state import Account, Session
from core.store import PersistentStore, AUTH_KEY, USERS_KEY, ONBOARDING_KEY, HISTORY_KEY

PBKDF2_ITERATIONS = 240_000

logger = logging.getLogger(__name__)


def hash_password(password: str, salt: Optional[bytes] = None, iterations: Optional[int] = None) -> str:
    salt = salt or secrets.token_bytes(16)
    iterations = iterations or PBKDF2_ITERATIONS
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return "pbkdf2_sha256${}${}${}".format(
        iterations,
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    )


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$")
        if algorithm != "pbkdf2_sha256":
            return False
        digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), base64.b64decode(salt), int(iterations))
    except (AttributeError, ValueError):
        return False
    return hmac.compare_digest(base64.b64encode(digest).decode("ascii"), expected)


def normalize_email(email: str) -> str:
    # registry keys are case-sensitive; only surrounding whitespace is dropped
    return (email or "").strip()


class SessionManager:
    """Account registry, login state and the first-time-user flag.

    One SessionManager owns the single active Session of the process. The
    Session is mirrored to the `auth` record on every change.
    """

    def __init__(self, store: PersistentStore, campaign_store=None):
        self.store = store
        self.campaign_store = campaign_store
        self._session = Session.anonymous()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def is_first_time_user(self) -> bool:
        return self._session.is_first_time_user

    def load_from_store(self) -> Session:
        """
        Restore the persisted Session as-is.

        The record is not checked against the account registry. A record that
        cannot be read as a Session leaves the process logged out.
        """
        data = self.store.get(AUTH_KEY)
        if isinstance(data, dict):
            try:
                self._session = Session.model_validate(data)
            except ValidationError as e:
                logger.warning(f"Stored session is invalid, starting logged out: {e}")
                self._session = Session.anonymous()
        else:
            self._session = Session.anonymous()
        if self._session.is_authenticated:
            logger.info(f"Restored session for {self._session.user_email}")
        return self._session

    def sign_up(self, email: str, password: str) -> Session:
        email = normalize_email(email)
        if not email or not password:
            raise ValueError("Email and password are required")

        users = self._load_users()
        if email in users:
            raise AccountExists(email)

        existing_ids = {record.get("id") for record in users.values() if isinstance(record, dict)}
        user_id = f"user_{uuid.uuid4().hex}"
        while user_id in existing_ids:
            user_id = f"user_{uuid.uuid4().hex}"

        account = Account(email=email, password_hash=hash_password(password), id=user_id, is_first_time_user=True)
        users[email] = account.to_record()
        self.store.put(USERS_KEY, users)
        logger.info(f"Created account {email} ({user_id})")
        return self._establish(account)

    def log_in(self, email: str, password: str) -> Session:
        email = normalize_email(email)
        account = self._find_account(email)
        if account is None or not verify_password(password or "", account.password_hash):
            logger.info(f"Rejected login for {email}")
            raise InvalidCredentials()
        return self._establish(account)

    def log_out(self) -> None:
        """End the session and discard the account's brief, framework and history."""
        email = self._session.user_email
        self._session = Session.anonymous()
        self.store.clear(AUTH_KEY)
        if self.campaign_store is not None:
            self.campaign_store.discard()
        else:
            self.store.clear(ONBOARDING_KEY)
            self.store.clear(HISTORY_KEY)
        logger.info(f"Logged out {email}")

    def mark_onboarded(self) -> None:
        if not self._session.is_authenticated:
            raise NotAuthenticated("onboarding")
        users = self._load_users()
        record = users.get(self._session.user_email)
        if isinstance(record, dict) and record.get("isFirstTimeUser", True):
            record["isFirstTimeUser"] = False
            self.store.put(USERS_KEY, users)
            logger.info(f"Marked {self._session.user_email} as onboarded")
        if self._session.is_first_time_user:
            self._session = self._session.model_copy(update={"is_first_time_user": False})
            self._persist_session()

    def current_account(self) -> Optional[Account]:
        if not self._session.is_authenticated:
            return None
        return self._find_account(self._session.user_email)

    def _establish(self, account: Account) -> Session:
        self._session = Session.for_account(account)
        self._persist_session()
        logger.info(f"Session started for {account.email} (first time: {account.is_first_time_user})")
        return self._session

    def _persist_session(self) -> None:
        self.store.put(AUTH_KEY, self._session.model_dump(by_alias=True))

    def _load_users(self) -> Dict[str, dict]:
        users = self.store.get(USERS_KEY)
        return users if isinstance(users, dict) else {}

    def _find_account(self, email: str) -> Optional[Account]:
        record = self._load_users().get(email)
        if not isinstance(record, dict):
            return None
        try:
            return Account.from_record(email, record)
        except (KeyError, ValidationError) as e:
            logger.warning(f"Ignoring malformed account record for {email}: {e}")
            return None

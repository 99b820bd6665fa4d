from dataclasses import dataclass
import logging
from typing import Any, Dict, Optional
import requests
from requests import RequestException

from finai.config.settings import settings
from finai.core.outcome import Failed, FailureKind, console_url


logger = logging.getLogger(__name__)

# Identity Toolkit error message prefix -> code shown to the user
ERROR_CODES: Dict[str, str] = {
    "EMAIL_EXISTS": "email-already-in-use",
    "INVALID_LOGIN_CREDENTIALS": "invalid-credential",
    "INVALID_PASSWORD": "invalid-credential",
    "EMAIL_NOT_FOUND": "invalid-credential",
    "OPERATION_NOT_ALLOWED": "operation-not-allowed",
    "PASSWORD_LOGIN_DISABLED": "operation-not-allowed",
    "WEAK_PASSWORD": "weak-password",
    "INVALID_EMAIL": "invalid-email",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "too-many-requests",
    "API_KEY_INVALID": "invalid-api-key",
    "INVALID_API_KEY": "invalid-api-key",
}

MESSAGES: Dict[str, str] = {
    "email-already-in-use": "This email is already registered. Sign in instead.",
    "invalid-credential": "Incorrect email or password.",
    "operation-not-allowed": "Email/password sign-in is not enabled for this Firebase project.",
    "weak-password": "Password must be at least 6 characters.",
    "invalid-email": "That email address is not valid.",
    "too-many-requests": "Too many attempts. Try again later.",
    "invalid-api-key": "The Firebase API key was rejected. Check the connection settings.",
}


class AuthServiceError(Exception):
    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code = code
        self.message = message or code


@dataclass
class AuthResult:
    uid: str
    email: str
    display_name: str
    id_token: str
    refresh_token: str


class FirebaseAuthService:
    BASE_URL = "https://identitytoolkit.googleapis.com/v1"
    SIGN_UP_PATH = "/accounts:signUp"
    LOGIN_PATH = "/accounts:signInWithPassword"
    UPDATE_PATH = "/accounts:update"

    def __init__(self, api_key: str, timeout: Optional[float] = None) -> None:
        if not api_key:
            raise AuthServiceError("invalid-api-key", "Missing Firebase API key")
        self.api_key = api_key
        self.timeout = timeout if timeout is not None else settings.auth_timeout_seconds

    def sign_up(self, email: str, password: str, name: Optional[str] = None) -> AuthResult:
        payload = {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        }
        data = self._post(self.SIGN_UP_PATH, payload)
        result = self._to_result(data, email)
        if name and name.strip():
            self.update_profile(result.id_token, name.strip())
            result.display_name = name.strip()
        return result

    def sign_in(self, email: str, password: str) -> AuthResult:
        payload = {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        }
        data = self._post(self.LOGIN_PATH, payload)
        return self._to_result(data, email)

    def update_profile(self, id_token: str, display_name: str) -> None:
        self._post(
            self.UPDATE_PATH,
            {"idToken": id_token, "displayName": display_name, "returnSecureToken": False},
        )

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.BASE_URL}{path}"
        try:
            res = requests.post(url, params={"key": self.api_key}, json=payload, timeout=self.timeout)
        except RequestException as exc:
            raise AuthServiceError("network-request-failed", "Auth service unavailable") from exc
        try:
            data = res.json()
        except ValueError:
            raise AuthServiceError("network-request-failed", "Auth service returned an unreadable response")

        if res.status_code >= 400:
            raw = str((data.get("error") or {}).get("message") or "AUTH_ERROR")
            raise self._translate(raw)

        return data

    @staticmethod
    def _translate(raw: str) -> AuthServiceError:
        # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters"
        head = raw.split(":", maxsplit=1)[0].strip()
        code = ERROR_CODES.get(head)
        if code is None:
            logger.warning("Unmapped auth error %s", raw)
            return AuthServiceError("unknown", raw)
        return AuthServiceError(code, raw)

    @staticmethod
    def _to_result(data: Dict[str, Any], email: str) -> AuthResult:
        uid = str(data.get("localId") or "")
        if not uid:
            raise AuthServiceError("unknown", "Auth response did not include a user id")
        return AuthResult(
            uid=uid,
            email=str(data.get("email") or email),
            display_name=str(data.get("displayName") or ""),
            id_token=str(data.get("idToken") or ""),
            refresh_token=str(data.get("refreshToken") or ""),
        )


def describe_auth_error(exc: AuthServiceError) -> str:
    return MESSAGES.get(exc.code, f"Operation failed: {exc.message}")


def provider_rejection(exc: AuthServiceError, project_id: str) -> Optional[Failed]:
    """Turn a configuration-level auth rejection into a ``Failed`` outcome.

    Ordinary credential mistakes return ``None``; only errors that need a fix in
    the Firebase console (or in the connection settings) become failures.
    """
    if exc.code == "operation-not-allowed":
        return Failed(
            FailureKind.PROVIDER_REJECTED,
            describe_auth_error(exc),
            console_url(project_id, "authentication/providers"),
        )
    if exc.code == "invalid-api-key":
        return Failed(
            FailureKind.PROVIDER_REJECTED,
            describe_auth_error(exc),
            console_url(project_id),
        )
    return None

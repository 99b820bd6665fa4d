from typing import Callable, Dict, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


# Environment variable -> ConnectionConfig field
ENV_KEYS: Dict[str, str] = {
    "api_key": "FIREBASE_API_KEY",
    "auth_domain": "FIREBASE_AUTH_DOMAIN",
    "project_id": "FIREBASE_PROJECT_ID",
    "storage_bucket": "FIREBASE_STORAGE_BUCKET",
    "messaging_sender_id": "FIREBASE_MESSAGING_SENDER_ID",
    "app_id": "FIREBASE_APP_ID",
    "measurement_id": "FIREBASE_MEASUREMENT_ID",
}

PlaceholderPredicate = Callable[[str], bool]


class ConnectionConfig(BaseModel):
    """Firebase web-app configuration.

    Serialized with the camelCase names the Firebase console hands out, so a
    pasted ``firebaseConfig`` object parses as-is.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    api_key: str = Field(default="", alias="apiKey")
    auth_domain: str = Field(default="", alias="authDomain")
    project_id: str = Field(default="", alias="projectId")
    storage_bucket: str = Field(default="", alias="storageBucket")
    messaging_sender_id: str = Field(default="", alias="messagingSenderId")
    app_id: str = Field(default="", alias="appId")
    measurement_id: Optional[str] = Field(default=None, alias="measurementId")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str) -> "ConnectionConfig":
        return cls.model_validate_json(raw)

    def has_usable_api_key(self, is_placeholder: PlaceholderPredicate) -> bool:
        key = self.api_key.strip()
        if not key or key == "undefined":
            return False
        return not is_placeholder(key)


def marker_predicate(markers: Iterable[str]) -> PlaceholderPredicate:
    """Build a placeholder check that matches any of ``markers`` as a substring."""
    needles = tuple(marker for marker in markers if marker)

    def is_placeholder(value: str) -> bool:
        return any(needle in value for needle in needles)

    return is_placeholder

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


CONSOLE_BASE_URL = "https://console.firebase.google.com"


class FailureKind(str, Enum):
    MISSING_CONFIG = "missing_config"
    INVALID_KEY = "invalid_key"
    PROVIDER_REJECTED = "provider_rejected"
    STORAGE_CORRUPT = "storage_corrupt"

    @property
    def needs_configuration(self) -> bool:
        return self is not FailureKind.PROVIDER_REJECTED


@dataclass(frozen=True)
class ServiceHandles:
    auth: Any
    store: Any


@dataclass(frozen=True)
class Ready:
    handles: ServiceHandles

    @property
    def auth(self) -> Any:
        return self.handles.auth

    @property
    def store(self) -> Any:
        return self.handles.store


@dataclass(frozen=True)
class Failed:
    kind: FailureKind
    reason: str
    console_url: Optional[str] = None


InitializationOutcome = Union[Ready, Failed]


def is_configuration_problem(outcome: InitializationOutcome) -> bool:
    return isinstance(outcome, Failed) and outcome.kind.needs_configuration


def console_url(project_id: str, section: str = "settings/general") -> Optional[str]:
    if not project_id:
        return None
    return f"{CONSOLE_BASE_URL}/project/{project_id}/{section}"

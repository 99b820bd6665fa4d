from dataclasses import dataclass
from typing import Optional


@dataclass
class SessionState:
    uid: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.uid and self.id_token)

    @property
    def label(self) -> str:
        if self.display_name:
            return self.display_name
        if self.email:
            return self.email.split("@")[0]
        return "User"

    def clear(self) -> None:
        self.uid = None
        self.email = None
        self.display_name = None
        self.id_token = None
        self.refresh_token = None

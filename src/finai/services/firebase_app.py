import logging
from typing import Callable, Optional

from finai.core.connection import ConnectionConfig
from finai.services.auth_service import FirebaseAuthService
from finai.services.firestore_service import FirestoreService


logger = logging.getLogger(__name__)


class FirebaseApp:
    """One configured backing-service app; hands out memoized auth and store clients."""

    def __init__(self, config: ConnectionConfig) -> None:
        if not config.project_id:
            raise ValueError("Firebase config is missing projectId")
        self.config = config
        self._auth: Optional[FirebaseAuthService] = None
        self._store: Optional[FirestoreService] = None

    def auth(self) -> FirebaseAuthService:
        if self._auth is None:
            self._auth = FirebaseAuthService(self.config.api_key)
        return self._auth

    def store(self) -> FirestoreService:
        if self._store is None:
            self._store = FirestoreService(self.config.project_id)
        return self._store


ClientFactory = Callable[[ConnectionConfig], FirebaseApp]


class AppRegistry:
    """Holds the app instance for one session; an existing app is always reused."""

    def __init__(self) -> None:
        self._app: Optional[FirebaseApp] = None

    def get_app(self) -> Optional[FirebaseApp]:
        return self._app

    def get_or_create(self, config: ConnectionConfig, factory: ClientFactory) -> FirebaseApp:
        if self._app is not None:
            if self._app.config != config:
                logger.warning("Firebase app already initialized; ignoring a different config")
            return self._app
        self._app = factory(config)
        return self._app

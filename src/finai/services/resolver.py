"""Connection configuration resolution and one-shot backing-service initialization.

Precedence is environment first, then the manual override saved in browser
storage. ``initialize`` is the single place where SDK exceptions are turned into
an ``InitializationOutcome``; nothing raised by the client factory escapes it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from finai.config.sources import ConfigSource, KeyValueStore
from finai.core.connection import ENV_KEYS, ConnectionConfig, PlaceholderPredicate
from finai.core.outcome import Failed, FailureKind, InitializationOutcome, Ready, ServiceHandles, console_url
from finai.services.firebase_app import AppRegistry, ClientFactory, FirebaseApp


logger = logging.getLogger(__name__)

MISSING_MESSAGE = "No Firebase configuration found. Enter your project's web config to continue."
INVALID_KEY_MESSAGE = "The Firebase API key is empty or still a placeholder. Paste the real key from the console."
CORRUPT_MESSAGE = "The saved Firebase configuration could not be read. Enter it again."


@dataclass(frozen=True)
class Resolution:
    config: Optional[ConnectionConfig]
    issue: Optional[FailureKind] = None


class ConfigResolver:
    def __init__(
        self,
        env: ConfigSource,
        storage: KeyValueStore,
        *,
        storage_key: str,
        is_placeholder: PlaceholderPredicate,
        client_factory: ClientFactory = FirebaseApp,
        registry: Optional[AppRegistry] = None,
    ) -> None:
        self.env = env
        self.storage = storage
        self.storage_key = storage_key
        self.is_placeholder = is_placeholder
        self.client_factory = client_factory
        self.registry = registry or AppRegistry()

    def resolve_config(self) -> Optional[ConnectionConfig]:
        return self.resolve().config

    def resolve(self) -> Resolution:
        """Look up the authoritative config, noting why none was found."""
        issue: Optional[FailureKind] = None

        values = {field: self.env.get(name) or "" for field, name in ENV_KEYS.items()}
        if values["api_key"] and values["project_id"]:
            logger.info("Using Firebase config from environment (project %s)", values["project_id"])
            return Resolution(ConnectionConfig(**values))
        if values["project_id"]:
            # A project without a key means the build injected a blank key
            issue = FailureKind.INVALID_KEY

        raw = self.storage.get(self.storage_key)
        if raw:
            try:
                config = ConnectionConfig.from_json(raw)
            except ValidationError as exc:
                issue = issue or FailureKind.STORAGE_CORRUPT
                logger.warning("Ignoring unreadable saved Firebase config: %s", exc)
            else:
                logger.info("Using saved Firebase config (project %s)", config.project_id or "?")
                return Resolution(config)

        return Resolution(None, issue)

    def initialize(
        self,
        config: Optional[ConnectionConfig],
        issue: Optional[FailureKind] = None,
    ) -> InitializationOutcome:
        if config is None:
            if issue is FailureKind.INVALID_KEY:
                return Failed(FailureKind.INVALID_KEY, INVALID_KEY_MESSAGE)
            if issue is FailureKind.STORAGE_CORRUPT:
                return Failed(FailureKind.STORAGE_CORRUPT, CORRUPT_MESSAGE)
            return Failed(FailureKind.MISSING_CONFIG, MISSING_MESSAGE)

        if not config.has_usable_api_key(self.is_placeholder):
            return Failed(FailureKind.INVALID_KEY, INVALID_KEY_MESSAGE)

        try:
            app = self.registry.get_or_create(config, self.client_factory)
            handles = ServiceHandles(auth=app.auth(), store=app.store())
        except Exception as exc:
            logger.error("Firebase initialization failed: %s", exc)
            return Failed(
                FailureKind.PROVIDER_REJECTED,
                f"Firebase initialization failed: {exc}",
                console_url(config.project_id),
            )

        return Ready(handles)

    def save_manual_override(self, config: ConnectionConfig) -> None:
        self.storage.set(self.storage_key, config.to_json())
        logger.info("Saved Firebase config override; reload required")

    def clear_manual_override(self) -> None:
        self.storage.remove(self.storage_key)
        logger.info("Cleared Firebase config override; reload required")

from dataclasses import dataclass, field
from typing import Optional

from finai.config.settings import Settings, settings as default_settings
from finai.config.sources import ConfigSource, KeyValueStore
from finai.core.connection import ConnectionConfig, marker_predicate
from finai.core.outcome import InitializationOutcome, Ready, is_configuration_problem
from finai.services.firebase_app import ClientFactory, FirebaseApp
from finai.services.resolver import ConfigResolver
from finai.state.session_state import SessionState


@dataclass
class AppState:
    """Per-session context handed to every view.

    ``outcome`` is computed once by ``bootstrap``; a configuration change takes
    effect only through a reload, which builds a new ``AppState``.
    """

    resolver: ConfigResolver
    outcome: InitializationOutcome
    config: Optional[ConnectionConfig] = None
    session: SessionState = field(default_factory=SessionState)

    @classmethod
    def bootstrap(
        cls,
        env: ConfigSource,
        storage: KeyValueStore,
        *,
        app_settings: Settings = default_settings,
        client_factory: ClientFactory = FirebaseApp,
    ) -> "AppState":
        resolver = ConfigResolver(
            env,
            storage,
            storage_key=app_settings.override_storage_key,
            is_placeholder=marker_predicate(app_settings.placeholder_markers),
            client_factory=client_factory,
        )
        resolution = resolver.resolve()
        outcome = resolver.initialize(resolution.config, resolution.issue)
        return cls(resolver=resolver, outcome=outcome, config=resolution.config)

    @property
    def is_ready(self) -> bool:
        return isinstance(self.outcome, Ready)

    @property
    def needs_configuration(self) -> bool:
        return is_configuration_problem(self.outcome)

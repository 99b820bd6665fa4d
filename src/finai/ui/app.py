import logging
import os

import flet as ft

from finai.config.sources import ClientStorageSource, MappingSource
from finai.services.gemini_service import GeminiService
from finai.state.app_state import AppState
from finai.ui.routing import (
    ACCOUNTS_ROUTE,
    CONFIG_ROUTE,
    DASHBOARD_ROUTE,
    LOGIN_ROUTE,
    STOCKS_ROUTE,
    TRANSACTIONS_ROUTE,
    resolve_route,
)
from finai.ui.views.accounts_view import build_accounts_view
from finai.ui.views.config_view import build_config_view
from finai.ui.views.dashboard_view import build_dashboard_view
from finai.ui.views.login_view import build_login_view
from finai.ui.views.stocks_view import build_stocks_view
from finai.ui.views.transactions_view import build_transactions_view


logger = logging.getLogger(__name__)


def main(page: ft.Page) -> None:
    """Session entry point; each call starts a fresh resolve/initialize run."""
    page.title = "FinAI"
    app_state = AppState.bootstrap(MappingSource(os.environ), ClientStorageSource(page.client_storage))
    gemini = GeminiService(os.getenv("API_KEY", ""))
    logger.info("Session started: %s", type(app_state.outcome).__name__)

    def reload() -> None:
        page.views.clear()
        page.on_route_change = None
        # Start from the root so the new outcome picks the landing page
        page.route = "/"
        page.update()
        main(page)

    def logout() -> None:
        app_state.session.clear()
        page.go(LOGIN_ROUTE)

    def back_to_dashboard() -> None:
        page.go(DASHBOARD_ROUTE)

    def route_change(_=None) -> None:
        target = resolve_route(app_state, page.route)
        if target != page.route:
            page.go(target)
            return

        page.views.clear()
        if target == CONFIG_ROUTE:
            page.views.append(build_config_view(page, app_state, reload))
        elif target == LOGIN_ROUTE:
            page.views.append(build_login_view(page, app_state, back_to_dashboard))
        elif target == ACCOUNTS_ROUTE:
            page.views.append(build_accounts_view(page, app_state, back_to_dashboard))
        elif target == TRANSACTIONS_ROUTE:
            page.views.append(build_transactions_view(page, app_state, back_to_dashboard))
        elif target == STOCKS_ROUTE:
            page.views.append(build_stocks_view(page, app_state, back_to_dashboard))
        else:
            page.views.append(build_dashboard_view(page, app_state, gemini, logout))
        page.update()

    page.on_route_change = route_change
    route_change()

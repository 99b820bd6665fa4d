from finai.state.app_state import AppState


CONFIG_ROUTE = "/config"
LOGIN_ROUTE = "/login"
DASHBOARD_ROUTE = "/dashboard"
ACCOUNTS_ROUTE = "/accounts"
TRANSACTIONS_ROUTE = "/transactions"
STOCKS_ROUTE = "/stocks"

SIGNED_IN_ROUTES = (DASHBOARD_ROUTE, ACCOUNTS_ROUTE, TRANSACTIONS_ROUTE, STOCKS_ROUTE)


def resolve_route(state: AppState, requested: str) -> str:
    """Pick the route to show for ``requested`` given the session's outcome.

    Configuration problems always land on the config form; the form stays
    reachable by hand so a working config can still be replaced.
    """
    if state.needs_configuration:
        return CONFIG_ROUTE
    if requested == CONFIG_ROUTE:
        return CONFIG_ROUTE
    if not state.is_ready or not state.session.is_authenticated:
        return LOGIN_ROUTE
    if requested in SIGNED_IN_ROUTES:
        return requested
    return DASHBOARD_ROUTE

from typing import Callable, Optional
import flet as ft

from finai.core.outcome import Failed, Ready
from finai.services.auth_service import AuthServiceError, describe_auth_error, provider_rejection
from finai.services.firestore_service import FirestoreServiceError
from finai.state.app_state import AppState


def build_login_view(
    page: ft.Page,
    app_state: AppState,
    on_authenticated: Callable[[], None],
) -> ft.View:
    name = ft.TextField(label="Name", width=350, visible=False)
    email = ft.TextField(label="Email", width=350)
    password = ft.TextField(label="Password", password=True, can_reveal_password=True, width=350)
    status_text = ft.Text(color=ft.Colors.RED_400)
    console_link = ft.TextButton("Fix it in the Firebase console", visible=False)
    switch_to_sign_in = ft.TextButton("Use Sign In instead", visible=False)

    outcome = app_state.outcome
    project_id = app_state.config.project_id if app_state.config else ""

    def set_status(message: str, is_error: bool = True, link: Optional[str] = None) -> None:
        status_text.value = message
        status_text.color = ft.Colors.RED_400 if is_error else ft.Colors.GREEN_400
        console_link.visible = bool(link)
        console_link.url = link
        page.update()

    def show_auth_error(exc: AuthServiceError) -> None:
        rejection = provider_rejection(exc, project_id)
        if rejection is not None:
            set_status(rejection.reason, link=rejection.console_url)
            return
        switch_to_sign_in.visible = exc.code == "email-already-in-use"
        set_status(describe_auth_error(exc))

    def complete_login(auth_result) -> None:
        app_state.session.uid = auth_result.uid
        app_state.session.email = auth_result.email
        app_state.session.display_name = auth_result.display_name
        app_state.session.id_token = auth_result.id_token
        app_state.session.refresh_token = auth_result.refresh_token

        try:
            fs = outcome.store.with_id_token(auth_result.id_token)
            fs.ensure_user_profile(auth_result.uid, auth_result.email, auth_result.display_name)
        except FirestoreServiceError as exc:
            set_status(f"Firestore error: {exc}")
            return
        except Exception as exc:
            set_status(f"Could not initialize profile: {exc}")
            return

        on_authenticated()

    def require_ready() -> bool:
        if isinstance(outcome, Ready):
            return True
        reason = outcome.reason if isinstance(outcome, Failed) else "Firebase is not initialized."
        set_status(reason, link=getattr(outcome, "console_url", None))
        return False

    def on_sign_in(_):
        if not require_ready():
            return
        if not email.value or not password.value:
            set_status("Email and password are required.")
            return

        try:
            result = outcome.auth.sign_in(email.value.strip(), password.value)
            complete_login(result)
        except AuthServiceError as exc:
            show_auth_error(exc)

    def on_sign_up(_):
        if not name.visible:
            name.visible = True
            set_status("Enter your name, then press Sign Up again.", is_error=False)
            return
        if not require_ready():
            return
        if not email.value or not password.value:
            set_status("Email and password are required.")
            return
        if len(password.value) < 6:
            set_status("Password must be at least 6 characters.")
            return

        try:
            result = outcome.auth.sign_up(email.value.strip(), password.value, name.value)
            complete_login(result)
        except AuthServiceError as exc:
            show_auth_error(exc)

    def on_switch(_):
        name.visible = False
        switch_to_sign_in.visible = False
        set_status("")

    switch_to_sign_in.on_click = on_switch

    banner = ft.Container(visible=False)
    if isinstance(outcome, Failed):
        banner = ft.Container(
            content=ft.Row(
                [
                    ft.Icon(ft.Icons.WARNING_AMBER, color=ft.Colors.AMBER_900),
                    ft.Text(outcome.reason, color=ft.Colors.AMBER_900),
                ],
                alignment=ft.MainAxisAlignment.CENTER,
            ),
            bgcolor=ft.Colors.AMBER_50,
            padding=10,
            border_radius=5,
        )

    return ft.View(
        route="/login",
        controls=[
            ft.AppBar(
                title=ft.Text("FinAI - Login"),
                actions=[ft.TextButton("Connection Settings", on_click=lambda _: page.go("/config"))],
            ),
            ft.Container(
                alignment=ft.Alignment.CENTER,
                padding=20,
                content=ft.Column(
                    horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                    controls=[
                        ft.Text("FinAI", size=30, weight=ft.FontWeight.BOLD),
                        ft.Text("Your personal finance assistant. Sign in or create an account."),
                        banner,
                        name,
                        email,
                        password,
                        ft.Row(
                            alignment=ft.MainAxisAlignment.CENTER,
                            controls=[
                                ft.Button("Sign In", on_click=on_sign_in),
                                ft.OutlinedButton("Sign Up", on_click=on_sign_up),
                            ],
                        ),
                        status_text,
                        console_link,
                        switch_to_sign_in,
                    ],
                ),
            ),
        ],
    )

from typing import Callable
import flet as ft

from finai.core.connection import ConnectionConfig
from finai.core.outcome import Failed
from finai.state.app_state import AppState


FIELDS = (
    ("api_key", "API Key"),
    ("auth_domain", "Auth Domain"),
    ("project_id", "Project ID"),
    ("storage_bucket", "Storage Bucket"),
    ("messaging_sender_id", "Messaging Sender ID"),
    ("app_id", "App ID"),
    ("measurement_id", "Measurement ID (optional)"),
)


def build_config_view(
    page: ft.Page,
    app_state: AppState,
    on_reload: Callable[[], None],
) -> ft.View:
    current = app_state.config or ConnectionConfig()
    inputs = {
        name: ft.TextField(label=label, width=420, value=getattr(current, name) or "")
        for name, label in FIELDS
    }
    status_text = ft.Text(color=ft.Colors.RED_400)

    outcome = app_state.outcome
    if isinstance(outcome, Failed):
        status_text.value = outcome.reason

    def set_status(message: str, is_error: bool = True) -> None:
        status_text.value = message
        status_text.color = ft.Colors.RED_400 if is_error else ft.Colors.GREEN_400
        page.update()

    def on_save(_):
        values = {name: (field.value or "").strip() for name, field in inputs.items()}
        if not values["api_key"] or not values["project_id"]:
            set_status("API Key and Project ID are required.")
            return
        values["measurement_id"] = values["measurement_id"] or None
        app_state.resolver.save_manual_override(ConnectionConfig(**values))
        on_reload()

    def on_clear(_):
        app_state.resolver.clear_manual_override()
        on_reload()

    return ft.View(
        route="/config",
        controls=[
            ft.AppBar(title=ft.Text("FinAI - Firebase Setup")),
            ft.Container(
                alignment=ft.Alignment.CENTER,
                padding=20,
                content=ft.Column(
                    horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                    controls=[
                        ft.Text("Connect your Firebase project", size=26, weight=ft.FontWeight.BOLD),
                        ft.Text("Copy the web app config from Project settings > General > Your apps."),
                        *inputs.values(),
                        ft.Row(
                            alignment=ft.MainAxisAlignment.CENTER,
                            controls=[
                                ft.Button("Save and Reload", on_click=on_save),
                                ft.OutlinedButton("Clear Saved Config", on_click=on_clear),
                                ft.TextButton(
                                    "Continue to Sign In",
                                    visible=app_state.is_ready,
                                    on_click=lambda _: page.go("/login"),
                                ),
                            ],
                        ),
                        status_text,
                    ],
                ),
            ),
        ],
    )

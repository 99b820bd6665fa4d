import os
import unittest
from unittest import mock

from fakes import FakePage

from finai.core.connection import ConnectionConfig
from finai.ui import app as ui_app


class ReloadTests(unittest.TestCase):
    def setUp(self):
        patches = [
            mock.patch.dict(os.environ, {}, clear=True),
            mock.patch.object(ui_app, "build_config_view"),
            mock.patch.object(ui_app, "build_login_view"),
            mock.patch.object(ui_app, "build_dashboard_view"),
        ]
        for patcher in patches:
            patcher.start()
            self.addCleanup(patcher.stop)

    def test_saved_override_leaves_config_form_after_reload(self):
        page = FakePage()
        ui_app.main(page)

        self.assertEqual(page.route, "/config")
        page_arg, app_state, reload = ui_app.build_config_view.call_args.args
        self.assertIs(page_arg, page)
        self.assertTrue(app_state.needs_configuration)

        app_state.resolver.save_manual_override(ConnectionConfig(api_key="abc123", project_id="proj1"))
        reload()

        self.assertEqual(page.route, "/login")
        self.assertEqual(len(page.views), 1)
        new_state = ui_app.build_login_view.call_args.args[1]
        self.assertIsNot(new_state, app_state)
        self.assertTrue(new_state.is_ready)
        self.assertEqual(new_state.config.project_id, "proj1")

    def test_clearing_override_returns_to_config_form(self):
        page = FakePage()
        ui_app.main(page)
        _, app_state, reload = ui_app.build_config_view.call_args.args
        app_state.resolver.save_manual_override(ConnectionConfig(api_key="abc123", project_id="proj1"))
        reload()

        new_state = ui_app.build_login_view.call_args.args[1]
        new_state.resolver.clear_manual_override()
        self.assertEqual(page.client_storage.data, {})

        reload()
        self.assertEqual(page.route, "/config")


if __name__ == "__main__":
    unittest.main()

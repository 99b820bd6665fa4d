import unittest
from unittest import mock

from requests import ConnectionError as RequestsConnectionError

from finai.core.outcome import FailureKind
from finai.services.auth_service import (
    AuthServiceError,
    FirebaseAuthService,
    describe_auth_error,
    provider_rejection,
)


def response(status_code, payload):
    res = mock.Mock()
    res.status_code = status_code
    res.json.return_value = payload
    return res


def error_response(message):
    return response(400, {"error": {"code": 400, "message": message}})


class FirebaseAuthServiceTests(unittest.TestCase):
    def setUp(self):
        self.auth = FirebaseAuthService("abc123", timeout=5)

    @mock.patch("finai.services.auth_service.requests.post")
    def test_sign_in(self, post):
        post.return_value = response(
            200,
            {"localId": "u1", "email": "a@b.com", "idToken": "tok", "refreshToken": "ref", "displayName": "Ann"},
        )
        result = self.auth.sign_in("a@b.com", "secret")

        self.assertEqual(result.uid, "u1")
        self.assertEqual(result.id_token, "tok")
        self.assertEqual(result.display_name, "Ann")
        args, kwargs = post.call_args
        self.assertTrue(args[0].endswith("/accounts:signInWithPassword"))
        self.assertEqual(kwargs["params"], {"key": "abc123"})
        self.assertEqual(kwargs["timeout"], 5)

    @mock.patch("finai.services.auth_service.requests.post")
    def test_sign_up_sets_display_name(self, post):
        post.side_effect = [
            response(200, {"localId": "u2", "email": "c@d.com", "idToken": "tok2", "refreshToken": "r"}),
            response(200, {"localId": "u2", "displayName": "Cat"}),
        ]
        result = self.auth.sign_up("c@d.com", "secret", " Cat ")

        self.assertEqual(result.display_name, "Cat")
        update_call = post.call_args_list[1]
        self.assertTrue(update_call.args[0].endswith("/accounts:update"))
        self.assertEqual(update_call.kwargs["json"]["displayName"], "Cat")
        self.assertEqual(update_call.kwargs["json"]["idToken"], "tok2")

    @mock.patch("finai.services.auth_service.requests.post")
    def test_error_codes_are_translated(self, post):
        cases = {
            "EMAIL_EXISTS": "email-already-in-use",
            "INVALID_LOGIN_CREDENTIALS": "invalid-credential",
            "OPERATION_NOT_ALLOWED : Password sign-in is disabled for this project.": "operation-not-allowed",
            "WEAK_PASSWORD : Password should be at least 6 characters": "weak-password",
        }
        for message, code in cases.items():
            with self.subTest(message=message):
                post.return_value = error_response(message)
                with self.assertRaises(AuthServiceError) as ctx:
                    self.auth.sign_in("a@b.com", "x")
                self.assertEqual(ctx.exception.code, code)

    @mock.patch("finai.services.auth_service.requests.post")
    def test_unknown_error_keeps_provider_message(self, post):
        post.return_value = error_response("SOMETHING_NEW")
        with self.assertRaises(AuthServiceError) as ctx:
            self.auth.sign_in("a@b.com", "x")
        self.assertEqual(ctx.exception.code, "unknown")
        self.assertEqual(describe_auth_error(ctx.exception), "Operation failed: SOMETHING_NEW")

    @mock.patch("finai.services.auth_service.requests.post")
    def test_network_failure(self, post):
        post.side_effect = RequestsConnectionError("down")
        with self.assertRaises(AuthServiceError) as ctx:
            self.auth.sign_in("a@b.com", "x")
        self.assertEqual(ctx.exception.code, "network-request-failed")

    def test_missing_api_key(self):
        with self.assertRaises(AuthServiceError):
            FirebaseAuthService("")


class ProviderRejectionTests(unittest.TestCase):
    def test_operation_not_allowed_links_to_sign_in_providers(self):
        failed = provider_rejection(AuthServiceError("operation-not-allowed"), "proj1")
        self.assertEqual(failed.kind, FailureKind.PROVIDER_REJECTED)
        self.assertEqual(
            failed.console_url,
            "https://console.firebase.google.com/project/proj1/authentication/providers",
        )

    def test_invalid_api_key_links_to_project_settings(self):
        failed = provider_rejection(AuthServiceError("invalid-api-key"), "proj1")
        self.assertTrue(failed.console_url.endswith("/project/proj1/settings/general"))

    def test_credential_mistakes_are_not_rejections(self):
        self.assertIsNone(provider_rejection(AuthServiceError("invalid-credential"), "proj1"))
        self.assertEqual(
            describe_auth_error(AuthServiceError("email-already-in-use")),
            "This email is already registered. Sign in instead.",
        )


if __name__ == "__main__":
    unittest.main()

from unittest import mock

from django.apps import apps
from django.test import RequestFactory, SimpleTestCase, override_settings
from firebase_admin import auth
from ninja.errors import HttpError

from .auth import BearerTokenAuth, get_verifier
from .backends.firebase_backend import FirebaseIdentityVerifier
from .backends.local_backend import LocalIdentityVerifier, parse_token_table
from .verifier import TokenVerificationError, VerifiedIdentity, build_verifier


class LocalBackendTest(SimpleTestCase):
    def test_parse_token_table(self):
        table = parse_token_table("tok-a:alice, tok-b:bob")
        self.assertEqual(table, {"tok-a": "alice", "tok-b": "bob"})

    def test_parse_token_table_skips_malformed(self):
        with self.assertLogs('apps.identity.backends.local_backend', level='WARNING'):
            table = parse_token_table("tok-a:alice,broken,:nouid")
        self.assertEqual(table, {"tok-a": "alice"})

    def test_parse_empty(self):
        self.assertEqual(parse_token_table(""), {})

    def test_verify_known_token(self):
        verifier = LocalIdentityVerifier({"tok-a": "alice"})
        self.assertEqual(verifier.verify("tok-a"), VerifiedIdentity(uid="alice"))

    def test_verify_unknown_token(self):
        verifier = LocalIdentityVerifier({"tok-a": "alice"})
        with self.assertRaises(TokenVerificationError):
            verifier.verify("tok-z")


class BuildVerifierTest(SimpleTestCase):
    @override_settings(IDENTITY_BACKEND='local', LOCAL_IDENTITY_TOKENS="tok-a:alice")
    def test_local_backend_from_string_setting(self):
        verifier = build_verifier()
        self.assertIsInstance(verifier, LocalIdentityVerifier)
        self.assertEqual(verifier.verify("tok-a").uid, "alice")

    @override_settings(IDENTITY_BACKEND='firebase', FIREBASE_CREDENTIALS_PATH='/tmp/key.json')
    def test_firebase_backend_is_lazy(self):
        with mock.patch('apps.identity.backends.firebase_backend.firebase_admin.initialize_app') as init:
            verifier = build_verifier()
        self.assertIsInstance(verifier, FirebaseIdentityVerifier)
        init.assert_not_called()

    @override_settings(IDENTITY_BACKEND='ldap')
    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            build_verifier()

    def test_verifier_built_at_bootstrap(self):
        self.assertIsNotNone(apps.get_app_config('identity').verifier)
        self.assertIs(get_verifier(), apps.get_app_config('identity').verifier)


@mock.patch('apps.identity.backends.firebase_backend.credentials.Certificate')
@mock.patch('apps.identity.backends.firebase_backend.firebase_admin.initialize_app')
@mock.patch('apps.identity.backends.firebase_backend.firebase_admin.get_app', side_effect=ValueError)
class FirebaseBackendTest(SimpleTestCase):
    def make_verifier(self):
        return FirebaseIdentityVerifier(credentials_path='/tmp/key.json', project_id='demo-project')

    @mock.patch('apps.identity.backends.firebase_backend.auth.verify_id_token')
    def test_verify_success(self, verify, get_app, init, cert):
        verify.return_value = {'uid': 'alice', 'email': 'alice@example.com'}
        verifier = self.make_verifier()

        identity = verifier.verify('id-token')

        self.assertEqual(identity.uid, 'alice')
        self.assertEqual(identity.email, 'alice@example.com')
        cert.assert_called_once_with('/tmp/key.json')
        init.assert_called_once_with(cert.return_value, {'projectId': 'demo-project'}, name='task-manager')
        verify.assert_called_once_with('id-token', app=init.return_value, check_revoked=False)

    @mock.patch('apps.identity.backends.firebase_backend.auth.verify_id_token')
    def test_app_initialized_once(self, verify, get_app, init, cert):
        verify.return_value = {'uid': 'alice'}
        verifier = self.make_verifier()

        verifier.verify('one')
        verifier.verify('two')

        init.assert_called_once()

    @mock.patch('apps.identity.backends.firebase_backend.auth.verify_id_token')
    def test_expired_token(self, verify, get_app, init, cert):
        verify.side_effect = auth.ExpiredIdTokenError('Token expired', cause=None)
        with self.assertRaises(TokenVerificationError):
            self.make_verifier().verify('old')

    @mock.patch('apps.identity.backends.firebase_backend.auth.verify_id_token')
    def test_invalid_token(self, verify, get_app, init, cert):
        verify.side_effect = auth.InvalidIdTokenError('Bad signature')
        with self.assertRaises(TokenVerificationError):
            self.make_verifier().verify('forged')

    @mock.patch('apps.identity.backends.firebase_backend.auth.verify_id_token')
    def test_bad_key_file_is_not_a_token_error(self, verify, get_app, init, cert):
        cert.side_effect = ValueError('Invalid service account certificate')
        with self.assertRaises(ValueError) as ctx:
            self.make_verifier().verify('id-token')
        self.assertNotIsInstance(ctx.exception, TokenVerificationError)
        verify.assert_not_called()

    @mock.patch('apps.identity.backends.firebase_backend.auth.verify_id_token')
    def test_malformed_token(self, verify, get_app, init, cert):
        verify.side_effect = ValueError('Illegal ID token provided')
        with self.assertRaises(TokenVerificationError):
            self.make_verifier().verify('garbage')


class BearerTokenAuthTest(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()
        self.auth = BearerTokenAuth(LocalIdentityVerifier({"tok-a": "alice"}))

    def test_valid_token_binds_uid(self):
        request = self.factory.get('/api/tasks', HTTP_AUTHORIZATION='Bearer tok-a')
        identity = self.auth(request)
        self.assertEqual(identity.uid, 'alice')
        self.assertEqual(request.uid, 'alice')

    def test_missing_header(self):
        request = self.factory.get('/api/tasks')
        self.assertIsNone(self.auth(request))

    def test_empty_token(self):
        request = self.factory.get('/api/tasks', HTTP_AUTHORIZATION='Bearer ')
        self.assertIsNone(self.auth(request))

    def test_invalid_token_is_forbidden(self):
        request = self.factory.get('/api/tasks', HTTP_AUTHORIZATION='Bearer nope')
        with self.assertLogs('apps.identity.auth', level='WARNING'):
            with self.assertRaises(HttpError) as ctx:
                self.auth(request)
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertFalse(hasattr(request, 'uid'))

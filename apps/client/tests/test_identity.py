import json
import os
import stat
import tempfile
from pathlib import Path

from django.test import SimpleTestCase

from apps.client.identity import IdentityClient, IdentityProviderError, NoActiveSessionError
from apps.client.session import Authenticated, Loading, Unauthenticated

from .fakes import FakeClock, FakeFirebase, make_clients


class SessionStateTest(SimpleTestCase):

    def setUp(self):
        self.identity, _, self.firebase, _, self.clock = make_clients()
        self.firebase.add_account('alice@example.com', 'secret', 'alice')

    def test_starts_loading(self):
        self.assertIsInstance(self.identity.state, Loading)
        self.assertIsNone(self.identity.current_user)

    def test_restore_without_session_is_unauthenticated(self):
        self.assertIsInstance(self.identity.restore(), Unauthenticated)

    def test_listener_sees_every_transition(self):
        seen = []
        self.identity.on_auth_state_changed(seen.append)
        self.identity.restore()
        self.identity.sign_in_with_email_and_password('alice@example.com', 'secret')
        self.identity.sign_out()

        self.assertEqual(
            [type(state) for state in seen],
            [Loading, Unauthenticated, Authenticated, Unauthenticated],
        )

    def test_unsubscribe(self):
        seen = []
        unsubscribe = self.identity.on_auth_state_changed(seen.append)
        unsubscribe()
        self.identity.restore()
        self.assertEqual(len(seen), 1)


class SignInTest(SimpleTestCase):

    def setUp(self):
        self.identity, _, self.firebase, _, self.clock = make_clients()
        self.firebase.add_account('alice@example.com', 'secret', 'alice')
        self.identity.restore()

    def test_email_password_sign_in(self):
        user = self.identity.sign_in_with_email_and_password('alice@example.com', 'secret')
        self.assertEqual(user.uid, 'alice')
        self.assertEqual(self.identity.state, Authenticated(user))
        self.assertEqual(self.firebase.requests[-1].url.params['key'], 'test-key')

    def test_wrong_password(self):
        with self.assertRaises(IdentityProviderError) as ctx:
            self.identity.sign_in_with_email_and_password('alice@example.com', 'nope')
        self.assertEqual(ctx.exception.code, 'INVALID_PASSWORD')
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertIsInstance(self.identity.state, Unauthenticated)

    def test_register(self):
        user = self.identity.create_user_with_email_and_password('new@example.com', 'pw123456')
        self.assertEqual(user.email, 'new@example.com')
        self.assertTrue(self.identity.state.is_authenticated)

    def test_register_existing_email(self):
        with self.assertRaises(IdentityProviderError) as ctx:
            self.identity.create_user_with_email_and_password('alice@example.com', 'x')
        self.assertEqual(ctx.exception.code, 'EMAIL_EXISTS')

    def test_google_sign_in(self):
        self.firebase.google_accounts['google-credential'] = ('g@example.com', 'guser')
        user = self.identity.sign_in_with_idp('google-credential')
        self.assertEqual(user.uid, 'guser')
        body = json.loads(self.firebase.requests[-1].content)
        self.assertTrue(body['returnSecureToken'])

    def test_google_sign_in_rejected(self):
        with self.assertRaises(IdentityProviderError):
            self.identity.sign_in_with_idp('unknown-credential')


class TokenTest(SimpleTestCase):

    def setUp(self):
        self.identity, _, self.firebase, _, self.clock = make_clients()
        self.firebase.add_account('alice@example.com', 'secret', 'alice')
        self.identity.restore()

    def test_no_session(self):
        with self.assertRaises(NoActiveSessionError):
            self.identity.get_id_token()

    def test_token_reused_until_near_expiry(self):
        user = self.identity.sign_in_with_email_and_password('alice@example.com', 'secret')
        self.clock.advance(minutes=30)
        self.assertEqual(self.identity.get_id_token(), user.id_token)

    def test_token_refreshed_near_expiry(self):
        user = self.identity.sign_in_with_email_and_password('alice@example.com', 'secret')
        seen = []
        self.identity.on_auth_state_changed(seen.append)

        self.clock.advance(minutes=56)
        token = self.identity.get_id_token()

        self.assertNotEqual(token, user.id_token)
        self.assertEqual(self.firebase.issued[token], 'alice')
        self.assertTrue(self.firebase.requests[-1].url.path.endswith('/token'))
        # Refresh does not count as a sign-in/out.
        self.assertEqual(len(seen), 1)

    def test_force_refresh(self):
        user = self.identity.sign_in_with_email_and_password('alice@example.com', 'secret')
        self.assertNotEqual(self.identity.get_id_token(force_refresh=True), user.id_token)


class PersistenceTest(SimpleTestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.session_file = Path(self.tmp.name) / 'session.json'
        self.firebase = FakeFirebase()
        self.firebase.add_account('alice@example.com', 'secret', 'alice')

    def test_session_survives_restart(self):
        identity, *_ = make_clients(self.firebase, session_file=self.session_file)
        identity.restore()
        identity.sign_in_with_email_and_password('alice@example.com', 'secret')
        self.assertTrue(self.session_file.exists())

        restarted, *_ = make_clients(self.firebase, session_file=self.session_file, clock=FakeClock())
        state = restarted.restore()

        self.assertIsInstance(state, Authenticated)
        self.assertEqual(state.user.uid, 'alice')

    def test_sign_out_clears_session_file(self):
        identity, *_ = make_clients(self.firebase, session_file=self.session_file)
        identity.restore()
        identity.sign_in_with_email_and_password('alice@example.com', 'secret')
        identity.sign_out()
        self.assertFalse(self.session_file.exists())

    def test_revoked_refresh_token(self):
        self.session_file.write_text(json.dumps({'uid': 'alice', 'refresh_token': 'revoked'}))
        identity, *_ = make_clients(self.firebase, session_file=self.session_file)
        with self.assertLogs('apps.client.identity', level='WARNING'):
            state = identity.restore()
        self.assertIsInstance(state, Unauthenticated)

    def test_unreadable_session_file(self):
        self.session_file.write_text('{not json')
        identity, *_ = make_clients(self.firebase, session_file=self.session_file)
        with self.assertLogs('apps.client.identity', level='WARNING'):
            state = identity.restore()
        self.assertIsInstance(state, Unauthenticated)

    def test_non_object_session_file(self):
        self.session_file.write_text('[]')
        identity, *_ = make_clients(self.firebase, session_file=self.session_file)
        with self.assertLogs('apps.client.identity', level='WARNING'):
            state = identity.restore()
        self.assertIsInstance(state, Unauthenticated)

    def test_session_file_is_private(self):
        identity, *_ = make_clients(self.firebase, session_file=self.session_file)
        identity.restore()
        identity.sign_in_with_email_and_password('alice@example.com', 'secret')
        self.assertEqual(stat.S_IMODE(os.stat(self.session_file).st_mode), 0o600)

    def test_unwritable_session_file_keeps_session_in_memory(self):
        blocker = Path(self.tmp.name) / 'not-a-dir'
        blocker.write_text('')
        identity, *_ = make_clients(self.firebase, session_file=blocker / 'session.json')
        identity.restore()
        seen = []
        identity.on_auth_state_changed(seen.append)

        with self.assertLogs('apps.client.identity', level='WARNING'):
            user = identity.sign_in_with_email_and_password('alice@example.com', 'secret')

        self.assertEqual(user.uid, 'alice')
        self.assertIsInstance(identity.state, Authenticated)
        self.assertIsInstance(seen[-1], Authenticated)


class CloseTest(SimpleTestCase):

    def test_close_owned_client(self):
        identity = IdentityClient(api_key='test-key')
        identity.close()
        self.assertTrue(identity._http.is_closed)

    def test_injected_client_left_open(self):
        identity, *_ = make_clients()
        identity.close()
        self.assertFalse(identity._http.is_closed)

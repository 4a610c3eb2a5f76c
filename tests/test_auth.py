import jwt
import pytest
from datetime import datetime, timedelta, timezone

from auth import TokenStore, token_expired, validate_auth_form
from models import User

KEY = 'backend-signing-key-that-we-never-see-0123456789'


def make_jwt(delta):
    return jwt.encode({'sub': '1', 'exp': datetime.now(timezone.utc) + delta}, KEY, algorithm='HS256')


class TestValidateAuthForm:

    @pytest.mark.parametrize('email,password', [('', 'secret1'), ('a@b.c', ''), ('', '')])
    def test_empty_fields(self, email, password):
        assert validate_auth_form(email, password) == 'Please fill in all fields'

    def test_signup_password_mismatch(self):
        error = validate_auth_form('a@b.c', 'secret1', 'secret2', is_login=False)
        assert error == 'Passwords do not match'

    def test_login_ignores_confirmation(self):
        assert validate_auth_form('a@b.c', 'secret1', 'other', is_login=True) is None

    def test_short_password(self):
        assert validate_auth_form('a@b.c', 'abc') == 'Password must be at least 6 characters'

    def test_mismatch_reported_before_length(self):
        assert validate_auth_form('a@b.c', 'abc', 'abd', is_login=False) == 'Passwords do not match'

    def test_valid_signup(self):
        assert validate_auth_form('a@b.c', 'secret1', 'secret1', is_login=False) is None


class TestTokenExpiry:

    def test_expired_jwt(self):
        assert token_expired(make_jwt(timedelta(minutes=-5)))

    def test_valid_jwt(self):
        assert not token_expired(make_jwt(timedelta(days=1)))

    def test_opaque_token_never_expires(self):
        assert not token_expired('abc123')

    def test_jwt_without_exp(self):
        token = jwt.encode({'sub': '1'}, KEY, algorithm='HS256')
        assert not token_expired(token)


class TestTokenStore:

    def test_roundtrip_and_clear(self, dashboard):
        store = TokenStore()
        with dashboard.app.test_request_context('/'):
            assert not store.is_authenticated()

            store.set_token('abc')
            store.set_user(User(id=1, email='a@b.c'))
            assert store.is_authenticated()
            assert store.get_user().email == 'a@b.c'

            store.clear()
            assert store.get_token() is None
            assert store.get_user() is None

    def test_expired_token_clears_session(self, dashboard):
        store = TokenStore()
        with dashboard.app.test_request_context('/'):
            store.set_token(make_jwt(timedelta(seconds=-1)))
            store.set_user(User(id=1, email='a@b.c'))

            assert not store.is_authenticated()
            assert store.get_user() is None

    def test_expired_token_reported(self, dashboard):
        expired = []
        store = TokenStore(on_expired=expired.append)
        token = make_jwt(timedelta(seconds=-1))
        with dashboard.app.test_request_context('/'):
            store.set_token(token)

            assert not store.is_authenticated()

        assert expired == [token]

    def test_opaque_token_not_reported(self, dashboard):
        expired = []
        store = TokenStore(on_expired=expired.append)
        with dashboard.app.test_request_context('/'):
            store.set_token('abc')

            assert store.is_authenticated()

        assert expired == []

"""
Session-backed storage for the backend bearer token, plus login form checks
"""

import jwt
from datetime import datetime, timezone
from functools import wraps
from typing import Callable, Optional
from flask import jsonify, redirect, request, session, url_for

from config import Config
from models import User
from logger import log

AUTH_TOKEN_KEY = 'bet_tracker_token'
AUTH_USER_KEY = 'bet_tracker_user'


class TokenStore:
    """
    Persists the bearer token and user in the signed session cookie.

    `on_expired` is called with the token when an expired JWT is cleared.
    """

    def __init__(self, on_expired: Optional[Callable[[str], None]] = None):
        self.on_expired = on_expired

    def get_token(self) -> Optional[str]:
        return session.get(AUTH_TOKEN_KEY)

    def set_token(self, token: str):
        session[AUTH_TOKEN_KEY] = token

    def remove_token(self):
        session.pop(AUTH_TOKEN_KEY, None)

    def get_user(self) -> Optional[User]:
        user = session.get(AUTH_USER_KEY)
        return User.from_dict(user) if user else None

    def set_user(self, user: User):
        session[AUTH_USER_KEY] = user.to_dict()

    def remove_user(self):
        session.pop(AUTH_USER_KEY, None)

    def clear(self):
        self.remove_token()
        self.remove_user()

    def is_authenticated(self) -> bool:
        token = self.get_token()
        if not token:
            return False
        if token_expired(token):
            log("Stored token expired, clearing session", "INFO")
            self.clear()
            if self.on_expired:
                self.on_expired(token)
            return False
        return True


token_store = TokenStore()


def token_expired(token: str) -> bool:
    """
    True when the token is a JWT whose `exp` claim has passed.

    The backend owns the signing key, so only the claims are read here.
    Tokens that are not JWTs, or carry no `exp`, never expire client-side.
    """
    try:
        claims = jwt.decode(token, options={'verify_signature': False})
    except jwt.InvalidTokenError:
        return False

    exp = claims.get('exp')
    if exp is None:
        return False
    try:
        return datetime.fromtimestamp(float(exp), tz=timezone.utc) <= datetime.now(timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return False


def login_required(f):
    """Decorator for views that need a logged-in user"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not token_store.is_authenticated():
            # Fragment and JSON requests come from the polling script
            if request.path.startswith('/api/') or request.path.startswith('/partials/'):
                return jsonify({'error': 'Not authenticated'}), 401
            return redirect(url_for('index'))
        return f(*args, **kwargs)

    return decorated_function


def validate_auth_form(email: str, password: str, confirm_password: str = '',
                       is_login: bool = True) -> Optional[str]:
    """Return the first form error, or None when the form can be submitted"""
    if not email or not password:
        return 'Please fill in all fields'

    if not is_login and password != confirm_password:
        return 'Passwords do not match'

    if len(password) < Config.MIN_PASSWORD_LENGTH:
        return f'Password must be at least {Config.MIN_PASSWORD_LENGTH} characters'

    return None

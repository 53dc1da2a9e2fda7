import pytest

from imagelinks_api.services.auth import SessionManager
from imagelinks_catalog.exceptions import UnauthorizedError
from imagelinks_catalog.kv import InMemoryKeyValueStore
from imagelinks_core.config import Settings


@pytest.fixture
def sessions(kv, api_settings):
    return SessionManager(kv, api_settings)


class TestSessionManager:

    def test_login_returns_valid_token(self, sessions, kv):
        token = sessions.login("admin", "s3cret")
        assert kv.get(f"session_{token}") == "valid"
        assert sessions.is_authenticated(token) is True

    def test_tokens_are_unique(self, sessions):
        assert sessions.login("admin", "s3cret") != sessions.login("admin", "s3cret")

    @pytest.mark.parametrize("username,password", [("admin", "wrong"), ("root", "s3cret"), ("", "")])
    def test_wrong_credentials(self, sessions, username, password):
        with pytest.raises(UnauthorizedError):
            sessions.login(username, password)

    def test_unset_password_disables_login(self, kv):
        sessions = SessionManager(kv, Settings(_env_file=None, admin_password=""))
        with pytest.raises(UnauthorizedError):
            sessions.login("admin", "")

    @pytest.mark.parametrize("token", [None, "", "unknown"])
    def test_unknown_token_not_authenticated(self, sessions, token):
        assert sessions.is_authenticated(token) is False

    def test_logout(self, sessions):
        token = sessions.login("admin", "s3cret")
        sessions.logout(token)
        assert sessions.is_authenticated(token) is False

    def test_session_expires(self, api_settings):
        now = [0.0]
        kv = InMemoryKeyValueStore(clock=lambda: now[0])
        sessions = SessionManager(kv, api_settings)
        token = sessions.login("admin", "s3cret")

        now[0] += api_settings.session_expiry_seconds + 1

        assert sessions.is_authenticated(token) is False

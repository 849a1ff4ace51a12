import pytest

from ludoteca.app.auth import AuthClient
from ludoteca.app.errors import NetworkError, ValidationError


@pytest.fixture
def auth(client):
    return AuthClient(client)


def _user(backend, email="ana@example.com", password="secret", **extra):
    backend.users[email] = {"id": "user-1", "password": password, "name": "Ana", **extra}


class TestSignIn:

    @pytest.mark.asyncio
    async def test_sets_token_and_role(self, backend, auth, client):
        _user(backend, role="admin")

        user = await auth.sign_in("ana@example.com", "secret")

        assert user.user_id == "user-1"
        assert user.name == "Ana"
        assert auth.is_authenticated and auth.is_admin
        assert client.token == "token-user-1"

    @pytest.mark.asyncio
    async def test_default_role(self, backend, auth):
        _user(backend)
        user = await auth.sign_in("ana@example.com", "secret")
        assert user.role == "user"
        assert not auth.is_admin

    @pytest.mark.asyncio
    async def test_wrong_password(self, backend, auth):
        _user(backend)
        with pytest.raises(NetworkError) as exc:
            await auth.sign_in("ana@example.com", "nope")
        assert exc.value.key == "errors:invalid_credentials"
        assert not auth.is_authenticated

    @pytest.mark.asyncio
    async def test_unconfirmed_email(self, backend, auth, client):
        _user(backend, confirmed=False)
        with pytest.raises(ValidationError) as exc:
            await auth.sign_in("ana@example.com", "secret")
        assert exc.value.key == "errors:email_not_confirmed"
        assert client.token is None

    @pytest.mark.asyncio
    async def test_missing_fields(self, backend, auth):
        with pytest.raises(ValidationError):
            await auth.sign_in("", "secret")
        assert backend.calls == []


class TestSignUpAndOut:

    @pytest.mark.asyncio
    async def test_registered_user_must_confirm(self, backend, auth):
        user_id = await auth.sign_up("new@example.com", "pw", {"name": "Nuevo"})

        assert user_id.startswith("user-")
        with pytest.raises(ValidationError):
            await auth.sign_in("new@example.com", "pw")

    @pytest.mark.asyncio
    async def test_sign_out_clears_session(self, backend, auth, client):
        _user(backend)
        await auth.sign_in("ana@example.com", "secret")

        await auth.sign_out()

        assert client.token is None
        assert not auth.is_authenticated
        assert ("POST", "/api/auth/logout") in backend.calls

"""
Unit tests for account, user administration, security and dashboard services
"""
from unittest.mock import AsyncMock, Mock

import pytest
from supabase import AuthApiError

from conftest import complaint_row
from resolve.errors import AuthenticationError, ConflictError, StoreError
from resolve.models import (
    AppRole,
    ComplaintListItem,
    Profile,
    SeedUser,
    SignInRequest,
    SignUpRequest,
    UserRole,
)
from resolve.services import AuthService, DashboardService, SecurityService, UserAdminService


def auth_client():
    client = Mock()
    client.auth.sign_up = AsyncMock()
    client.auth.sign_in_with_password = AsyncMock()
    client.auth.resend = AsyncMock()
    client.auth.admin.sign_out = AsyncMock()
    return client


class TestAuthService:
    """Test sign-up and sign-in error mapping"""

    @pytest.mark.asyncio
    async def test_sign_up_sends_redirect_and_name(self):
        client = auth_client()
        client.auth.sign_up.return_value = Mock(user=Mock(id="student-1", email_confirmed_at=None))

        result = await AuthService(client).sign_up(
            SignUpRequest(email="asha@example.com", password="secret1", full_name="  Asha Menon ")
        )

        assert result == {"user_id": "student-1", "email_verified": False}
        credentials = client.auth.sign_up.call_args.args[0]
        assert credentials["options"]["data"] == {"full_name": "Asha Menon"}
        assert credentials["options"]["email_redirect_to"].endswith("/dashboard")

    @pytest.mark.asyncio
    async def test_duplicate_sign_up_conflicts(self):
        client = auth_client()
        client.auth.sign_up.side_effect = AuthApiError("User already registered", 422, "user_already_exists")

        with pytest.raises(ConflictError, match="already registered"):
            await AuthService(client).sign_up(
                SignUpRequest(email="asha@example.com", password="secret1", full_name="Asha Menon")
            )

    @pytest.mark.asyncio
    async def test_bad_credentials(self):
        client = auth_client()
        client.auth.sign_in_with_password.side_effect = AuthApiError(
            "Invalid login credentials", 400, "invalid_credentials"
        )

        with pytest.raises(AuthenticationError, match="Invalid email or password"):
            await AuthService(client).sign_in(SignInRequest(email="asha@example.com", password="wrong"))

    @pytest.mark.asyncio
    async def test_sign_in_returns_tokens(self):
        client = auth_client()
        client.auth.sign_in_with_password.return_value = Mock(
            session=Mock(access_token="access", refresh_token="refresh", expires_at=1760000000),
            user=Mock(id="student-1"),
        )

        result = await AuthService(client).sign_in(SignInRequest(email="asha@example.com", password="secret1"))

        assert result["access_token"] == "access"
        assert result["user_id"] == "student-1"

    @pytest.mark.asyncio
    async def test_sign_out_uses_service_client(self):
        client = auth_client()
        service_client = auth_client()

        await AuthService(client, service_client).sign_out("jwt")

        service_client.auth.admin.sign_out.assert_awaited_once_with("jwt")
        client.auth.admin.sign_out.assert_not_awaited()


class TestUserAdminService:
    @pytest.fixture
    def stores(self):
        store = Mock()
        store.list_profiles = AsyncMock(
            return_value=[Profile(id="u-1", full_name="Asha Menon"), Profile(id="u-2", full_name="Campus Admin")]
        )
        store.list_roles = AsyncMock(return_value=[UserRole(user_id="u-2", role=AppRole.ADMIN)])

        service_store = Mock()
        service_store.auth_emails = AsyncMock(return_value={"u-2": "admin@example.com"})
        service_store.create_auth_user = AsyncMock(side_effect=lambda email, password, name: f"id-{email}")
        service_store.insert_profile = AsyncMock()
        service_store.insert_role = AsyncMock()
        return store, service_store

    @pytest.mark.asyncio
    async def test_list_users_joins_roles_and_emails(self, stores):
        users = await UserAdminService(*stores).list_users()

        assert [(u.full_name, u.email, u.role) for u in users] == [
            ("Asha Menon", "Unknown", AppRole.STUDENT),
            ("Campus Admin", "admin@example.com", AppRole.ADMIN),
        ]

    @pytest.mark.asyncio
    async def test_create_test_users_collects_failures(self, stores):
        """Test that one failing user does not stop the batch"""
        store, service_store = stores

        async def create(email, password, name):
            if email == "taken@example.com":
                raise StoreError("User already exists")
            return f"id-{email}"

        service_store.create_auth_user = AsyncMock(side_effect=create)
        users = [
            SeedUser(email="admin@example.com", password="secret1", full_name="Campus Admin", role=AppRole.ADMIN),
            SeedUser(email="taken@example.com", password="secret1", full_name="Taken User"),
        ]

        result = await UserAdminService(store, service_store).create_test_users(users)

        assert result["success"] is True
        assert result["created"] == [
            {"email": "admin@example.com", "user_id": "id-admin@example.com", "role": "admin", "success": True}
        ]
        assert result["errors"] == [{"email": "taken@example.com", "error": "User already exists"}]
        assert result["summary"] == {"total": 2, "successful": 1, "failed": 1}
        service_store.insert_role.assert_awaited_once_with("id-admin@example.com", AppRole.ADMIN)

    @pytest.mark.asyncio
    async def test_create_test_users_without_errors(self, stores):
        users = [SeedUser(email="s@example.com", password="secret1", full_name="Student One")]

        result = await UserAdminService(*stores).create_test_users(users)

        assert result["errors"] is None
        assert result["summary"]["successful"] == 1


class TestSecurityService:
    @pytest.mark.asyncio
    async def test_record_event_never_raises(self):
        store = Mock()
        store.log_security_event = AsyncMock(side_effect=StoreError())

        await SecurityService(store).record_event("failed_auth", "high", details={"error": "invalid_token"})

        store.log_security_event.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_resolve_activity(self):
        store = Mock()
        store.update_suspicious_activity = AsyncMock()

        await SecurityService(store).resolve_activity("act-1", "admin-1", "False alarm")

        activity_id, changes = store.update_suspicious_activity.call_args.args
        assert activity_id == "act-1"
        assert changes["resolved"] is True
        assert changes["resolved_by"] == "admin-1"
        assert changes["notes"] == "False alarm"


class TestDashboardService:
    @pytest.fixture
    def store(self):
        mock_store = Mock()
        mock_store.get_profile = AsyncMock(return_value=None)
        mock_store.list_complaints = AsyncMock(
            return_value=[
                ComplaintListItem.model_validate(complaint_row("c-1", severity="urgent")),
                ComplaintListItem.model_validate(complaint_row("c-2", severity="urgent", status="resolved")),
                ComplaintListItem.model_validate(complaint_row("c-3", severity="low")),
            ]
        )
        mock_store.list_ratings = AsyncMock(return_value=[])
        return mock_store

    @pytest.mark.asyncio
    async def test_admin_view_has_analytics_and_urgent(self, store):
        view = await DashboardService(store).load_view("admin-1", AppRole.ADMIN)

        store.list_complaints.assert_awaited_once_with()
        assert [c.id for c in view.urgent] == ["c-1"]
        assert view.analytics.total == 3

    @pytest.mark.asyncio
    async def test_student_view_is_scoped(self, store):
        view = await DashboardService(store).load_view("student-1", AppRole.STUDENT)

        store.list_complaints.assert_awaited_once_with(student_id="student-1")
        assert view.analytics is None
        assert view.urgent == []

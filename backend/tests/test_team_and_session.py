"""
Session and team management tests.

Verifies:
- Login outcomes (ok / invalid credentials / inactive)
- Registration defaults and silent no-op on a taken username
- Team operations enforce the target rules
- The live session picks up access changes on the next read
"""

import pytest

from stockbook.extensions import store
from stockbook.models import UserRole
from stockbook.seeds import DEFAULT_ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD
from stockbook.services import auth_service, session_service, team_service
from stockbook.services.auth_service import LoginStatus
from stockbook.services.permission_service import PermissionDeniedError
from stockbook.validation import ValidationError, NotFoundError


class TestLogin:

    def test_seeded_admin_signs_in(self, app):
        result = session_service.login(DEFAULT_ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD)
        assert result.ok
        assert result.user.role == UserRole.SUPERADMIN
        assert session_service.get_current_user().username == DEFAULT_ADMIN_USERNAME

    def test_wrong_password(self, app):
        result = session_service.login(DEFAULT_ADMIN_USERNAME, "nope")
        assert result.status == LoginStatus.INVALID_CREDENTIALS
        assert session_service.get_current_user() is None

    def test_unknown_user(self, app):
        assert session_service.login("ghost", "x").status == LoginStatus.INVALID_CREDENTIALS

    def test_inactive_is_reported_separately(self, app, make_user, user_password):
        make_user("sleepy", is_active=False)
        result = session_service.login("sleepy", user_password)
        assert result.status == LoginStatus.INACTIVE
        assert session_service.get_current_user() is None

    def test_logout(self, app, signed_in_admin):
        session_service.logout()
        assert session_service.get_current_user() is None


class TestRegister:

    def test_role_defaults(self, app):
        member = auth_service.register_user("m", "pw")
        admin = auth_service.register_user("a", "pw", UserRole.ADMIN)
        assert member.permissions.to_dict() == {
            "inventory": True, "invoices": True, "orders": False, "reports": False, "team": False,
        }
        assert all(admin.permissions.to_dict().values())

    def test_taken_username_is_noop(self, app):
        before = store.users.count()
        assert auth_service.register_user(DEFAULT_ADMIN_USERNAME, "other") is None
        assert store.users.count() == before

    @pytest.mark.parametrize("username,password,role", [
        ("", "pw", UserRole.MEMBER),
        ("x", "", UserRole.MEMBER),
        ("x", "pw", "OWNER"),
    ])
    def test_rejects_bad_input(self, app, username, password, role):
        with pytest.raises(ValidationError):
            auth_service.register_user(username, password, role)

    def test_passwords_are_hashed(self, app):
        user = auth_service.register_user("hashy", "pw")
        assert user.password_hash != "pw"
        assert auth_service.verify_password("pw", user.password_hash)
        assert not auth_service.verify_password("pw", "not-a-hash")


# =============================================================================
# TEAM RULES
# =============================================================================


class TestTeamRules:

    def test_admin_without_team_cannot_toggle_member(self, app, make_user):
        admin = make_user("adm", UserRole.ADMIN, team=False)
        member = make_user("mem")
        with pytest.raises(PermissionDeniedError):
            team_service.update_user_permissions(admin, member.id, {"orders": True})
        assert store.users.get(member.id).permissions.orders is False

    def test_admin_with_team_manages_member_only(self, app, make_user, admin):
        team_admin = make_user("adm", UserRole.ADMIN, team=True)
        member = make_user("mem")
        other_admin = make_user("adm2", UserRole.ADMIN)

        updated = team_service.update_user_permissions(team_admin, member.id, {"orders": True})
        assert updated.permissions.orders is True
        assert store.users.get(member.id).permissions.orders is True

        with pytest.raises(PermissionDeniedError):
            team_service.update_user_permissions(team_admin, other_admin.id, {"orders": False})
        with pytest.raises(PermissionDeniedError):
            team_service.toggle_user_status(team_admin, admin.id)

    def test_nobody_manages_self(self, app, admin):
        with pytest.raises(PermissionDeniedError):
            team_service.toggle_user_status(admin, admin.id)
        with pytest.raises(PermissionDeniedError):
            team_service.delete_user(admin, admin.id)

    def test_superadmin_manages_admins(self, app, admin, make_user):
        other = make_user("adm", UserRole.ADMIN)
        assert team_service.toggle_user_status(admin, other.id).is_active is False
        assert team_service.toggle_user_status(admin, other.id).is_active is True
        team_service.delete_user(admin, other.id)
        assert store.users.get(other.id) is None

    def test_admin_creates_members_only(self, app, make_user):
        team_admin = make_user("adm", UserRole.ADMIN, team=True)
        assert team_service.create_user(team_admin, "new", "pw").role == UserRole.MEMBER
        with pytest.raises(PermissionDeniedError):
            team_service.create_user(team_admin, "boss2", "pw", UserRole.SUPERADMIN)

    def test_list_users_needs_team(self, app, make_user, admin):
        member = make_user("mem")
        with pytest.raises(PermissionDeniedError):
            team_service.list_users(member)
        assert {u.username for u in team_service.list_users(admin)} == {"admin", "mem"}

    def test_unknown_target(self, app, admin):
        with pytest.raises(NotFoundError):
            team_service.delete_user(admin, "nope")

    def test_permission_payload_validation(self, app, admin, make_user):
        member = make_user("mem")
        with pytest.raises(ValidationError):
            team_service.update_user_permissions(admin, member.id, {"billing": True})
        with pytest.raises(ValidationError):
            team_service.update_user_permissions(admin, member.id, {"orders": "yes"})


# =============================================================================
# SESSION SYNC
# =============================================================================


class TestSessionSync:

    def test_revocation_applies_to_live_session(self, app, admin, make_user):
        member = make_user("mem", orders=True)
        session_service.start_session(member)

        team_service.update_user_permissions(admin, member.id, {"orders": False})

        current = session_service.get_current_user()
        assert current.permissions.orders is False
        assert store.session.get().user.permissions.orders is False

    def test_deactivation_applies_to_live_session(self, app, admin, make_user):
        member = make_user("mem")
        session_service.start_session(member)
        team_service.toggle_user_status(admin, member.id)
        assert session_service.get_current_user().is_active is False

    def test_deleting_session_user_signs_out(self, app, admin, make_user):
        member = make_user("mem")
        session_service.start_session(member)
        team_service.delete_user(admin, member.id)
        assert session_service.get_current_user() is None
        assert store.session.get() is None

    def test_unchanged_user_keeps_snapshot(self, app, signed_in_admin):
        record = session_service.sync_session()
        assert record.user_id == signed_in_admin.id
        assert record.user.access_snapshot() == signed_in_admin.access_snapshot()

from datetime import timedelta

from gestor.extensions import db
from gestor.models import SessionToken
from gestor.services.session_service import hash_token


class TestSessions:

    def test_token_is_stored_hashed(self, services, clerk):
        record, token = services.sessions.create_session(clerk)
        assert len(token) == 64
        assert record.token_hash == hash_token(token)
        assert db.session.query(SessionToken).filter_by(token_hash=token).first() is None

    def test_valid_token_resolves_stored_employee(self, services, clerk):
        _, token = services.sessions.create_session(clerk)
        context = services.sessions.validate_session(token)
        assert context.employee.id == "e2"
        assert context.employee.name == "Store Clerk 1"

    def test_expired_token(self, services, clerk):
        record, token = services.sessions.create_session(clerk)
        record.expires_at = record.created_at - timedelta(seconds=1)
        db.session.commit()
        assert services.sessions.validate_session(token) is None

    def test_revoked_token(self, services, clerk):
        _, token = services.sessions.create_session(clerk)
        assert services.sessions.revoke_session(token) is True
        assert services.sessions.revoke_session(token) is False
        assert services.sessions.validate_session(token) is None

    def test_unknown_or_empty_token(self, services):
        assert services.sessions.validate_session("f" * 64) is None
        assert services.sessions.validate_session("") is None

    def test_token_of_removed_employee(self, services, manager, clerk):
        _, token = services.sessions.create_session(clerk)
        services.employees.delete_employee(manager, "e2")
        assert services.sessions.validate_session(token) is None

    def test_revoke_all_for_employee(self, services, clerk, manager):
        tokens = [services.sessions.create_session(clerk)[1] for _ in range(2)]
        _, other = services.sessions.create_session(manager)

        assert services.sessions.revoke_employee_sessions("e2") == 2
        assert all(services.sessions.validate_session(t) is None for t in tokens)
        assert services.sessions.validate_session(other) is not None

"""Tests for storage.auth — accounts, sessions and result history."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from storage.auth import (
    RESULTS_KEY,
    SESSION_KEY,
    USERS_KEY,
    AuthError,
    AuthService,
    DuplicateUserError,
    InvalidCredentialsError,
)
from factories import make_result


class TestSignup:
    def test_session_matches_new_user_record(self, auth, store):
        user = auth.signup("Ada", "ada@x.com", "pw")
        users = json.loads(store.get_item(USERS_KEY))
        assert len(users) == 1
        assert users[0]["id"] == user.id
        assert users[0]["name"] == "Ada"
        assert users[0]["email"] == "ada@x.com"

    def test_signup_starts_session(self, auth):
        user = auth.signup("Ada", "ada@x.com", "pw")
        assert auth.get_current_user() == user

    def test_session_record_has_no_credentials(self, auth, store):
        auth.signup("Ada", "ada@x.com", "pw")
        session = json.loads(store.get_item(SESSION_KEY))
        assert set(session) == {"id", "name", "email"}

    def test_password_is_not_stored_verbatim(self, auth, store):
        auth.signup("Ada", "ada@x.com", "hunter2")
        raw = store.get_item(USERS_KEY)
        assert "hunter2" not in raw
        assert "passwordHash" in json.loads(raw)[0]

    def test_duplicate_email_rejected(self, auth):
        auth.signup("Ada", "ada@x.com", "pw")
        with pytest.raises(DuplicateUserError):
            auth.signup("Another Ada", "ada@x.com", "other")

    def test_duplicate_check_is_case_sensitive(self, auth):
        auth.signup("Ada", "ada@x.com", "pw")
        other = auth.signup("Ada", "ADA@x.com", "pw")
        assert other.email == "ADA@x.com"

    def test_ids_are_unique(self, auth):
        a = auth.signup("Ada", "ada@x.com", "pw")
        b = auth.signup("Bob", "bob@x.com", "pw")
        assert a.id != b.id

    def test_blank_name_rejected(self, auth):
        with pytest.raises(AuthError, match="Name is required"):
            auth.signup("   ", "ada@x.com", "pw")


class TestLogin:
    def test_login_returns_same_user_id_as_signup(self, auth):
        created = auth.signup("Ada", "ada@x.com", "pw")
        auth.logout()
        logged_in = auth.login("ada@x.com", "pw")
        assert logged_in.id == created.id

    def test_login_restores_session(self, auth):
        created = auth.signup("Ada", "ada@x.com", "pw")
        auth.logout()
        auth.login("ada@x.com", "pw")
        assert auth.get_current_user() == created

    @pytest.mark.parametrize("email,password", [
        ("ada@x.com", "wrong"),
        ("nobody@x.com", "pw"),
        ("ADA@x.com", "pw"),
        ("", ""),
    ])
    def test_any_other_pair_is_rejected(self, auth, email, password):
        auth.signup("Ada", "ada@x.com", "pw")
        auth.logout()
        with pytest.raises(InvalidCredentialsError):
            auth.login(email, password)
        assert auth.get_current_user() is None

    def test_login_with_no_users(self, auth):
        with pytest.raises(InvalidCredentialsError, match="Invalid email or password"):
            auth.login("ada@x.com", "pw")


class TestLogout:
    def test_logout_is_idempotent(self, auth):
        auth.signup("Ada", "ada@x.com", "pw")
        auth.logout()
        assert auth.get_current_user() is None
        auth.logout()
        assert auth.get_current_user() is None

    def test_logout_keeps_account(self, auth):
        auth.signup("Ada", "ada@x.com", "pw")
        auth.logout()
        assert auth.login("ada@x.com", "pw").name == "Ada"


class TestCurrentUser:
    def test_no_session(self, auth):
        assert auth.get_current_user() is None

    def test_session_restored_for_same_client(self, store):
        AuthService(store).for_client("c1").signup("Ada", "ada@x.com", "pw")
        assert AuthService(store).for_client("c1").get_current_user().email == "ada@x.com"

    def test_session_is_private_to_client(self, auth):
        ada = auth.for_client("c1")
        stranger = auth.for_client("c2")
        ada.signup("Ada", "ada@x.com", "pw")
        assert stranger.get_current_user() is None
        stranger.logout()
        assert ada.get_current_user().name == "Ada"

    def test_clients_share_accounts_and_history(self, auth, sample_result):
        user = auth.for_client("c1").signup("Ada", "ada@x.com", "pw")
        auth.for_client("c1").save_result(user.id, sample_result)
        other = auth.for_client("c2")
        assert other.login("ada@x.com", "pw").id == user.id
        assert len(other.get_history(user.id)) == 1

    def test_malformed_session_is_ignored(self, auth, store):
        store.set_item(SESSION_KEY, "{broken")
        assert auth.get_current_user() is None
        store.set_item(SESSION_KEY, json.dumps({"id": "only-id"}))
        assert auth.get_current_user() is None


class TestHistory:
    def test_empty_history(self, auth):
        assert auth.get_history("nobody") == []

    def test_save_adds_id_and_timestamp(self, auth, sample_result):
        saved = auth.save_result("u1", sample_result)
        assert saved.id
        assert saved.date.endswith("Z")
        datetime.fromisoformat(saved.date.replace("Z", "+00:00"))

    def test_save_prepends(self, auth):
        r1 = auth.save_result("u1", make_result("The Campus Catalyst"))
        r2 = auth.save_result("u1", make_result("The Midnight Philosopher"))
        history = auth.get_history("u1")
        assert [h.id for h in history] == [r2.id, r1.id]

    def test_history_is_newest_first_by_timestamp(self, store):
        moments = iter([
            datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
            datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc) + timedelta(hours=1),
        ])
        auth = AuthService(store, clock=lambda: next(moments))
        auth.save_result("u1", make_result("T1"))
        auth.save_result("u1", make_result("T2"))
        history = auth.get_history("u1")
        assert [h.archetype for h in history] == ["T2", "T1"]
        assert history[0].date > history[1].date

    def test_round_trip_preserves_fields(self, auth, sample_result):
        saved = auth.save_result("u1", sample_result)
        [loaded] = auth.get_history("u1")
        assert loaded == saved
        assert loaded.result() == sample_result

    def test_histories_are_per_user(self, auth, sample_result):
        auth.save_result("u1", sample_result)
        assert auth.get_history("u2") == []

    def test_no_dedupe(self, auth, sample_result):
        auth.save_result("u1", sample_result)
        auth.save_result("u1", sample_result)
        assert len(auth.get_history("u1")) == 2

    def test_persisted_layout_uses_camel_case(self, auth, store, sample_result):
        auth.save_result("u1", sample_result)
        table = json.loads(store.get_item(RESULTS_KEY))
        entry = table["u1"][0]
        assert "studyTips" in entry
        assert "careerPaths" in entry
        assert entry["traits"][0]["fullMark"] == 100

    def test_get_saved_result(self, auth, sample_result):
        saved = auth.save_result("u1", sample_result)
        assert auth.get_saved_result("u1", saved.id) == saved
        assert auth.get_saved_result("u1", "missing") is None
        assert auth.get_saved_result("u2", saved.id) is None

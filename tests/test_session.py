import uuid
from unittest.mock import patch

import pytest

from core.errors import AccountExists, InvalidCredentials, NotAuthenticated
from core.session import SessionManager, hash_password, verify_password
from core.state import Campaign
from core.store import ABSENT, PersistentStore


def test_sign_up_creates_first_time_account_and_session(session, store):
    result = session.sign_up("a@x.com", "pw")

    assert result.is_authenticated
    assert result.user_email == "a@x.com"
    assert result.user_id.startswith("user_")
    assert result.is_first_time_user is True

    users = store.get("users")
    assert users["a@x.com"]["id"] == result.user_id
    assert users["a@x.com"]["isFirstTimeUser"] is True
    assert store.get("auth") == {
        "isAuthenticated": True,
        "userId": result.user_id,
        "userEmail": "a@x.com",
        "isFirstTimeUser": True,
    }


def test_password_is_not_stored_in_plaintext(session, store):
    session.sign_up("a@x.com", "hunter2")
    stored = store.get("users")["a@x.com"]["password"]
    assert "hunter2" not in stored
    assert verify_password("hunter2", stored)


def test_sign_up_existing_email_fails(session):
    session.sign_up("a@x.com", "pw")
    with pytest.raises(AccountExists):
        session.sign_up(" a@x.com ", "other")


def test_email_case_is_kept(session, store):
    session.sign_up("Ada@X.com", "pw")
    session.log_out()

    assert "Ada@X.com" in store.get("users")
    assert session.log_in("Ada@X.com", "pw").user_email == "Ada@X.com"
    session.log_out()
    with pytest.raises(InvalidCredentials):
        session.log_in("ada@x.com", "pw")


def test_mixed_case_registry_entry_can_log_in(session, store):
    store.put("users", {"Owner@X.com": {"password": hash_password("pw"), "id": "user_legacy", "isFirstTimeUser": False}})
    result = session.log_in("Owner@X.com", "pw")
    assert result.user_id == "user_legacy"


def test_sign_up_requires_email_and_password(session):
    with pytest.raises(ValueError):
        session.sign_up("", "pw")
    with pytest.raises(ValueError):
        session.sign_up("a@x.com", "")


def test_sign_up_redraws_colliding_ids(session, store):
    store.put("users", {"old@x.com": {"password": hash_password("pw"), "id": "user_" + "0" * 32, "isFirstTimeUser": True}})
    ids = [uuid.UUID(int=0), uuid.UUID(int=1)]
    with patch("core.session.uuid.uuid4", side_effect=ids):
        result = session.sign_up("new@x.com", "pw")
    assert result.user_id == "user_" + "0" * 31 + "1"


def test_log_in_with_wrong_password_fails_and_stays_logged_out(store, campaigns):
    SessionManager(store).sign_up("a@x.com", "pw")
    fresh = SessionManager(store, campaign_store=campaigns)

    with pytest.raises(InvalidCredentials):
        fresh.log_in("a@x.com", "wrong")
    assert not fresh.is_authenticated


def test_log_in_unknown_email_fails(session):
    with pytest.raises(InvalidCredentials):
        session.log_in("nobody@x.com", "pw")


def test_log_in_reflects_stored_first_time_flag(session, store):
    session.sign_up("a@x.com", "pw")
    session.mark_onboarded()
    session.log_out()

    result = session.log_in("a@x.com", "pw")
    assert result.is_authenticated
    assert result.is_first_time_user is False


def test_mark_onboarded_is_idempotent(session, store):
    session.sign_up("a@x.com", "pw")
    session.mark_onboarded()
    session.mark_onboarded()

    assert session.is_first_time_user is False
    assert store.get("users")["a@x.com"]["isFirstTimeUser"] is False
    assert store.get("auth")["isFirstTimeUser"] is False


def test_mark_onboarded_requires_session(session):
    with pytest.raises(NotAuthenticated):
        session.mark_onboarded()


def test_first_time_flag_only_resets_with_a_new_sign_up(session, store):
    session.sign_up("a@x.com", "pw")
    session.mark_onboarded()
    session.log_out()
    session.log_in("a@x.com", "pw")
    assert session.is_first_time_user is False

    session.log_out()
    session.sign_up("b@x.com", "pw")
    assert session.is_first_time_user is True


def test_log_out_discards_account_state_but_keeps_users(session, campaigns, store):
    session.sign_up("a@x.com", "pw")
    campaigns.set_product_brief("Company Name: X")
    campaigns.append_campaign(Campaign(campaign_name="c", timestamp=1, assets_generated=["Video Scripts"], details={}))
    users_before = store.get("users")

    session.log_out()

    assert not session.is_authenticated
    assert store.get("auth") is ABSENT
    assert store.get("onboarding_data") is ABSENT
    assert store.get("campaign_history") is ABSENT
    assert store.get("users") == users_before
    assert campaigns.product_brief == ""
    assert campaigns.campaign_history == ()


def test_log_out_without_campaign_store_clears_keys(store):
    manager = SessionManager(store)
    manager.sign_up("a@x.com", "pw")
    store.put("onboarding_data", {"productBrief": "b", "valuePropFramework": None})
    store.put("campaign_history", [])

    manager.log_out()

    assert store.get("onboarding_data") is ABSENT
    assert store.get("campaign_history") is ABSENT


def test_session_is_restored_verbatim_on_start(session, store):
    session.sign_up("a@x.com", "pw")
    # the registry is not consulted when restoring
    store.put("users", {})

    restored = SessionManager(PersistentStore(store.root_dir))
    restored.load_from_store()

    assert restored.is_authenticated
    assert restored.session.user_email == "a@x.com"
    assert restored.current_account() is None


def test_corrupt_session_record_starts_logged_out(store):
    store.put("auth", {"isAuthenticated": "definitely"})
    manager = SessionManager(store)
    manager.load_from_store()
    assert not manager.is_authenticated


def test_current_account(session):
    assert session.current_account() is None
    session.sign_up("a@x.com", "pw")
    account = session.current_account()
    assert account.email == "a@x.com"
    assert account.is_first_time_user is True

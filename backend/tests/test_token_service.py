from datetime import datetime, timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from rudra.core.database import Base
from rudra.models.module import Module
from rudra.models.security import RefreshToken
from rudra.models.user import User
from rudra.services.credential_store import SqlCredentialStore
from rudra.services.token_service import TokenService, refresh_expiry_minutes
from rudra.services.user_directory import SqlUserDirectory


def _make_session():
    engine = create_engine("sqlite:///:memory:")
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    return SessionLocal()


def test_refresh_expiry_minutes_parses_numbers_and_falls_back():
    default = 7 * 24 * 60
    assert refresh_expiry_minutes("30") == 30
    assert refresh_expiry_minutes(" 45 ") == 45
    assert refresh_expiry_minutes(15) == 15
    assert refresh_expiry_minutes(2.5) == 2.5
    assert refresh_expiry_minutes(None) == default
    assert refresh_expiry_minutes("") == default
    assert refresh_expiry_minutes("7d") == default
    assert refresh_expiry_minutes("inf") == default
    assert refresh_expiry_minutes(True) == default


def test_refresh_expiry_falls_back_to_default_when_out_of_range():
    now = datetime(2026, 10, 19, 12, 0, 0)
    tokens = TokenService(credentials=None, clock=lambda: now)

    assert tokens.refresh_expiry(30) == now + timedelta(minutes=30)
    assert tokens.refresh_expiry(None) == now + timedelta(days=7)
    assert tokens.refresh_expiry(refresh_expiry_minutes("1e10")) == now + timedelta(days=7)
    assert tokens.refresh_expiry(-1e20) == now + timedelta(days=7)


def test_issue_token_pair_persists_only_the_hash():
    db = _make_session()
    try:
        user = SqlUserDirectory(db).insert_minimal("+910000000001")
        tokens = TokenService(SqlCredentialStore(db), hash_rounds=4)

        pair = tokens.issue_token_pair(user.id, 30)

        record = db.query(RefreshToken).one()
        assert record.user_id == user.id
        assert record.token_hash != pair.refresh_token
        assert pair.refresh_token not in record.token_hash
        assert len(pair.refresh_token) == 64
        expected = datetime.utcnow() + timedelta(minutes=30)
        assert abs((record.expires_at - expected).total_seconds()) < 5
        assert tokens.find_credential(pair.refresh_token).id == record.id
    finally:
        db.close()


def test_find_credential_skips_expired_and_revoked_rows():
    db = _make_session()
    try:
        user = SqlUserDirectory(db).insert_minimal("+910000000001")
        tokens = TokenService(SqlCredentialStore(db), hash_rounds=4)
        expired = tokens.issue_token_pair(user.id, -5)
        revoked = tokens.issue_token_pair(user.id)
        live = tokens.issue_token_pair(user.id)
        db.query(RefreshToken).filter(RefreshToken.id == 2).update({"is_revoked": True})
        db.commit()

        assert tokens.find_credential(expired.refresh_token) is None
        assert tokens.find_credential(revoked.refresh_token) is None
        assert tokens.find_credential(live.refresh_token) is not None
    finally:
        db.close()


def test_revoke_all_for_user_leaves_other_users_alone():
    db = _make_session()
    try:
        directory = SqlUserDirectory(db)
        asha = directory.insert_minimal("+910000000001")
        ravi = directory.insert_minimal("+910000000002")
        tokens = TokenService(SqlCredentialStore(db), hash_rounds=4)
        tokens.issue_token_pair(asha.id)
        tokens.issue_token_pair(asha.id)
        kept = tokens.issue_token_pair(ravi.id)

        assert tokens.revoke_all_for_user(asha.id) == 2
        assert db.query(RefreshToken).count() == 1
        assert tokens.find_credential(kept.refresh_token).user_id == ravi.id
    finally:
        db.close()


def test_user_directory_round_trip():
    db = _make_session()
    try:
        directory = SqlUserDirectory(db)
        db.add_all([
            Module(title="Know your dolphins", tier="ONBOARDING", is_active=True),
            Module(title="Retired", tier="ONBOARDING", is_active=False),
            Module(title="Advanced", tier="ADVANCED", is_active=True),
        ])
        db.commit()

        created = directory.insert_minimal("+910000000001")
        assert created.signup_pending is True
        again = directory.insert_minimal("+910000000001")
        directory.update_profile_and_status(created.id, {"name": "Asha", "status": "ONBOARDED"})

        user = directory.find_by_phone("+910000000001")
        assert again.id == created.id
        assert db.query(User).count() == 1
        assert user.name == "Asha"
        assert user.status == "ONBOARDED"
        assert user.role == "USER"
        assert user.signup_pending is False
        assert user.last_active_at is not None
        assert directory.count_active_onboarding_modules() == 1
        assert directory.find_by_phone("+910000000009") is None
    finally:
        db.close()

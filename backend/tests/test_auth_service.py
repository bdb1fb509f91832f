from datetime import datetime, timedelta

from fakes import FakeCredentialStore, FakeOTPGateway, FakeUserDirectory

from rudra.core.results import AuthFailure, AuthSuccess, ErrorKind
from rudra.core.security import decode_access_token
from rudra.services.auth_service import PROCEED_WITH_OTP, PROCEED_WITH_SIGNUP, AuthService
from rudra.services.token_service import TokenService

PHONE = "+910000000001"


def _make_service(onboarding_modules=0, send_status="pending"):
    users = FakeUserDirectory(onboarding_modules=onboarding_modules)
    gateway = FakeOTPGateway(send_status=send_status)
    store = FakeCredentialStore()
    service = AuthService(users=users, otp_gateway=gateway, tokens=TokenService(store, hash_rounds=4))
    return service, users, gateway, store


def test_initiate_unknown_phone_creates_pending_user_and_sends_once():
    service, users, gateway, _ = _make_service()

    outcome = service.initiate_or_verify(PHONE)

    assert isinstance(outcome, AuthSuccess)
    assert outcome.status_code == 201
    assert outcome.result == {"action": PROCEED_WITH_OTP}
    assert users.inserted == [PHONE]
    assert users.find_by_phone(PHONE).name is None
    assert gateway.sent == [PHONE]


def test_initiate_existing_user_sends_code():
    service, users, gateway, _ = _make_service()
    users.add(PHONE, name="Asha", status="ACTIVE")

    outcome = service.initiate_or_verify(PHONE)

    assert outcome.status_code == 200
    assert outcome.result == {"action": PROCEED_WITH_OTP}
    assert users.inserted == []
    assert gateway.sent == [PHONE]


def test_initiate_fails_internal_when_gateway_rejects_send():
    service, users, _, _ = _make_service(send_status="canceled")
    users.add(PHONE, name="Asha", status="ACTIVE")

    outcome = service.initiate_or_verify(PHONE)

    assert isinstance(outcome, AuthFailure)
    assert outcome.kind == ErrorKind.INTERNAL
    assert outcome.message == "Failed to send OTP"


def test_approved_send_status_counts_as_success():
    service, _, _, _ = _make_service(send_status="approved")
    assert service.resend_code(PHONE).ok


def test_suspended_user_is_locked_everywhere_without_tokens():
    service, users, gateway, store = _make_service()
    users.add(PHONE, name="Asha", status="SUSPENDED")

    initiate = service.initiate_or_verify(PHONE)
    verify = service.initiate_or_verify(PHONE, "111111")
    signup = service.complete_signup(PHONE, name="Asha")

    for outcome in (initiate, verify, signup):
        assert isinstance(outcome, AuthFailure)
        assert outcome.kind == ErrorKind.LOCKED
    assert gateway.sent == []
    assert store.records == []
    assert users.updates == []


def test_admin_is_forbidden_before_gateway_calls():
    service, users, gateway, store = _make_service()
    users.add(PHONE, name="Root", role="ADMIN", status="ACTIVE")

    initiate = service.initiate_or_verify(PHONE)
    verify = service.initiate_or_verify(PHONE, "111111")

    assert initiate.kind == ErrorKind.FORBIDDEN
    assert verify.kind == ErrorKind.FORBIDDEN
    assert gateway.sent == []
    assert gateway.verified == []
    assert store.records == []


def test_verify_invalid_code_is_rejected():
    service, users, _, store = _make_service()
    users.add(PHONE, name="Asha", status="ACTIVE")

    outcome = service.initiate_or_verify(PHONE, "999999")

    assert outcome.kind == ErrorKind.VALIDATION
    assert outcome.message == "Invalid OTP"
    assert store.records == []


def test_verify_unknown_phone_is_user_not_found():
    service, _, gateway, _ = _make_service()

    outcome = service.initiate_or_verify(PHONE, "111111")

    assert outcome.kind == ErrorKind.NOT_FOUND
    assert gateway.verified == []


def test_verify_row_without_role_is_user_not_found():
    service, users, _, _ = _make_service()
    users.add(PHONE, role=None)

    outcome = service.initiate_or_verify(PHONE, "111111")

    assert outcome.kind == ErrorKind.NOT_FOUND


def test_verify_existing_user_issues_session():
    service, users, _, store = _make_service(onboarding_modules=2)
    user = users.add(PHONE, name="Asha", status="ONBOARDED")

    outcome = service.initiate_or_verify(PHONE, "111111")

    assert outcome.status_code == 200
    assert outcome.result["showOnboardingModules"] is True
    assert decode_access_token(outcome.result["accessToken"])["sub"] == str(user.id)
    assert len(store.records) == 1
    assert store.records[0].token_hash != outcome.result["refreshToken"]
    expected = datetime.utcnow() + timedelta(days=7)
    assert abs((store.records[0].expires_at - expected).total_seconds()) < 60


def test_active_user_never_sees_onboarding_modules():
    service, users, _, _ = _make_service(onboarding_modules=3)
    users.add(PHONE, name="Asha", status="ACTIVE")

    outcome = service.initiate_or_verify(PHONE, "111111")

    assert outcome.result["showOnboardingModules"] is False


def test_signup_flow_without_onboarding_modules():
    service, users, _, store = _make_service(onboarding_modules=0)

    first = service.initiate_or_verify(PHONE)
    second = service.initiate_or_verify(PHONE, "111111")
    third = service.complete_signup(PHONE, name="Asha")

    assert (first.status_code, first.result) == (201, {"action": PROCEED_WITH_OTP})
    assert (second.status_code, second.result) == (200, {"action": PROCEED_WITH_SIGNUP})
    assert third.status_code == 201
    assert third.result["showOnboardingModules"] is False
    user = users.find_by_phone(PHONE)
    assert user.name == "Asha"
    assert user.status == "ACTIVE"
    assert user.last_active_at is not None
    assert len(store.records) == 1


def test_signup_with_onboarding_module_marks_user_onboarded():
    service, users, _, _ = _make_service(onboarding_modules=1)
    service.initiate_or_verify(PHONE)

    outcome = service.complete_signup(PHONE, name="Asha", email="asha@example.com", age=29)

    assert outcome.status_code == 201
    assert outcome.result["showOnboardingModules"] is True
    user = users.find_by_phone(PHONE)
    assert user.status == "ONBOARDED"
    assert user.email == "asha@example.com"
    assert user.age == 29


def test_signup_requires_existing_user():
    service, users, _, store = _make_service()

    outcome = service.complete_signup(PHONE, name="Asha")

    assert outcome.kind == ErrorKind.VALIDATION
    assert outcome.message == "User does not exist"
    assert users.inserted == []
    assert store.records == []


def test_signup_expires_in_sets_refresh_lifetime_in_minutes():
    service, users, _, store = _make_service()
    users.add(PHONE)

    service.complete_signup(PHONE, name="Asha", expires_in="30")

    expected = datetime.utcnow() + timedelta(minutes=30)
    assert abs((store.records[0].expires_at - expected).total_seconds()) < 5


def test_signup_with_out_of_range_expires_in_still_issues_session():
    service, users, _, store = _make_service()
    users.add(PHONE)

    outcome = service.complete_signup(PHONE, name="Asha", expires_in="1e10")

    assert outcome.status_code == 201
    assert service.refresh(outcome.result["refreshToken"]).ok
    expected = datetime.utcnow() + timedelta(days=7)
    assert abs((store.records[0].expires_at - expected).total_seconds()) < 5


def test_refresh_round_trip_and_rejects_other_strings():
    service, users, _, store = _make_service()
    user = users.add(PHONE, name="Asha", status="ACTIVE")
    session = service.initiate_or_verify(PHONE, "111111").result

    refreshed = service.refresh(session["refreshToken"])
    rejected = service.refresh("not-a-real-token")

    assert refreshed.status_code == 200
    assert decode_access_token(refreshed.result)["sub"] == str(user.id)
    assert rejected.kind == ErrorKind.UNAUTHORIZED
    assert len(store.records) == 1


def test_refresh_does_not_rotate_the_presented_token():
    service, users, _, _ = _make_service()
    users.add(PHONE, name="Asha", status="ACTIVE")
    secret = service.initiate_or_verify(PHONE, "111111").result["refreshToken"]

    assert service.refresh(secret).ok
    assert service.refresh(secret).ok


def test_refresh_ignores_expired_and_revoked_credentials():
    service, users, _, store = _make_service()
    users.add(PHONE, name="Asha", status="ACTIVE")
    expired = service.complete_signup(PHONE, name="Asha", expires_in="-1").result["refreshToken"]
    revoked = service.initiate_or_verify(PHONE, "111111").result["refreshToken"]
    store.records[-1].is_revoked = True

    assert service.refresh(expired).kind == ErrorKind.UNAUTHORIZED
    assert service.refresh(revoked).kind == ErrorKind.UNAUTHORIZED


def test_logout_signs_out_every_device():
    service, users, _, store = _make_service()
    users.add(PHONE, name="Asha", status="ACTIVE")
    other = users.add("+910000000002", name="Ravi", status="ACTIVE")
    phone_token = service.initiate_or_verify(PHONE, "111111").result["refreshToken"]
    tablet_token = service.initiate_or_verify(PHONE, "111111").result["refreshToken"]
    other_token = service.initiate_or_verify(other.phone_number, "111111").result["refreshToken"]

    outcome = service.logout(tablet_token)

    assert outcome.status_code == 200
    assert service.refresh(phone_token).kind == ErrorKind.UNAUTHORIZED
    assert service.refresh(tablet_token).kind == ErrorKind.UNAUTHORIZED
    assert service.refresh(other_token).ok
    assert [r.user_id for r in store.records] == [other.id]


def test_logout_twice_fails_unauthorized_the_second_time():
    service, users, _, _ = _make_service()
    users.add(PHONE, name="Asha", status="ACTIVE")
    secret = service.initiate_or_verify(PHONE, "111111").result["refreshToken"]

    assert service.logout(secret).ok
    second = service.logout(secret)

    assert isinstance(second, AuthFailure)
    assert second.kind == ErrorKind.UNAUTHORIZED

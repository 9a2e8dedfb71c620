"""Tests for registration, login, admin listing, deletion and admin bootstrap."""
from datetime import datetime, timedelta

import pytest

from conftest import PASSWORD, make_account, make_member
from rishta.core.exceptions import AuthError, NotFoundError, ValidationError
from rishta.core.packages import Tier
from rishta.models import Account, Gender, Listing, ProfileUnlock, Role
from rishta.services import accounts
from rishta.services.entitlements import unlock
from rishta.utils.auth import verify_password
from rishta.utils.disposable_email import is_disposable_email


def registration(**overrides):
    raw = {
        "name": "Ayesha Khan",
        "email": "Ayesha.Khan@Example.com",
        "phone": "0321-1234567",
        "password": "strongpass",
        "age": "26",
        "gender": "Female",
        "city": "Karachi",
        "selected_package": "Gold Plan",
    }
    raw.update(overrides)
    return accounts.parse_registration(raw)


class TestParseRegistration:

    def test_empty_strings_count_as_missing(self):
        data = registration(city="", caste="")
        assert data.city is None
        assert data.caste is None

    def test_missing_required_field(self):
        with pytest.raises(ValidationError) as exc:
            accounts.parse_registration({"email": "a@example.com", "password": "secret1"})
        assert "name" in exc.value.message
        assert "phone" in exc.value.message

    @pytest.mark.parametrize(
        "overrides",
        [{"email": "not-an-email"}, {"password": "123"}, {"age": "16"}, {"gender": "Other"}, {"name": "   "}],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            registration(**overrides)


class TestRegisterAccount:

    def test_creates_pending_account(self, db):
        account = accounts.register_account(
            db,
            registration(),
            images=["http://x/uploads/images/1.jpg", "http://x/uploads/images/2.jpg"],
            payment_screenshot="http://x/uploads/payments/p.png",
        )

        assert account.email == "ayesha.khan@example.com"
        assert account.role is Role.USER
        assert account.gender is Gender.FEMALE
        assert account.package is Tier.GOLD
        assert account.is_approved is False
        assert account.credits == 0
        assert account.package_expiry is None
        assert account.main_image == "http://x/uploads/images/1.jpg"
        assert account.payment_screenshot == "http://x/uploads/payments/p.png"
        assert verify_password("strongpass", account.hashed_password)
        assert db.query(Listing).count() == 0

    def test_package_defaults_to_standard(self, db):
        account = accounts.register_account(db, registration(selected_package=None))
        assert account.package is Tier.STANDARD

    def test_unknown_package(self, db):
        with pytest.raises(ValidationError):
            accounts.register_account(db, registration(selected_package="Platinum"))
        assert db.query(Account).count() == 0

    def test_duplicate_email_is_case_insensitive(self, db):
        accounts.register_account(db, registration())
        with pytest.raises(ValidationError) as exc:
            accounts.register_account(db, registration(email="AYESHA.KHAN@example.com"))
        assert exc.value.message == "Email already registered"

    def test_disposable_email_is_rejected(self, db):
        assert is_disposable_email("someone@mailinator.com")
        assert is_disposable_email("someone@inbox.mailinator.com")
        assert not is_disposable_email("someone@gmail.com")
        with pytest.raises(ValidationError) as exc:
            accounts.register_account(db, registration(email="someone@mailinator.com"))
        assert exc.value.message == accounts.DISPOSABLE_EMAIL_MESSAGE


class TestAuthenticate:

    def test_valid_credentials(self, db):
        account = make_account(db, email="login@example.com")
        assert accounts.authenticate(db, "Login@Example.com", PASSWORD).id == account.id

    def test_pending_account_can_log_in(self, db):
        account = make_account(db, email="pending@example.com", is_approved=False)
        assert accounts.authenticate(db, "pending@example.com", PASSWORD).id == account.id

    @pytest.mark.parametrize("email, password", [("login@example.com", "wrong"), ("nobody@example.com", PASSWORD)])
    def test_bad_credentials(self, db, email, password):
        make_account(db, email="login@example.com")
        with pytest.raises(AuthError) as exc:
            accounts.authenticate(db, email, password)
        assert exc.value.message == "Invalid credentials"

    def test_disabled_account(self, db):
        make_account(db, email="off@example.com", is_active=False)
        with pytest.raises(AuthError) as exc:
            accounts.authenticate(db, "off@example.com", PASSWORD)
        assert exc.value.message == "Account is disabled"


class TestListRegistrations:

    NOW = datetime(2026, 5, 20, 15, 0)

    @pytest.fixture
    def signups(self, db):
        today = make_account(db, created_at=self.NOW - timedelta(hours=2))
        this_week = make_account(db, created_at=self.NOW - timedelta(days=3), is_approved=True)
        this_month = make_account(db, created_at=self.NOW - timedelta(days=20))
        old = make_account(db, created_at=self.NOW - timedelta(days=90), is_approved=True)
        make_account(db, role=Role.ADMIN, created_at=self.NOW)
        return today, this_week, this_month, old

    def ids(self, db, **filters):
        return [a.id for a in accounts.list_registrations(db, now=self.NOW, **filters)]

    def test_all_newest_first_without_admins(self, db, signups):
        today, this_week, this_month, old = signups
        assert self.ids(db) == [today.id, this_week.id, this_month.id, old.id]

    def test_ranges(self, db, signups):
        today, this_week, this_month, _ = signups
        assert self.ids(db, range_="day") == [today.id]
        assert self.ids(db, range_="week") == [today.id, this_week.id]
        assert self.ids(db, range_="month") == [today.id, this_week.id, this_month.id]

    def test_status(self, db, signups):
        today, this_week, this_month, old = signups
        assert self.ids(db, status="pending") == [today.id, this_month.id]
        assert self.ids(db, status="approved") == [this_week.id, old.id]
        assert self.ids(db, range_="month", status="approved") == [this_week.id]

    @pytest.mark.parametrize("filters", [{"range_": "year"}, {"status": "rejected"}])
    def test_unknown_filter(self, db, filters):
        with pytest.raises(ValidationError):
            accounts.list_registrations(db, **filters)


class TestDeleteAccount:

    def test_removes_listing_and_unlocks_both_ways(self, db):
        groom, groom_listing = make_member(db, Tier.GOLD, gender=Gender.MALE)
        bride, bride_listing = make_member(db, Tier.GOLD, gender=Gender.FEMALE)
        unlock(db, groom, bride_listing.id)
        unlock(db, bride, groom_listing.id)
        bride_id, groom_id = bride.id, groom.id

        accounts.delete_account(db, bride_id)

        assert db.get(Account, bride_id) is None
        assert db.query(Listing).filter(Listing.account_id == bride_id).count() == 0
        assert db.query(ProfileUnlock).count() == 0
        assert db.get(Account, groom_id) is not None
        assert db.query(Listing).count() == 1

    def test_unknown_account(self, db):
        with pytest.raises(NotFoundError):
            accounts.delete_account(db, 12345)


class TestEnsureAdminAccount:

    def test_creates_admin_once(self, db):
        first = accounts.ensure_admin_account(db, "Admin@Example.com", "adminpass")
        second = accounts.ensure_admin_account(db, "admin@example.com", "adminpass")

        assert first.id == second.id
        assert second.role is Role.ADMIN
        assert db.query(Account).filter(Account.role == Role.ADMIN).count() == 1

    def test_promotes_existing_account_and_resets_password(self, db):
        account = make_account(db, email="owner@example.com")
        admin = accounts.ensure_admin_account(db, "owner@example.com", "newpassword")

        assert admin.id == account.id
        assert admin.role is Role.ADMIN
        assert verify_password("newpassword", admin.hashed_password)

"""End-to-end tests through the HTTP surface."""
from pathlib import Path

from conftest import auth_headers, make_account, make_admin, make_member
from rishta.core.config import settings
from rishta.core.exceptions import ValidationError
from rishta.core.packages import Tier
from rishta.models import Account, Gender, Listing
from rishta.services import accounts as account_service


def stored_uploads():
    return {p for p in Path(settings.UPLOADS_DIR).rglob("*") if p.is_file()}


def register(client, email, gender="Female", package="Gold", files=None, **extra):
    data = {
        "fullName": "Sana Malik",
        "fatherName": "Tariq Malik",
        "email": email,
        "phone": "0333-7654321",
        "password": "secret123",
        "age": "25",
        "gender": gender,
        "city": "Lahore",
        "caste": "Sheikh",
        "monthlyIncome": "90000",
        "familyDetails": "Parents and one brother",
        "selectedPackage": package,
    }
    data.update(extra)
    if files is None:
        files = [
            ("images", ("one.jpg", b"\xff\xd8\xff jpeg", "image/jpeg")),
            ("image_2", ("two.png", b"\x89PNG png", "image/png")),
            ("paymentScreenshot", ("pay.png", b"\x89PNG receipt", "image/png")),
        ]
    return client.post("/register", data=data, files=files)


def login(client, email, password="secret123"):
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


class TestRegister:

    def test_multipart_registration(self, client, db):
        response = register(client, "sana@example.com")

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Registration successful! Pending admin approval."

        account = db.get(Account, body["user_id"])
        assert account.name == "Sana Malik"
        assert account.father_name == "Tariq Malik"
        assert account.income == "90000"
        assert account.package is Tier.GOLD
        assert account.is_approved is False
        assert len(account.images) == 2
        assert account.main_image == account.images[0]
        assert account.payment_screenshot.startswith("http://testserver/uploads/payments/")

        stored = Path(settings.UPLOADS_DIR) / "images" / account.images[0].rsplit("/", 1)[1]
        assert stored.read_bytes() == b"\xff\xd8\xff jpeg"
        served = client.get(account.images[0].replace("http://testserver", ""))
        assert served.status_code == 200
        assert served.content == b"\xff\xd8\xff jpeg"

    def test_duplicate_email(self, client):
        assert register(client, "dup@example.com").status_code == 201
        response = register(client, "DUP@example.com")
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Email already registered"}

    def test_missing_fields(self, client, db):
        response = client.post("/register", data={"email": "x@example.com"})
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert db.query(Account).count() == 0

    def test_rejects_non_image_upload(self, client, db):
        response = register(client, "pdf@example.com", files=[("images", ("cv.pdf", b"%PDF", "application/pdf"))])
        assert response.status_code == 400
        assert db.query(Account).count() == 0

    def test_rejects_too_many_images(self, client):
        files = [("images", (f"{i}.jpg", b"jpeg", "image/jpeg")) for i in range(5)]
        response = register(client, "many@example.com", files=files)
        assert response.status_code == 400

    def test_rejected_upload_leaves_no_files(self, client, db):
        """A valid photo followed by a bad one: nothing is written at all."""
        before = stored_uploads()
        files = [
            ("images", ("one.jpg", b"\xff\xd8\xff jpeg", "image/jpeg")),
            ("images", ("cv.pdf", b"%PDF", "application/pdf")),
        ]
        response = register(client, "mixed@example.com", files=files)

        assert response.status_code == 400
        assert db.query(Account).count() == 0
        assert stored_uploads() == before

    def test_failed_account_insert_removes_saved_files(self, client, db, monkeypatch):
        """Same email registered concurrently after the files were stored."""
        def lost_race(*args, **kwargs):
            raise ValidationError("Email already registered")

        monkeypatch.setattr(account_service, "register_account", lost_race)
        before = stored_uploads()
        response = register(client, "race@example.com")

        assert response.status_code == 400
        assert response.json()["message"] == "Email already registered"
        assert stored_uploads() == before


class TestLogin:

    def test_returns_token_and_summary(self, client):
        register(client, "login@example.com")
        response = client.post("/login", json={"email": "login@example.com", "password": "secret123"})

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["is_approved"] is False
        assert body["user"]["package"] == "Gold"

    def test_wrong_password(self, client):
        register(client, "login@example.com")
        response = client.post("/login", json={"email": "login@example.com", "password": "nope123"})
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid credentials"}


class TestMatchmakingFlow:

    def test_register_approve_match_unlock(self, client, db):
        """Full journey: two registrations, admin approval, matching and one unlock."""
        bride_id = register(client, "bride@example.com", gender="Female", package="Gold").json()["user_id"]
        groom_id = register(client, "groom@example.com", gender="Male", package="Basic",
                            fullName="Bilal Ahmed").json()["user_id"]
        admin = auth_headers(make_admin(db))

        pending = client.get("/admin/registrations", params={"status": "pending"}, headers=admin).json()
        assert {r["id"] for r in pending} == {bride_id, groom_id}
        assert all("hashed_password" not in r for r in pending)

        approved = client.put(f"/admin/approve/{groom_id}", json={"packageType": "Basic"}, headers=admin)
        assert approved.status_code == 200
        assert approved.json()["limits"]["credits"] == 3

        bride_approval = client.put(f"/admin/approve/{bride_id}", headers=admin)
        assert bride_approval.json()["limits"]["package"] == "Gold"
        bride_listing_id = bride_approval.json()["profile"]["id"]

        again = client.put(f"/admin/approve/{bride_id}", headers=admin)
        assert again.status_code == 409
        assert again.json()["success"] is False

        groom = login(client, "groom@example.com")
        matches = client.get("/matches", headers=groom).json()
        assert matches["credits"] == 3
        assert [p["id"] for p in matches["profiles"]] == [bride_listing_id]
        locked = matches["profiles"][0]
        assert locked["is_locked"] is True
        assert "phone" not in locked
        assert "family_details" not in locked

        unlocked = client.post("/unlock-profile", json={"profileId": bride_listing_id}, headers=groom)
        assert unlocked.status_code == 200
        assert unlocked.json() == {
            "success": True,
            "message": "Profile Unlocked!",
            "profile_id": bride_listing_id,
            "credits": 2,
            "already_unlocked": False,
        }

        profile = client.get("/matches", headers=groom).json()["profiles"][0]
        assert profile["is_locked"] is False
        assert profile["phone"] == "0333-7654321"
        assert profile["father_name"] == "Tariq Malik"

        me = client.get("/me", headers=groom).json()
        assert me["unlocked_profiles"] == [bride_listing_id]
        assert me["viewed_count"] == 1
        assert me["credits"] == 2

    def test_repeat_unlock_over_http(self, client, db):
        groom, _ = make_member(db, Tier.BASIC, gender=Gender.MALE)
        _, bride = make_member(db, Tier.BASIC, gender=Gender.FEMALE)
        headers = auth_headers(groom)

        client.post("/unlock-profile", json={"profileId": bride.id}, headers=headers)
        second = client.post("/unlock-profile", json={"profile_id": bride.id}, headers=headers).json()
        assert second["already_unlocked"] is True
        assert second["credits"] == 2


class TestMatches:

    def test_anonymous_sees_everything_locked(self, client, db):
        make_member(db, Tier.GOLD, gender=Gender.MALE)
        make_member(db, Tier.GOLD, gender=Gender.FEMALE)
        make_account(db, gender=Gender.FEMALE)

        body = client.get("/matches").json()
        assert len(body["profiles"]) == 2
        assert all(p["is_locked"] for p in body["profiles"])
        assert all("phone" not in p for p in body["profiles"])
        assert body["credits"] is None

    def test_pending_user_gets_nothing(self, client, db):
        make_member(db, Tier.GOLD, gender=Gender.FEMALE)
        pending = make_account(db, gender=Gender.MALE)

        body = client.get("/matches", headers=auth_headers(pending)).json()
        assert body == {"success": True, "profiles": [], "credits": 0, "message": "Pending approval"}

    def test_admin_sees_all_unlocked(self, client, db):
        make_member(db, Tier.GOLD, gender=Gender.MALE)
        make_member(db, Tier.GOLD, gender=Gender.FEMALE)

        body = client.get("/matches", headers=auth_headers(make_admin(db))).json()
        assert len(body["profiles"]) == 2
        assert not any(p["is_locked"] for p in body["profiles"])

    def test_diamond_sees_contacts(self, client, db):
        groom, _ = make_member(db, Tier.DIAMOND, gender=Gender.MALE)
        _, bride = make_member(db, Tier.STANDARD, gender=Gender.FEMALE)

        (profile,) = client.get("/matches", headers=auth_headers(groom)).json()["profiles"]
        assert profile["is_locked"] is False
        assert profile["phone"] == bride.phone

    def test_single_profile(self, client, db):
        _, bride = make_member(db, Tier.GOLD, gender=Gender.FEMALE)

        body = client.get(f"/profiles/{bride.id}").json()
        assert body["profile"]["id"] == bride.id
        assert body["profile"]["is_locked"] is True
        assert client.get("/profiles/9999").status_code == 404


class TestUnlockEndpoint:

    def test_requires_token(self, client):
        response = client.post("/unlock-profile", json={"profileId": 1})
        assert response.status_code == 401

    def test_pending_account_has_no_credits(self, client, db):
        _, bride = make_member(db, Tier.GOLD, gender=Gender.FEMALE)
        pending = make_account(db, gender=Gender.MALE, package=Tier.DIAMOND)

        response = client.post("/unlock-profile", json={"profileId": bride.id}, headers=auth_headers(pending))
        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "No credits left! Please upgrade."}

    def test_unknown_profile(self, client, db):
        groom, _ = make_member(db, Tier.GOLD, gender=Gender.MALE)
        response = client.post("/unlock-profile", json={"profileId": 777}, headers=auth_headers(groom))
        assert response.status_code == 404

    def test_missing_profile_id(self, client, db):
        groom, _ = make_member(db, Tier.GOLD, gender=Gender.MALE)
        response = client.post("/unlock-profile", json={}, headers=auth_headers(groom))
        assert response.status_code == 422
        assert response.json()["success"] is False


class TestAdmin:

    def test_profiles_are_unredacted(self, client, db):
        _, bride = make_member(db, Tier.GOLD, gender=Gender.FEMALE)
        body = client.get("/admin/profiles", headers=auth_headers(make_admin(db))).json()
        (profile,) = body["profiles"]
        assert profile["phone"] == bride.phone
        assert "is_locked" not in profile

    def test_approve_unknown_account(self, client, db):
        response = client.put("/admin/approve/999", json={"packageType": "Gold"}, headers=auth_headers(make_admin(db)))
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "User not found"}

    def test_approve_with_invalid_tier(self, client, db):
        pending = make_account(db)
        response = client.put(
            f"/admin/approve/{pending.id}", json={"packageType": "Platinum"}, headers=auth_headers(make_admin(db))
        )
        assert response.status_code == 400
        db.expire_all()
        assert db.get(Account, pending.id).is_approved is False

    def test_delete_registration_removes_listing(self, client, db):
        bride, _ = make_member(db, Tier.GOLD, gender=Gender.FEMALE)
        admin = auth_headers(make_admin(db))
        bride_id = bride.id

        response = client.delete(f"/admin/registration/{bride_id}", headers=admin)
        assert response.json() == {"success": True, "message": "User and profile deleted"}

        db.expire_all()
        assert db.query(Listing).count() == 0
        assert client.get("/matches").json()["profiles"] == []
        assert client.delete(f"/admin/registration/{bride_id}", headers=admin).status_code == 404

    def test_invalid_range(self, client, db):
        response = client.get("/admin/registrations", params={"range": "decade"}, headers=auth_headers(make_admin(db)))
        assert response.status_code == 400


def test_health(client):
    assert client.get("/health").json() == {"success": True, "status": "ok"}


def test_me_requires_token(client):
    response = client.get("/me")
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Authentication required"}

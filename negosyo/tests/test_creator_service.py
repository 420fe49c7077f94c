"""Creator registration, referral codes and admin status changes."""

import re

import pytest

from negosyo.core.auth import ActingAs
from negosyo.core.exceptions import ConflictError, PermissionDeniedError, ValidationError
from negosyo.services import creator_service
from negosyo.services.creator_service import generate_referral_code


class TestReferralCode:
    def test_format(self):
        code = generate_referral_code("Maria", "Santos")
        assert re.fullmatch(r"MAS[0-9A-Z]{6}", code)

    def test_short_names_are_padded(self):
        assert generate_referral_code("J", "").startswith("JXX")

    def test_non_letters_are_dropped(self):
        assert generate_referral_code("Ma-ria", "O'Neil").startswith("MAO")


class TestRegister:
    async def test_register_returns_creator_and_token(self, db):
        result = await creator_service.register_creator(
            db, " Maria ", "Santos", email="Maria@Example.test", phone="09171234567",
        )
        creator = result["creator"]
        assert creator["full_name"] == "Maria Santos"
        assert creator["email"] == "maria@example.test"
        assert creator["status"] == "active"
        assert creator["role"] == "creator"
        assert creator["balance"] == 0
        assert result["token"]

    async def test_blank_names_rejected(self, db):
        with pytest.raises(ValidationError):
            await creator_service.register_creator(db, "  ", "Santos")

    async def test_duplicate_email(self, db):
        await creator_service.register_creator(db, "Maria", "Santos", email="maria@example.test")
        with pytest.raises(ConflictError):
            await creator_service.register_creator(db, "Mario", "Santos", email="maria@example.test")

    async def test_referral_links_creators(self, db):
        referrer = await creator_service.register_creator(db, "Ana", "Reyes")
        code = referrer["creator"]["referral_code"]

        result = await creator_service.register_creator(db, "Jose", "Rizal", referred_by_code=code)
        assert result["creator"]["referred_by_id"] == referrer["creator"]["id"]

    async def test_unknown_referral_code(self, db):
        with pytest.raises(ValidationError):
            await creator_service.register_creator(db, "Jose", "Rizal", referred_by_code="NOPE12345")


class TestProfile:
    async def test_owner_updates_payout_method(self, db, make_creator):
        creator, _ = await make_creator()
        acting_as = ActingAs(creator_id=creator.id, role="creator")
        result = await creator_service.update_payout_method(
            db, acting_as, creator.id, "gcash", {"number": "09171234567"},
        )
        assert result["payout_method"] == "gcash"
        assert result["payout_details"] == {"number": "09171234567"}

    async def test_other_creator_cannot_read_profile(self, db, make_creator):
        creator, _ = await make_creator()
        other, _ = await make_creator(first_name="Jose")
        with pytest.raises(PermissionDeniedError):
            await creator_service.get_creator(db, ActingAs(creator_id=other.id, role="creator"), creator.id)


class TestStatus:
    async def test_admin_suspends_creator(self, db, admin_as, make_creator):
        creator, _ = await make_creator()
        result = await creator_service.set_creator_status(db, admin_as, creator.id, "suspended")
        assert result["status"] == "suspended"

    async def test_invalid_status(self, db, admin_as, make_creator):
        creator, _ = await make_creator()
        with pytest.raises(ValidationError):
            await creator_service.set_creator_status(db, admin_as, creator.id, "deleted")

    async def test_creator_cannot_change_status(self, db, make_creator):
        creator, _ = await make_creator()
        with pytest.raises(PermissionDeniedError):
            await creator_service.set_creator_status(
                db, ActingAs(creator_id=creator.id, role="creator"), creator.id, "active",
            )

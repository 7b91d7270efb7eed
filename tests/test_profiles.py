"""Tests for profile lifecycle, confirmations, password recovery and system status."""

import unittest
from datetime import date, timedelta
from unittest.mock import MagicMock

from idhub.core.acs import AccessDeniedACS, EditOwnObjectACS, GrandAccessACS
from idhub.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
    ValidationErrorCodes,
)
from idhub.core.security import verify_password
from idhub.models import Person, User, UserDetails
from idhub.models.base import utcnow
from idhub.models.enums import Gender, Language, UserRole, UserSystemStatus
from idhub.schemas.profile import PersonUpdate, ProfileCreate, UserDetailsUpdate
from idhub.services import profiles, sessions
from idhub.services.system_status import compute_system_status, refresh_system_status
from idhub.services.users import get_user
from support import DEFAULT_PASSWORD, header, make_session_factory, seed_user

TODAY = date(2026, 6, 1)


def _person(**overrides) -> Person:
    values = dict(
        email="ann@acme.io",
        first_name="Ann",
        last_name="Lee",
        legal_name="",
        short_name="",
        phone="+380501112233",
        birthday_at=date(1990, 5, 17),
        gender=Gender.FEMALE,
    )
    values.update(overrides)
    return Person(**values)


def _details(email_confirmed: bool = True, phone_confirmed: bool = True) -> UserDetails:
    return UserDetails(email_confirmed=email_confirmed, phone_confirmed=phone_confirmed)


class TestComputeSystemStatus(unittest.TestCase):
    def test_complete_private_profile_is_active(self) -> None:
        status = compute_system_status(UserRole.PRIVATE, _person(), _details(), TODAY)
        self.assertEqual(status, UserSystemStatus.ACTIVE)

    def test_unconfirmed_phone_is_limited(self) -> None:
        status = compute_system_status(
            UserRole.PRIVATE, _person(), _details(phone_confirmed=False), TODAY
        )
        self.assertEqual(status, UserSystemStatus.LIMITED)

    def test_minor_is_limited(self) -> None:
        status = compute_system_status(
            UserRole.PRIVATE, _person(birthday_at=date(2010, 1, 1)), _details(), TODAY
        )
        self.assertEqual(status, UserSystemStatus.LIMITED)

    def test_unset_gender_is_limited(self) -> None:
        status = compute_system_status(
            UserRole.JOURNALIST, _person(gender=Gender.UNSET), _details(), TODAY
        )
        self.assertEqual(status, UserSystemStatus.LIMITED)

    def test_unconfirmed_email_is_suspended(self) -> None:
        status = compute_system_status(
            UserRole.PRIVATE, _person(), _details(email_confirmed=False), TODAY
        )
        self.assertEqual(status, UserSystemStatus.SUSPENDED)

    def test_missing_names_is_suspended(self) -> None:
        status = compute_system_status(UserRole.PRIVATE, _person(last_name=""), _details(), TODAY)
        self.assertEqual(status, UserSystemStatus.SUSPENDED)

    def test_legal_entity(self) -> None:
        person = _person(legal_name="Acme LLC", short_name="Acme", birthday_at=date(2020, 1, 1))
        self.assertEqual(
            compute_system_status(UserRole.LEGAL, person, _details(), TODAY),
            UserSystemStatus.ACTIVE,
        )
        self.assertEqual(
            compute_system_status(UserRole.LEGAL, person, _details(phone_confirmed=False), TODAY),
            UserSystemStatus.LIMITED,
        )
        self.assertEqual(
            compute_system_status(UserRole.LEGAL, _person(), _details(), TODAY),
            UserSystemStatus.SUSPENDED,
        )

    def test_refresh_never_lifts_a_ban(self) -> None:
        user = User(role=UserRole.PRIVATE, system_status=UserSystemStatus.BANNED)
        user.person = _person()
        user.details = _details()
        self.assertEqual(refresh_system_status(user, TODAY), UserSystemStatus.BANNED)
        self.assertEqual(user.system_status, UserSystemStatus.BANNED)


class ProfileServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.alice = seed_user(self.db, "alice@acme.io", first_name="Alice", last_name="Smith")
        self.bob = seed_user(self.db, "bob@acme.io")
        self.settings = MagicMock()
        self.settings.PASSWORD_RESET_RESEND_SECONDS = 60
        self.settings.PASSWORD_RESTORATION_CODE_TTL_HOURS = 24

    def tearDown(self) -> None:
        self.db.close()

    def own(self, user: User) -> EditOwnObjectACS:
        return EditOwnObjectACS(user.uid)

    def details_of(self, user: User) -> UserDetails:
        return self.db.query(UserDetails).filter(UserDetails.uid == user.uid).one()


class TestCreateProfile(ProfileServiceTestCase):
    def test_new_profile_starts_suspended_with_confirmation_code(self) -> None:
        self.assertEqual(self.bob.system_status, UserSystemStatus.SUSPENDED)
        details = self.details_of(self.bob)
        self.assertFalse(details.email_confirmed)
        self.assertTrue(details.email_confirmation_code)
        self.assertEqual(details.language, Language.UA)

    def test_requires_full_access(self) -> None:
        profile = ProfileCreate(username="eve@acme.io", email="eve@acme.io")
        with self.assertRaises(ForbiddenError):
            profiles.create_profile(self.db, profile, self.own(self.alice))

    def test_legal_role_marks_legal_person(self) -> None:
        user = seed_user(self.db, "corp@acme.io", role=UserRole.LEGAL)
        self.assertTrue(user.person.is_legal_person)

    def test_password_is_stored_tagged_outside_production(self) -> None:
        self.assertTrue(self.alice.password.startswith("TEXT:"))
        self.assertTrue(verify_password(DEFAULT_PASSWORD, self.alice.password))


class TestReadProfiles(ProfileServiceTestCase):
    def test_get_by_email_respects_acs(self) -> None:
        self.assertIsNotNone(profiles.get_profile_by_email(self.db, "bob@acme.io", GrandAccessACS()))
        self.assertIsNone(profiles.get_profile_by_email(self.db, "bob@acme.io", self.own(self.alice)))

    def test_get_my_profile(self) -> None:
        dto = profiles.to_profile_dto(profiles.get_my_profile(self.db, self.alice.uid))
        self.assertEqual(dto.username, "alice@acme.io")
        self.assertEqual(dto.first_name, "Alice")
        self.assertFalse(dto.email_confirmed)

    def test_get_my_profile_missing(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            profiles.get_my_profile(self.db, "ghost")
        self.assertEqual(ctx.exception.source, "my-profile")

    def test_list_profiles_pagination_and_acs(self) -> None:
        page = profiles.list_profiles(self.db, GrandAccessACS(), page=1, limit=1)
        self.assertEqual(page.metadata.total, 2)
        self.assertEqual(page.metadata.pages, 2)
        self.assertEqual(len(page.list), 1)

        own = profiles.list_profiles(self.db, self.own(self.bob))
        self.assertEqual([p.username for p in own.list], ["bob@acme.io"])

        denied = profiles.list_profiles(self.db, AccessDeniedACS())
        self.assertEqual(denied.metadata.total, 0)
        self.assertEqual(denied.list, [])

    def test_get_user_hides_rows_outside_acs(self) -> None:
        self.assertIsNone(get_user(self.db, self.bob.uid, self.own(self.alice)))
        self.assertIsNotNone(get_user(self.db, self.bob.uid, self.own(self.bob)))


class TestUpdateProfile(ProfileServiceTestCase):
    def test_update_person_recomputes_status(self) -> None:
        details = self.details_of(self.bob)
        details.email_confirmed = True
        self.db.commit()
        update = PersonUpdate(first_name="Bob", last_name="Stone")
        profiles.update_person_by_username(self.db, "bob@acme.io", update, self.own(self.bob))
        bob = self.db.query(User).filter(User.uid == self.bob.uid).one()
        self.assertEqual(bob.person.first_name, "Bob")
        self.assertEqual(bob.system_status, UserSystemStatus.LIMITED)

    def test_update_someone_else_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            profiles.update_person_by_username(
                self.db, "bob@acme.io", PersonUpdate(first_name="X"), self.own(self.alice)
            )

    def test_update_details(self) -> None:
        update = UserDetailsUpdate(language=Language.EN, notify_about_new_poll=True)
        profiles.update_details_by_username(self.db, "alice@acme.io", update, self.own(self.alice))
        details = self.details_of(self.alice)
        self.assertEqual(details.language, Language.EN)
        self.assertTrue(details.notify_about_new_poll)

    def test_update_password(self) -> None:
        profiles.update_password(self.db, "alice@acme.io", "brand-new-pass", self.own(self.alice))
        alice = self.db.query(User).filter(User.uid == self.alice.uid).one()
        self.assertTrue(verify_password("brand-new-pass", alice.password))
        self.assertFalse(verify_password(DEFAULT_PASSWORD, alice.password))

    def test_ban_sticks_until_unbanned(self) -> None:
        profiles.update_system_status(
            self.db, "bob@acme.io", UserSystemStatus.BANNED, GrandAccessACS()
        )
        profiles.update_person_by_username(
            self.db, "bob@acme.io", PersonUpdate(first_name="Bob"), GrandAccessACS()
        )
        bob = self.db.query(User).filter(User.uid == self.bob.uid).one()
        self.assertEqual(bob.system_status, UserSystemStatus.BANNED)

        profiles.update_system_status(
            self.db, "bob@acme.io", UserSystemStatus.ACTIVE, GrandAccessACS()
        )
        bob = self.db.query(User).filter(User.uid == self.bob.uid).one()
        self.assertEqual(bob.system_status, UserSystemStatus.SUSPENDED)


class TestEmailAndPhone(ProfileServiceTestCase):
    def _open_session(self, username: str) -> None:
        sessions.save_refresh_token(
            self.db, token_id=f"t-{username}", username=username,
            refresh_token_hash="h", header_info=header(),
        )
        self.db.commit()

    def test_confirm_email(self) -> None:
        code = self.details_of(self.alice).email_confirmation_code
        uid = profiles.confirm_email(self.db, code)
        self.assertEqual(uid, self.alice.uid)
        details = self.details_of(self.alice)
        self.assertTrue(details.email_confirmed)
        self.assertIsNone(details.email_confirmation_code)
        alice = self.db.query(User).filter(User.uid == self.alice.uid).one()
        self.assertEqual(alice.system_status, UserSystemStatus.LIMITED)

    def test_confirm_email_bad_code(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            profiles.confirm_email(self.db, "nope")
        self.assertEqual(ctx.exception.code, ValidationErrorCodes.CONFIRMATION_CODE_ERROR)

    def test_update_own_email_moves_username_and_drops_sessions(self) -> None:
        self._open_session("alice@acme.io")
        code = profiles.update_own_email(self.db, self.alice, "alice2@acme.io", self.own(self.alice))
        alice = self.db.query(User).filter(User.uid == self.alice.uid).one()
        self.assertEqual(alice.username, "alice2@acme.io")
        self.assertEqual(alice.person.email, "alice2@acme.io")
        self.assertEqual(alice.details.email_confirmation_code, code)
        self.assertFalse(alice.details.email_confirmed)
        self.assertEqual(sessions.count_for_username(self.db, "alice@acme.io"), 0)

    def test_update_own_email_keeps_social_username(self) -> None:
        social = seed_user(self.db, "gina@acme.io", password=None, username="g-1@google")
        profiles.update_own_email(self.db, social, "gina2@acme.io", self.own(social))
        social = self.db.query(User).filter(User.uid == social.uid).one()
        self.assertEqual(social.username, "g-1@google")
        self.assertEqual(social.person.email, "gina2@acme.io")

    def test_update_own_email_taken(self) -> None:
        with self.assertRaises(ConflictError):
            profiles.update_own_email(self.db, self.alice, "bob@acme.io", self.own(self.alice))

    def test_phone_confirmation(self) -> None:
        code = profiles.update_own_phone(self.db, self.alice, "+380501234567", self.own(self.alice))
        self.assertEqual(len(code), 6)
        with self.assertRaises(ValidationError):
            profiles.confirm_phone(self.db, "alice@acme.io", "000000x", self.own(self.alice))
        profiles.confirm_phone(self.db, "alice@acme.io", code, self.own(self.alice))
        details = self.details_of(self.alice)
        self.assertTrue(details.phone_confirmed)
        self.assertIsNone(details.phone_confirmation_code)


class TestPasswordRecovery(ProfileServiceTestCase):
    def test_reset_then_set_new_password(self) -> None:
        code = profiles.reset_password(self.db, "alice@acme.io", self.settings)
        profiles.set_new_password(self.db, code, "recovered-pass", self.settings)
        alice = self.db.query(User).filter(User.uid == self.alice.uid).one()
        self.assertTrue(verify_password("recovered-pass", alice.password))
        self.assertIsNone(self.details_of(self.alice).password_restoration_code)

    def test_code_cannot_be_reused(self) -> None:
        code = profiles.reset_password(self.db, "alice@acme.io", self.settings)
        profiles.set_new_password(self.db, code, "recovered-pass", self.settings)
        with self.assertRaises(ValidationError):
            profiles.set_new_password(self.db, code, "another-pass", self.settings)

    def test_reset_is_throttled(self) -> None:
        profiles.reset_password(self.db, "alice@acme.io", self.settings)
        with self.assertRaises(ValidationError) as ctx:
            profiles.reset_password(self.db, "alice@acme.io", self.settings)
        self.assertEqual(ctx.exception.code, ValidationErrorCodes.TOO_MANY_RESENDING_CODE_ERROR)

    def test_reset_unknown_email(self) -> None:
        with self.assertRaises(NotFoundError):
            profiles.reset_password(self.db, "ghost@acme.io", self.settings)

    def test_expired_code_is_rejected(self) -> None:
        code = profiles.reset_password(self.db, "alice@acme.io", self.settings)
        details = self.details_of(self.alice)
        details.password_restoration_code_created_at = utcnow() - timedelta(hours=25)
        self.db.commit()
        with self.assertRaises(ValidationError) as ctx:
            profiles.set_new_password(self.db, code, "recovered-pass", self.settings)
        self.assertEqual(ctx.exception.code, ValidationErrorCodes.CONFIRMATION_CODE_ERROR)


class TestDeleteProfile(ProfileServiceTestCase):
    def test_delete_clears_pii_and_releases_email(self) -> None:
        sessions.save_refresh_token(
            self.db, token_id="t1", username="alice@acme.io",
            refresh_token_hash="h", header_info=header(),
        )
        self.db.commit()
        uid = self.alice.uid
        profiles.delete_profile(self.db, "alice@acme.io", self.own(self.alice))

        user = self.db.query(User).filter(User.uid == uid).one()
        self.assertEqual(user.role, UserRole.DELETED)
        self.assertEqual(user.username, f"{uid}@deleted")
        self.assertIsNone(user.password)
        self.assertIsNotNone(user.deleted_at)
        self.assertEqual(user.person.first_name, "")
        self.assertIsNotNone(user.person.deleted_at)
        self.assertIsNone(self.db.query(UserDetails).filter(UserDetails.uid == uid).first())
        self.assertEqual(sessions.count_for_username(self.db, "alice@acme.io"), 0)
        self.assertIsNone(get_user(self.db, uid, GrandAccessACS()))

        again = seed_user(self.db, "alice@acme.io")
        self.assertNotEqual(again.uid, uid)

    def test_delete_someone_else_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            profiles.delete_profile(self.db, "bob@acme.io", self.own(self.alice))


if __name__ == "__main__":
    unittest.main()

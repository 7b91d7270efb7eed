"""Derive a user's coarse system status from profile completeness and confirmations."""

from datetime import date

from idhub.models import Person, User, UserDetails
from idhub.models.enums import Gender, UserRole, UserSystemStatus

ADULT_AGE_YEARS = 18


def _age_in_years(born: date, today: date) -> int:
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def _email_confirmed(person: Person, details: UserDetails | None) -> bool:
    return bool(person.email) and details is not None and bool(details.email_confirmed)


def _phone_confirmed(person: Person, details: UserDetails | None) -> bool:
    return bool(person.phone) and details is not None and bool(details.phone_confirmed)


def _legal_status(person: Person, details: UserDetails | None, today: date) -> UserSystemStatus:
    limited = bool(person.legal_name and person.short_name) and _email_confirmed(person, details)
    # birthday_at holds the registration date of a legal entity
    founded = person.birthday_at is not None and (today - person.birthday_at).days >= 1
    if limited and _phone_confirmed(person, details) and founded:
        return UserSystemStatus.ACTIVE
    if limited:
        return UserSystemStatus.LIMITED
    return UserSystemStatus.SUSPENDED


def _private_status(person: Person, details: UserDetails | None, today: date) -> UserSystemStatus:
    limited = bool(person.first_name and person.last_name) and _email_confirmed(person, details)
    adult = (
        person.birthday_at is not None
        and _age_in_years(person.birthday_at, today) >= ADULT_AGE_YEARS
    )
    gender_set = bool(person.gender) and person.gender != Gender.UNSET
    if limited and _phone_confirmed(person, details) and adult and gender_set:
        return UserSystemStatus.ACTIVE
    if limited:
        return UserSystemStatus.LIMITED
    return UserSystemStatus.SUSPENDED


def compute_system_status(
    role: str, person: Person, details: UserDetails | None, today: date | None = None
) -> UserSystemStatus:
    today = today or date.today()
    if role == UserRole.LEGAL:
        return _legal_status(person, details, today)
    return _private_status(person, details, today)


def refresh_system_status(user: User, today: date | None = None) -> UserSystemStatus:
    """Recompute and assign user.system_status. A ban is never lifted here."""
    if user.system_status == UserSystemStatus.BANNED:
        return UserSystemStatus.BANNED
    status = compute_system_status(user.role, user.person, user.details, today)
    user.system_status = status
    return status

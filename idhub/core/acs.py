"""Access control strategies (ACS): per-request row visibility restrictions.

An ACS value renders into a SQL predicate on whichever column holds the
owning user's uid. Data-access functions apply it before reading or mutating
rows they do not unconditionally own.
"""

from dataclasses import dataclass
from typing import ClassVar

from sqlalchemy import ColumnElement, false, literal_column, true


def _as_column(col: ColumnElement | str) -> ColumnElement:
    # Names are rendered as written; qualify them ("users.uid") when the query joins other tables.
    return literal_column(col) if isinstance(col, str) else col


@dataclass(frozen=True)
class GrandAccessACS:
    """Unrestricted access."""

    full_access: ClassVar[bool] = True

    def to_sql(self, col: ColumnElement | str) -> ColumnElement[bool]:
        return true()


@dataclass(frozen=True)
class EditOwnObjectACS:
    """Access restricted to rows owned by owner_uid."""

    owner_uid: str
    full_access: ClassVar[bool] = False

    def to_sql(self, col: ColumnElement | str) -> ColumnElement[bool]:
        return _as_column(col) == self.owner_uid


@dataclass(frozen=True)
class AccessDeniedACS:
    """No rows are visible."""

    full_access: ClassVar[bool] = False

    def to_sql(self, col: ColumnElement | str) -> ColumnElement[bool]:
        return false()


ACS = GrandAccessACS | EditOwnObjectACS | AccessDeniedACS


def covers(acs: ACS, owner_uid: str) -> bool:
    """True if acs allows touching an object owned by owner_uid."""
    match acs:
        case GrandAccessACS():
            return True
        case EditOwnObjectACS(owner_uid=uid):
            return uid == owner_uid
        case AccessDeniedACS():
            return False

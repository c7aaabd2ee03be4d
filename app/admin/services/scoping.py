"""
Center scoping.

Every list and lookup in the portal goes through a Scope built from the
viewer (re-read from the database on each request) and the center the
client selected. The same rule is available as a Python predicate
(`Scope.allows`) and as a SQL filter (`Scope.apply`), so in-memory and
database filtering can never disagree.
"""
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import and_

from app.admin.models.user_roles import AppRole
from app.core.exceptions import ValidationError

ALL_CENTERS = "all"

CenterSelection = Union[int, str, None]


@dataclass(frozen=True)
class ViewerContext:
    """Who is asking; never built from client-supplied role or center"""

    user_id: str
    role: AppRole
    home_center_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == AppRole.admin

    @property
    def is_center_bound(self) -> bool:
        return self.is_admin and self.home_center_id is not None


@dataclass(frozen=True)
class Scope:
    """
    center_id None means every center; user_id is set for students and
    restricts them to their own records.
    """

    center_id: Optional[int] = None
    user_id: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return self.center_id is None and self.user_id is None

    def allows(self, center_id: Optional[int], user_id: Optional[str] = None) -> bool:
        if self.user_id is not None and user_id != self.user_id:
            return False
        if self.center_id is not None and center_id != self.center_id:
            return False
        return True

    def allows_record(self, record) -> bool:
        return self.allows(getattr(record, "center_id", None), getattr(record, "user_id", None))

    def apply(self, query, center_column, user_column=None):
        """Add the scope predicate to a select() over a table with these columns"""
        conditions = []
        if self.user_id is not None:
            if user_column is None:
                raise ValueError("Owner-scoped query needs a user column")
            conditions.append(user_column == self.user_id)
        if self.center_id is not None:
            # NULL never equals a concrete id, so unassigned rows drop out here
            conditions.append(center_column == self.center_id)
        if not conditions:
            return query
        return query.where(and_(*conditions))


def parse_center_selection(raw: CenterSelection) -> Optional[int]:
    """'all' / empty -> None, numeric string or int -> center id"""
    if raw is None or raw == "" or raw == ALL_CENTERS:
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValidationError(
            "center must be 'all' or a center id", {"field": "center", "value": str(raw)}
        )


def resolve_scope(
    viewer: ViewerContext,
    selected_center: CenterSelection = None,
    own_records: bool = False,
) -> Scope:
    """
    Build the effective scope.

    A center-bound admin is pinned to the home center whatever the client
    asks for. A global admin sees the selected center, or everything. A
    student sees only their own records, optionally narrowed to one center.
    `own_records` applies the student rule to any viewer (personal views).
    """
    if viewer.is_center_bound and not own_records:
        return Scope(center_id=viewer.home_center_id)

    selection = parse_center_selection(selected_center)

    if viewer.is_admin and not own_records:
        return Scope(center_id=selection)

    return Scope(center_id=selection, user_id=viewer.user_id)

from types import SimpleNamespace

import pytest

from app.admin.models.user_roles import AppRole
from app.admin.services.scoping import (
    ALL_CENTERS,
    Scope,
    ViewerContext,
    parse_center_selection,
    resolve_scope,
)
from app.core.exceptions import ValidationError

HATISALA = 1
SATULIA = 2

global_admin = ViewerContext(user_id="admin-global", role=AppRole.admin)
hatisala_admin = ViewerContext(user_id="admin-hatisala", role=AppRole.admin, home_center_id=HATISALA)
student = ViewerContext(user_id="student-1", role=AppRole.student, home_center_id=HATISALA)


def record(center_id, user_id="student-1"):
    return SimpleNamespace(center_id=center_id, user_id=user_id)


def test_center_bound_admin_is_pinned_to_home_center():
    assert resolve_scope(hatisala_admin, SATULIA) == Scope(center_id=HATISALA)
    assert resolve_scope(hatisala_admin, ALL_CENTERS) == Scope(center_id=HATISALA)
    assert resolve_scope(hatisala_admin, None) == Scope(center_id=HATISALA)


def test_global_admin_follows_selection():
    assert resolve_scope(global_admin, ALL_CENTERS).is_global
    assert resolve_scope(global_admin, None).is_global
    assert resolve_scope(global_admin, str(SATULIA)) == Scope(center_id=SATULIA)


def test_student_only_sees_own_records():
    scope = resolve_scope(student, ALL_CENTERS)
    assert scope == Scope(user_id="student-1")
    assert scope.allows_record(record(HATISALA))
    assert scope.allows_record(record(None))
    assert not scope.allows_record(record(HATISALA, user_id="student-2"))


def test_student_center_filter_narrows_own_records():
    scope = resolve_scope(student, SATULIA)
    assert not scope.allows_record(record(HATISALA))
    assert scope.allows_record(record(SATULIA))


def test_own_records_applies_student_rule_to_admins():
    scope = resolve_scope(hatisala_admin, None, own_records=True)
    assert scope == Scope(user_id="admin-hatisala")


def test_unassigned_records_only_visible_without_center_filter():
    assert Scope().allows_record(record(None))
    assert not Scope(center_id=HATISALA).allows_record(record(None))


@pytest.mark.parametrize(
    "viewer, selection",
    [
        (global_admin, ALL_CENTERS),
        (global_admin, HATISALA),
        (hatisala_admin, SATULIA),
        (student, ALL_CENTERS),
        (student, HATISALA),
    ],
)
def test_every_visible_record_matches_scope(viewer, selection):
    records = [
        record(center, user)
        for center in (HATISALA, SATULIA, None)
        for user in ("student-1", "student-2")
    ]
    scope = resolve_scope(viewer, selection)
    for item in filter(scope.allows_record, records):
        if scope.center_id is not None:
            assert item.center_id == scope.center_id
        if not viewer.is_admin:
            assert item.user_id == viewer.user_id


def test_apply_leaves_global_query_untouched():
    from sqlalchemy import select

    from app.admin.models.enrollments import Enrollment

    query = select(Enrollment)
    assert Scope().apply(query, Enrollment.center_id, Enrollment.user_id) is query


def test_apply_requires_user_column_for_owner_scope():
    from sqlalchemy import select

    from app.admin.models.content import Video

    with pytest.raises(ValueError):
        Scope(user_id="student-1").apply(select(Video), Video.center_id)


@pytest.mark.parametrize("raw, expected", [(None, None), ("", None), ("all", None), ("3", 3), (4, 4)])
def test_parse_center_selection(raw, expected):
    assert parse_center_selection(raw) == expected


def test_parse_center_selection_rejects_names():
    with pytest.raises(ValidationError):
        parse_center_selection("Hatisala")

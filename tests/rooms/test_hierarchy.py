import pytest

from src.school_attendance.school_attendance.core.exceptions import NotFoundError


def test_standalone_room_contends_only_with_itself(resolver):
    group = resolver.resolve(1)

    assert group.room_ids == [1]
    assert group.room.name == "A101"


def test_modular_parent_contends_with_its_children(resolver):
    group = resolver.resolve(10)

    assert group.room_ids[0] == 10
    assert sorted(group.room_ids) == [10, 11, 12]


def test_sub_room_contends_with_parent_but_not_siblings(resolver):
    group = resolver.resolve(11)

    assert group.room_ids == [11, 10]
    assert group.name_of(10) == "Amphi"
    assert group.name_of(12) == ""


def test_unknown_room_raises_not_found(resolver):
    with pytest.raises(NotFoundError) as exc:
        resolver.resolve(999)

    assert exc.value.kind == "NotFound"
    assert exc.value.entity == "room"

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest

from eventlog.core.actor import Actor
from eventlog.models import Log, Loggable, User
from eventlog.services.event_log import EventLogRecorder

NOW = datetime(2026, 5, 4, 10, 0, 0, tzinfo=UTC)
CREATED = NOW - timedelta(days=3)
MODIFIED = NOW - timedelta(hours=2)

KINDS = {"tpzed": "arvados#user", "j7d0g": "arvados#group"}


@dataclass
class Subject:
    uuid: str
    owner_uuid: str | None = None
    created_at: datetime | None = CREATED
    modified_at: datetime | None = MODIFIED
    etag: str | None = "etag-new"
    logged_attributes: dict | None = None


@pytest.fixture
def recorder() -> EventLogRecorder:
    return EventLogRecorder(clock=lambda: NOW, registry=KINDS)


def test_subject_satisfies_loggable_contract():
    assert isinstance(Subject(uuid="x-1"), Loggable)


def test_fill_object_sets_identity_and_owner(recorder):
    entry = Log(event_type="create")
    result = recorder.fill_object(entry, Subject(uuid="zzzzz-j7d0g-000000000000001", owner_uuid="o-1"))

    assert result is entry
    assert entry.object_uuid == "zzzzz-j7d0g-000000000000001"
    assert entry.object_owner_uuid == "o-1"


def test_fill_object_keeps_first_uuid_but_latest_owner(recorder):
    entry = Log(event_type="update")
    recorder.fill_object(entry, Subject(uuid="first", owner_uuid="owner-a"))
    recorder.fill_object(entry, Subject(uuid="second", owner_uuid="owner-b"))

    assert entry.object_uuid == "first"
    assert entry.object_owner_uuid == "owner-b"


def test_fill_object_without_owner_clears_object_owner(recorder):
    entry = Log(event_type="update", object_owner_uuid="stale-owner")

    recorder.fill_object(entry, Subject(uuid="x-1", owner_uuid=None))

    assert entry.object_owner_uuid is None


def test_explicit_object_uuid_is_not_replaced(recorder):
    entry = Log(event_type="update", object_uuid="explicit")

    recorder.fill_object(entry, Subject(uuid="x-1"))

    assert entry.object_uuid == "explicit"


def test_summary_defaults_from_event_type_and_subject(recorder):
    entry = Log(event_type="update")

    recorder.fill_object(entry, Subject(uuid="x-1"))

    assert entry.summary == "update of x-1"


def test_preset_summary_survives_fill_object(recorder):
    entry = Log(event_type="update", summary="custom")

    recorder.fill_object(entry, Subject(uuid="x-1"))
    recorder.fill_object(entry, Subject(uuid="x-2"))

    assert entry.summary == "custom"


def test_fill_properties_merges_ages(recorder):
    entry = Log(event_type="update")

    recorder.fill_properties(entry, "old", "etag1", {"a": 1})
    recorder.fill_properties(entry, "new", "etag2", {"a": 2})

    assert entry.properties == {
        "old_etag": "etag1",
        "old_attributes": {"a": 1},
        "new_etag": "etag2",
        "new_attributes": {"a": 2},
    }


def test_fill_properties_same_age_overwrites_only_that_age(recorder):
    entry = Log(event_type="update", properties={"note": "keep me"})
    recorder.fill_properties(entry, "old", "etag1", {"a": 1})
    recorder.fill_properties(entry, "new", "etag2", {"a": 2})

    recorder.fill_properties(entry, "new", "etag3", {"a": 3})

    assert entry.properties["old_etag"] == "etag1"
    assert entry.properties["old_attributes"] == {"a": 1}
    assert entry.properties["new_etag"] == "etag3"
    assert entry.properties["new_attributes"] == {"a": 3}
    assert entry.properties["note"] == "keep me"


def test_fill_properties_stores_a_copy_of_the_snapshot(recorder):
    snapshot = {"a": 1}
    entry = Log(event_type="update")

    recorder.fill_properties(entry, "old", "etag1", snapshot)
    snapshot["a"] = 99

    assert entry.properties["old_attributes"] == {"a": 1}


@pytest.mark.parametrize("snapshot", ["serialized-snapshot", ["a", "b"], {"nested": {"list": [1, 2]}}])
def test_fill_properties_accepts_any_snapshot_shape(recorder, snapshot):
    entry = Log(event_type="update")

    recorder.fill_properties(entry, "old", "e1", snapshot)

    assert entry.properties == {"old_etag": "e1", "old_attributes": snapshot}


def test_fill_properties_copies_nested_snapshots(recorder):
    snapshot = {"tags": ["a"]}
    entry = Log(event_type="update")

    recorder.fill_properties(entry, "new", "e1", snapshot)
    snapshot["tags"].append("b")

    assert entry.properties["new_attributes"] == {"tags": ["a"]}


@pytest.mark.parametrize(
    ("event_type", "expected"),
    [("create", CREATED), ("update", MODIFIED), ("destroy", NOW)],
)
def test_update_to_derives_event_at(recorder, event_type, expected):
    entry = Log(event_type=event_type)

    result = recorder.update_to(entry, Subject(uuid="x-1", logged_attributes={"name": "n"}))

    assert result is entry
    assert entry.event_at == expected
    assert entry.properties["new_etag"] == "etag-new"
    assert entry.properties["new_attributes"] == {"name": "n"}


def test_destroy_uses_wall_clock_not_subject_timestamps():
    before = datetime.now(tz=UTC)
    entry = Log(event_type="destroy")

    EventLogRecorder(registry=KINDS).update_to(entry, Subject(uuid="x-1"))

    after = datetime.now(tz=UTC)
    assert before <= entry.event_at <= after
    assert entry.event_at not in (CREATED, MODIFIED)


def test_update_to_leaves_event_at_for_other_event_types(recorder):
    entry = Log(event_type="login", event_at=CREATED)

    recorder.update_to(entry, Subject(uuid="x-1"))

    assert entry.event_at == CREATED


def test_update_to_tolerates_deleted_subject(recorder):
    entry = Log(event_type="update")

    recorder.update_to(entry, Subject(uuid="x-1", etag=None, logged_attributes=None))

    assert entry.properties["new_etag"] is None
    assert entry.properties["new_attributes"] is None


def test_update_to_without_subject(recorder):
    entry = Log(event_type="destroy")

    recorder.update_to(entry, None)

    assert entry.properties == {"new_etag": None, "new_attributes": None}
    assert entry.event_at == NOW


def test_object_kind_resolves_registered_prefix(recorder):
    entry = Log(object_uuid="zzzzz-tpzed-0123456789abcde")

    assert recorder.object_kind(entry) == "arvados#user"


@pytest.mark.parametrize(
    "object_uuid",
    ["zzzzz-4zz18-0123456789abcde", "not-a-uuid", None],
)
def test_object_kind_is_none_when_unresolvable(recorder, object_uuid):
    assert recorder.object_kind(Log(object_uuid=object_uuid)) is None


def test_log_object_kind_uses_mapped_resources():
    assert Log(object_uuid=User.generate_uuid()).object_kind == "arvados#user"
    assert Log(object_uuid=Log.generate_uuid()).object_kind == "arvados#log"


def test_set_default_event_at_is_idempotent():
    clock_values = iter([NOW, NOW + timedelta(minutes=5)])
    recorder = EventLogRecorder(clock=lambda: next(clock_values), registry=KINDS)
    entry = Log(event_type="note")

    recorder.set_default_event_at(entry)
    recorder.set_default_event_at(entry)

    assert entry.event_at == NOW


def test_set_default_event_at_keeps_explicit_value(recorder):
    entry = Log(event_type="note", event_at=CREATED)

    recorder.set_default_event_at(entry)

    assert entry.event_at == CREATED


@pytest.mark.parametrize(
    "actor",
    [None, Actor(uuid="zzzzz-tpzed-000000000000001"), Actor(uuid="zzzzz-tpzed-000000000000002", is_admin=True)],
)
def test_permission_policy(recorder, actor):
    is_admin = actor is not None and actor.is_admin

    assert recorder.permission_to_create(actor) is True
    assert recorder.permission_to_update(actor) is is_admin
    assert recorder.permission_to_delete(actor) is is_admin
    assert Log().permission_to_update(actor) is is_admin
    assert Log().permission_to_delete(actor) is is_admin


def test_new_log_starts_with_empty_properties():
    assert Log().properties == {}

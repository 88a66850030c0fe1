"""Tests for the message cache."""

from support_chat.chat.cache import MessageCache, SequenceGuard
from support_chat.chat.models import ChatMessage


def _msg(msg_id, body="hi"):
    return ChatMessage(id=msg_id, sender_id="a1", sender_name="Alice", sender_role="admin", body=body)


def test_sequence_guard_drops_older_ticket():
    guard = SequenceGuard()
    first = guard.issue("c1")
    second = guard.issue("c1")
    assert guard.accept("c1", second) is True
    assert guard.accept("c1", first) is False
    assert guard.latest("c1") == second


def test_sequence_guard_keys_are_independent():
    guard = SequenceGuard()
    t1 = guard.issue("c1")
    t2 = guard.issue("c2")
    assert guard.accept("c2", t2)
    assert guard.accept("c1", t1)


def test_replace_is_wholesale():
    cache = MessageCache()
    cache.replace("c1", [_msg("m1"), _msg("m2")])
    cache.replace("c1", [_msg("m3")])
    assert [m.id for m in cache.get("c1")] == ["m3"]


def test_stale_replace_ignored():
    cache = MessageCache()
    old = cache.sequence.issue("c1")
    new = cache.sequence.issue("c1")
    assert cache.replace("c1", [_msg("m1"), _msg("m2")], new) is True
    assert cache.replace("c1", [_msg("m1")], old) is False
    assert [m.id for m in cache.get("c1")] == ["m1", "m2"]


def test_optimistic_confirm_replaces_in_place():
    cache = MessageCache()
    cache.replace("c1", [_msg("m1")])
    temp = cache.add_optimistic("c1", "Thanks", "student")
    assert temp.is_temporary
    assert temp.sender_name == "You"
    cache.confirm("c1", temp.id, _msg("m2", "Thanks"))
    assert [m.id for m in cache.get("c1")] == ["m1", "m2"]


def test_confirm_after_refresh_dropped_temp():
    cache = MessageCache()
    temp = cache.add_optimistic("c1", "Thanks", "student")
    cache.replace("c1", [_msg("m1"), _msg("m2", "Thanks")])
    cache.confirm("c1", temp.id, _msg("m2", "Thanks"))
    assert [m.id for m in cache.get("c1")] == ["m1", "m2"]


def test_confirm_appends_when_refresh_lacked_message():
    cache = MessageCache()
    temp = cache.add_optimistic("c1", "Thanks", "student")
    cache.replace("c1", [_msg("m1")])
    cache.confirm("c1", temp.id, _msg("m2", "Thanks"))
    assert [m.id for m in cache.get("c1")] == ["m1", "m2"]


def test_confirm_drops_temp_when_canonical_present():
    cache = MessageCache()
    temp = cache.add_optimistic("c1", "Thanks", "student")
    cache._messages["c1"].insert(0, _msg("m2", "Thanks"))
    cache.confirm("c1", temp.id, _msg("m2", "Thanks"))
    assert [m.id for m in cache.get("c1")] == ["m2"]


def test_discard_removes_temp():
    cache = MessageCache()
    cache.replace("c1", [_msg("m1")])
    temp = cache.add_optimistic("c1", "oops", "tutor")
    assert cache.discard("c1", temp.id) is True
    assert [m.id for m in cache.get("c1")] == ["m1"]
    assert cache.discard("c1", temp.id) is False


def test_temp_ids_unique():
    cache = MessageCache()
    ids = {cache.new_temp_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(i.startswith("temp_") for i in ids)


def test_get_returns_copy():
    cache = MessageCache()
    cache.replace("c1", [_msg("m1")])
    cache.get("c1").clear()
    assert len(cache.get("c1")) == 1


def test_local_writes_outdate_earlier_fetches():
    cache = MessageCache()
    before_send = cache.sequence.issue("c1")
    temp = cache.add_optimistic("c1", "Thanks", "student")
    cache.confirm("c1", temp.id, _msg("m2", "Thanks"))
    assert cache.replace("c1", [], before_send) is False
    assert [m.id for m in cache.get("c1")] == ["m2"]

import pytest

from onion_bot.memory.cache import ReplyChainCache, ReplyLedger


def test_put_then_get_returns_same_record(make_record):
    cache = ReplyChainCache(capacity=10)
    record = make_record(1, "hello")

    cache.put(record)

    assert cache.get(1) == record
    assert cache.has(1)
    assert cache.author_name(42) == "alice"


def test_capacity_evicts_least_recently_used(make_record):
    cache = ReplyChainCache(capacity=2)
    cache.put(make_record(1))
    cache.put(make_record(2))
    cache.get(1)  # 2 is now the LRU entry

    cache.put(make_record(3))

    assert cache.all_ids() == [1, 3]
    assert not cache.has(2)


def test_eviction_does_not_cascade_to_children(make_record):
    cache = ReplyChainCache(capacity=2)
    cache.put(make_record(1))
    cache.put(make_record(2, parent=1))
    cache.put(make_record(3, parent=2))

    assert not cache.has(1)
    assert cache.get(2).referenced_message_id == 1


def test_own_set_follows_records(make_record):
    cache = ReplyChainCache(capacity=2)
    cache.put(make_record(1, own=True))
    cache.mark_own(5)
    cache.put(make_record(5))

    assert cache.is_own(1)
    assert cache.get(5).is_own_reply
    assert sorted(cache.own_ids()) == [1, 5]

    cache.put(make_record(6))
    assert not cache.is_own(1)

    assert cache.remove(5)
    assert not cache.is_own(5)
    assert not cache.remove(5)


def test_mark_own_rewrites_cached_record(make_record):
    cache = ReplyChainCache()
    cache.put(make_record(1))

    cache.mark_own(1)

    assert cache.peek(1).is_own_reply


def test_invalid_capacity():
    with pytest.raises(ValueError):
        ReplyChainCache(capacity=0)


def test_ledger_tracks_processed_and_replies():
    ledger = ReplyLedger(capacity=2)
    ledger.mark_processed(1)
    ledger.record_replies(2, [20, 21])

    assert ledger.was_processed(1)
    assert ledger.replies_for(2) == (20, 21)
    assert ledger.replies_for(1) == ()

    ledger.forget_replies(2)
    assert ledger.was_processed(2)
    assert ledger.replies_for(2) == ()


def test_ledger_is_bounded():
    ledger = ReplyLedger(capacity=2)
    for message_id in (1, 2, 3):
        ledger.mark_processed(message_id)

    assert len(ledger) == 2
    assert not ledger.was_processed(1)


def test_ledger_remembers_discarded_ids_briefly():
    ledger = ReplyLedger(discarded_capacity=2)
    for message_id in (10, 11, 12):
        ledger.mark_discarded(message_id)

    assert not ledger.was_discarded(10)
    assert ledger.was_discarded(11)
    assert ledger.was_discarded(12)
    assert not ledger.was_processed(12)

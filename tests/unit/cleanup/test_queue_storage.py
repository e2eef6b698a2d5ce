from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

from src.media_gc.cleanup.queue_lock import QueueLock
from src.media_gc.domain.models import QueueItem, RunStats
from src.media_gc.services.container import CleanupServices
from tests.helpers.clock import FakeClock

WORKERS = 4
APPENDS_PER_WORKER = 40


def item(media_id: int, clock: FakeClock) -> QueueItem:
    return QueueItem(attachment_id=media_id, post_id=99, queued_at=clock())


def test_append_keeps_order_and_duplicates(services: CleanupServices, clock: FakeClock) -> None:
    queue = services.queue

    assert queue.append([item(3, clock), item(1, clock)]) == 2
    assert queue.append([item(3, clock)]) == 3

    assert [entry.attachment_id for entry in queue.load()] == [3, 1, 3]
    assert queue.load()[0].queued_at == clock()


def test_remove_head_keeps_entries_appended_meanwhile(
    services: CleanupServices, clock: FakeClock
) -> None:
    queue = services.queue
    queue.append([item(1, clock), item(2, clock)])
    snapshot = queue.load()

    queue.append([item(3, clock)])
    remaining = queue.remove_head(len(snapshot))

    assert remaining == 1
    assert [entry.attachment_id for entry in queue.load()] == [3]


def test_corrupted_queue_reads_as_empty(services: CleanupServices) -> None:
    services.options.upsert("media_gc_queue", "{not json")

    assert services.queue.load() == []
    assert services.queue.count() == 0


def test_lock_is_exclusive_until_released(services: CleanupServices, clock: FakeClock) -> None:
    first = QueueLock(services.transients, clock=clock)
    second = QueueLock(services.transients, clock=clock)

    token = first.acquire()
    assert token is not None
    assert second.acquire() is None
    assert second.is_held() is True

    assert first.release(token) is True
    assert second.acquire() is not None


def test_same_instance_keeps_fresh_lock_after_stale_release(
    services: CleanupServices, clock: FakeClock
) -> None:
    lock = QueueLock(services.transients, ttl_seconds=10, clock=clock)
    stale_token = lock.acquire()
    assert stale_token is not None

    clock.advance(11)
    fresh_token = lock.acquire()
    assert fresh_token is not None
    lock.release(stale_token)

    assert lock.is_held() is True
    assert lock.release(fresh_token) is True
    assert lock.is_held() is False


def test_stale_holder_cannot_release_new_lock(services: CleanupServices, clock: FakeClock) -> None:
    stale = QueueLock(services.transients, ttl_seconds=10, clock=clock)
    fresh = QueueLock(services.transients, ttl_seconds=10, clock=clock)
    stale_token = stale.acquire()
    assert stale_token is not None

    clock.advance(11)
    assert fresh.acquire() is not None
    assert stale.release(stale_token) is False

    assert fresh.is_held() is True
    assert QueueLock(services.transients, clock=clock).acquire() is None


def test_concurrent_appends_are_not_lost(services: CleanupServices, clock: FakeClock) -> None:
    def worker(offset: int) -> None:
        for index in range(APPENDS_PER_WORKER):
            services.queue.append([item(offset + index, clock)])

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        futures = [pool.submit(worker, n * 1000) for n in range(WORKERS)]
        for future in futures:
            future.result()

    ids = [entry.attachment_id for entry in services.queue.load()]
    assert len(ids) == WORKERS * APPENDS_PER_WORKER
    assert len(set(ids)) == len(ids)
    for n in range(WORKERS):
        own = [media for media in ids if n * 1000 <= media < (n + 1) * 1000]
        assert own == sorted(own)


def test_remove_head_racing_appends_keeps_new_entries(
    services: CleanupServices, clock: FakeClock
) -> None:
    queue = services.queue
    queue.append([item(media, clock) for media in range(1, 41)])

    def appender() -> None:
        for media in range(1000, 1040):
            queue.append([item(media, clock)])

    def drainer() -> None:
        for _ in range(8):
            queue.remove_head(5)

    with ThreadPoolExecutor(max_workers=2) as pool:
        futures = [pool.submit(appender), pool.submit(drainer)]
        for future in futures:
            future.result()

    ids = [entry.attachment_id for entry in queue.load()]
    assert ids == list(range(1000, 1040))


def test_scheduler_cancel_drops_pending_event(services: CleanupServices, clock: FakeClock) -> None:
    scheduler = services.scheduler
    scheduler.schedule_once(300)

    assert scheduler.cancel() is True
    assert scheduler.is_scheduled() is False
    assert scheduler.cancel() is False
    assert scheduler.schedule_once(5) is True


def test_scheduler_never_duplicates_and_claims_once(
    services: CleanupServices, clock: FakeClock
) -> None:
    scheduler = services.scheduler

    assert scheduler.schedule_once(30) is True
    assert scheduler.schedule_once(5) is False
    assert scheduler.next_run_at() == clock() + timedelta(seconds=30)

    assert scheduler.claim_due(clock()) is False
    clock.advance(30)
    assert scheduler.claim_due(clock()) is True
    assert scheduler.claim_due(clock()) is False
    assert scheduler.is_scheduled() is False


def test_notice_expires(services: CleanupServices, clock: FakeClock) -> None:
    services.notices.push("carol", RunStats(deleted=2, kept=1))
    clock.advance(61)

    assert services.notices.pop("carol") is None


def test_notice_is_per_actor(services: CleanupServices) -> None:
    services.notices.push("carol", RunStats(queued=4))

    assert services.notices.pop("dave") is None
    notice = services.notices.pop("carol")
    assert notice is not None
    assert notice.queued == 4

from __future__ import annotations

from datetime import timedelta

from src.media_gc.domain.models import Post, RunStats
from src.media_gc.services.container import CleanupServices
from tests.helpers.clock import FakeClock
from tests.helpers.content import ContentBuilder


def synchronous(services: CleanupServices, **extra: object) -> None:
    services.settings_service.update({"background_processing": False, **extra})


def delete_post(services: CleanupServices, post_id: int, actor: str | None = None) -> RunStats:
    return services.post_service.delete_permanently(post_id, actor=actor)


def test_unreferenced_attachment_is_deleted_with_its_files(
    services: CleanupServices, content: ContentBuilder
) -> None:
    synchronous(services)
    post_id = content.post()
    media_id = content.attachment("sunset.jpg", parent_id=post_id)
    content.posts.add_meta(post_id, "_thumbnail_id", str(media_id))

    stats = delete_post(services, post_id)

    assert stats.deleted == 1
    assert stats.kept == 0
    assert services.posts.get_media(media_id) is None
    for name in ("sunset.jpg", "sunset-thumb.jpg", "sunset-medium.jpg"):
        assert not content.file(name).exists()


def test_attachment_embedded_elsewhere_is_kept(
    services: CleanupServices, content: ContentBuilder
) -> None:
    synchronous(services)
    post_id = content.post()
    media_id = content.attachment("harbor.jpg", parent_id=post_id)
    content.post(content=f'<!-- wp:image {{"id":{media_id}}} -->')

    stats = delete_post(services, post_id)

    assert stats.kept == 1
    assert stats.deleted == 0
    assert services.posts.get_media(media_id) is not None
    assert content.file("harbor.jpg").exists()


def test_background_mode_queues_candidates_and_arms_schedule(
    services: CleanupServices, content: ContentBuilder, clock: FakeClock
) -> None:
    post_id = content.post()
    first = content.attachment("meadow.jpg", parent_id=post_id)
    second = content.attachment("forest.jpg", parent_id=post_id)

    stats = delete_post(services, post_id)

    assert stats.queued == 2
    assert [item.attachment_id for item in services.queue.load()] == [first, second]
    assert services.posts.get_media(first) is not None
    assert services.scheduler.next_run_at() == clock() + timedelta(seconds=5)


def test_thumbnail_without_parent_becomes_candidate(
    services: CleanupServices, content: ContentBuilder
) -> None:
    synchronous(services)
    media_id = content.attachment("lonely.jpg")
    post_id = content.post(thumbnail_id=media_id)

    stats = delete_post(services, post_id)

    assert stats.deleted == 1
    assert services.posts.get_media(media_id) is None


def test_parented_thumbnail_is_considered_once(
    services: CleanupServices, content: ContentBuilder
) -> None:
    post_id = content.post()
    media_id = content.attachment("river.jpg", parent_id=post_id)
    snapshot = Post(id=post_id, post_type="post", status="publish", thumbnail_id=media_id)

    assert services.coordinator.collect_candidates(snapshot) == [media_id]


def test_ineligible_post_types_are_ignored(
    services: CleanupServices, content: ContentBuilder
) -> None:
    synchronous(services)
    revision_id = content.post(post_type="revision")
    media_id = content.attachment("draft.jpg", parent_id=revision_id)

    stats = delete_post(services, revision_id)

    assert stats == RunStats()
    assert services.posts.get_media(media_id) is not None


def test_supported_post_types_replace_default_rules(
    services: CleanupServices, content: ContentBuilder
) -> None:
    synchronous(services, supported_post_types=["page"])
    post_id = content.post(post_type="post")
    kept_id = content.attachment("cliff.jpg", parent_id=post_id)
    page_id = content.post(post_type="page")
    deleted_id = content.attachment("valley.jpg", parent_id=page_id)

    assert delete_post(services, post_id) == RunStats()
    assert delete_post(services, page_id).deleted == 1
    assert services.posts.get_media(kept_id) is not None
    assert services.posts.get_media(deleted_id) is None


def test_supported_post_types_filter_extends_list(
    services: CleanupServices, hooks, content: ContentBuilder
) -> None:
    synchronous(services)
    hooks.supported_post_types.append(lambda types: [*types, "product"])
    post_id = content.post(post_type="post")
    media_id = content.attachment("shoe.jpg", parent_id=post_id)

    # an allow-list of just "product" now applies, so a plain post is skipped
    assert delete_post(services, post_id) == RunStats()
    assert services.posts.get_media(media_id) is not None


def test_protected_ids_are_never_deleted(
    services: CleanupServices, hooks, content: ContentBuilder
) -> None:
    post_id = content.post()
    media_id = content.attachment("logo.jpg", parent_id=post_id)
    synchronous(services, protected_media_ids=[media_id])
    hooks.skip_delete.append(lambda skip, media, post: False)

    stats = delete_post(services, post_id)

    assert stats.kept == 1
    assert services.posts.get_media(media_id) is not None


def test_skip_filter_can_veto_delete(
    services: CleanupServices, hooks, content: ContentBuilder
) -> None:
    synchronous(services)
    post_id = content.post()
    media_id = content.attachment("keepsake.jpg", parent_id=post_id)
    hooks.skip_delete.append(lambda skip, media, post: True)

    assert delete_post(services, post_id).kept == 1
    assert services.posts.get_media(media_id) is not None


def test_observers_see_deletes_and_failures_are_isolated(
    services: CleanupServices, hooks, content: ContentBuilder
) -> None:
    synchronous(services)
    events: list[tuple[str, int, int]] = []

    def broken(media: int, post: int) -> None:
        raise RuntimeError("observer exploded")

    hooks.before_delete.append(lambda media, post: events.append(("before", media, post)))
    hooks.after_delete.append(broken)
    hooks.after_delete.append(lambda media, post: events.append(("after", media, post)))
    post_id = content.post()
    media_id = content.attachment("comet.jpg", parent_id=post_id)

    stats = delete_post(services, post_id)

    assert stats.deleted == 1
    assert events == [("before", media_id, post_id), ("after", media_id, post_id)]


def test_notice_is_stored_for_actor(services: CleanupServices, content: ContentBuilder) -> None:
    synchronous(services)
    post_id = content.post()
    content.attachment("dune.jpg", parent_id=post_id)

    delete_post(services, post_id, actor="alice")

    notice = services.notices.pop("alice")
    assert notice is not None
    assert notice.deleted == 1
    assert services.notices.pop("alice") is None


def test_post_without_media_leaves_no_notice(
    services: CleanupServices, content: ContentBuilder
) -> None:
    post_id = content.post()

    assert delete_post(services, post_id, actor="alice") == RunStats()
    assert services.notices.pop("alice") is None
    assert services.scheduler.is_scheduled() is False


def _post_with_shared_thumbnail(content: ContentBuilder) -> tuple[int, int, int]:
    post_id = content.post()
    free_id = content.attachment("pebble.jpg", parent_id=post_id)
    shared_id = content.attachment("stone.jpg", parent_id=post_id)
    content.posts.add_meta(post_id, "_thumbnail_id", str(shared_id))
    content.post(thumbnail_id=shared_id)
    return post_id, free_id, shared_id


def test_shared_thumbnail_is_kept_while_free_media_goes(
    services: CleanupServices, content: ContentBuilder
) -> None:
    synchronous(services)
    post_id, free_id, shared_id = _post_with_shared_thumbnail(content)

    stats = delete_post(services, post_id)

    assert (stats.deleted, stats.kept) == (1, 1)
    assert services.posts.get_media(free_id) is None
    assert services.posts.get_media(shared_id) is not None


def test_deferred_drain_matches_synchronous_outcome(
    services: CleanupServices, content: ContentBuilder
) -> None:
    post_id, free_id, shared_id = _post_with_shared_thumbnail(content)

    stats = delete_post(services, post_id)
    assert stats == RunStats(queued=2)
    assert [item.attachment_id for item in services.queue.load()] == [free_id, shared_id]
    assert services.scheduler.is_scheduled() is True

    result = services.queue_processor.process_queue()

    assert (result.stats.deleted, result.stats.kept) == (1, 1)
    assert services.posts.get_media(free_id) is None
    assert services.posts.get_media(shared_id) is not None
    assert services.queue.count() == 0


def test_media_removed_during_scan_is_dropped_without_observers(
    services: CleanupServices, hooks, content: ContentBuilder
) -> None:
    synchronous(services)
    events: list[tuple[str, int]] = []

    def removed_by_extension(used: bool, media: int, post: int) -> bool:
        services.posts.delete_media_with_files(media)
        return False

    hooks.used_elsewhere.append(removed_by_extension)
    hooks.before_delete.append(lambda media, post: events.append(("before", media)))
    hooks.after_delete.append(lambda media, post: events.append(("after", media)))
    post_id = content.post()
    media_id = content.attachment("mirage.jpg", parent_id=post_id)

    stats = delete_post(services, post_id)

    assert (stats.deleted, stats.dropped) == (0, 1)
    assert events == []
    assert services.posts.get_media(media_id) is None

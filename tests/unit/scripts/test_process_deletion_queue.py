import importlib.util
import sys
from pathlib import Path

import pytest

from src.media_gc.config import build_config
from src.media_gc.domain.models import QueueItem
from src.media_gc.services.container import build_services
from src.media_gc.utils.clock import utcnow
from tests.helpers.config import make_settings
from tests.helpers.content import ContentBuilder

PROJECT_ROOT = Path(__file__).resolve().parents[3]
MODULE_PATH = PROJECT_ROOT / "scripts" / "process_deletion_queue.py"
MODULE_SPEC = importlib.util.spec_from_file_location("process_deletion_queue_module", MODULE_PATH)
process_deletion_queue = importlib.util.module_from_spec(MODULE_SPEC)
assert MODULE_SPEC and MODULE_SPEC.loader
sys.modules["process_deletion_queue_module"] = process_deletion_queue
MODULE_SPEC.loader.exec_module(process_deletion_queue)


@pytest.fixture()
def environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    settings = make_settings(tmp_path)
    monkeypatch.setenv("MEDIA_GC_DATABASE_URL", settings.database_url)
    monkeypatch.setenv("MEDIA_GC_UPLOADS_DIR", str(settings.uploads_dir))
    monkeypatch.setenv("MEDIA_GC_UPLOADS_BASE_URL", settings.uploads_base_url)
    config = build_config(settings)
    yield config
    config.engine.dispose()


def test_idle_queue_reports_summary(environment, capsys) -> None:
    exit_code = process_deletion_queue.main([])

    assert exit_code == 0
    assert "queue idle" in capsys.readouterr().out


def test_run_now_deletes_queued_media(environment, capsys) -> None:
    services = build_services(environment)
    content = ContentBuilder(services.posts, environment.uploads_dir, environment.session_factory)
    post_id = content.post()
    media_id = content.attachment("tide.jpg", parent_id=post_id)
    services.posts.delete_post(post_id)
    services.queue.append(
        [QueueItem(attachment_id=media_id, post_id=post_id, queued_at=utcnow())]
    )

    exit_code = process_deletion_queue.main(["--run-now", "--actor", "cron"])

    assert exit_code == 0
    output = capsys.readouterr().out
    assert "deleted=1" in output
    assert "remaining=0" in output
    assert services.posts.get_media(media_id) is None


def test_failure_returns_error_code(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    def explode(**_: object) -> None:
        raise RuntimeError("database is gone")

    monkeypatch.setattr(process_deletion_queue, "perform_drain", explode)

    assert process_deletion_queue.main([]) == 2
    assert "database is gone" in capsys.readouterr().err




def test_cron_run_consumes_pending_schedule(environment, capsys) -> None:
    services = build_services(environment)
    services.scheduler.schedule_once(0)

    assert process_deletion_queue.main([]) == 0

    assert services.scheduler.is_scheduled() is False


def test_cron_run_rearms_schedule_when_work_remains(
    environment, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    monkeypatch.setenv("MEDIA_GC_QUEUE_BATCH_SIZE", "1")
    services = build_services(environment)
    content = ContentBuilder(services.posts, environment.uploads_dir, environment.session_factory)
    post_id = content.post()
    media = [content.attachment(f"{name}.jpg", parent_id=post_id) for name in ("reef", "shoal")]
    services.posts.delete_post(post_id)
    services.queue.append(
        QueueItem(attachment_id=media_id, post_id=post_id, queued_at=utcnow()) for media_id in media
    )
    services.scheduler.schedule_once(0)

    assert process_deletion_queue.main([]) == 0

    assert "remaining=1" in capsys.readouterr().out
    assert services.scheduler.is_scheduled() is True

"""Testes do ProcessBacklogUseCase."""

from __future__ import annotations

import pytest

from app.domain.errors import TaskNotFoundError, UploadFailedError
from app.domain.media import MediaReference, MediaRole
from app.infra.stores import MemoryTaskStore
from app.services.batch_scheduler import BatchScheduler
from app.use_cases.media import ProcessBacklogUseCase
from config.settings import BatchSettings
from fakes.fake_media_ports import FakeRouter


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _images(count: int) -> list[MediaReference]:
    return [MediaReference(url=f"https://ci.xiaohongshu.com/{n}.jpg") for n in range(count)]


def _videos(count: int) -> list[MediaReference]:
    return [
        MediaReference(url=f"https://v.douyin.com/{n}.mp4", role=MediaRole.VIDEO)
        for n in range(count)
    ]


def _build(
    settings: BatchSettings, router: FakeRouter | None = None
) -> tuple[ProcessBacklogUseCase, BatchScheduler, RecordingSleep]:
    scheduler = BatchScheduler(MemoryTaskStore(), router or FakeRouter(), settings)
    sleep = RecordingSleep()
    return ProcessBacklogUseCase(scheduler, settings, sleep=sleep), scheduler, sleep


@pytest.mark.parametrize(
    ("count", "mode"),
    [(1, "small_batch"), (15, "small_batch"), (24, "small_batch"), (25, "large_batch")],
)
def test_choose_mode(count: int, mode: str) -> None:
    use_case, _, _ = _build(BatchSettings())
    assert use_case.choose_mode(count) == mode


@pytest.mark.asyncio
async def test_small_batch_runs_to_completion_with_interval() -> None:
    settings = BatchSettings(batch_size_images=4, batch_interval_ms=250)
    use_case, scheduler, sleep = _build(settings)

    outcome = await use_case.execute(_images(10))

    assert outcome.mode == "small_batch"
    assert outcome.is_complete is True
    assert outcome.status == "completed"
    assert outcome.images == [f"routed://https://ci.xiaohongshu.com/{n}.jpg" for n in range(10)]
    assert sleep.calls == [0.25, 0.25]
    assert "continue_path" not in outcome.to_dict()
    with pytest.raises(TaskNotFoundError):
        await scheduler.load_task(outcome.task_id)


@pytest.mark.asyncio
async def test_large_batch_returns_continuation_handle() -> None:
    use_case, scheduler, sleep = _build(BatchSettings(batch_interval_ms=0))

    outcome = await use_case.execute(_videos(30), external_linkage={"record_id": "rec-9"})

    assert outcome.mode == "large_batch"
    assert outcome.is_complete is False
    assert outcome.progress is not None
    assert outcome.progress["completed_batches"] == 1
    assert outcome.progress["total_batches"] == 4
    data = outcome.to_dict()
    assert data["continue_path"] == f"/continue-processing/{outcome.task_id}"
    assert data["status_path"] == f"/task-status/{outcome.task_id}"
    assert sleep.calls == []

    while not outcome.is_complete:
        outcome = await use_case.continue_task(outcome.task_id)

    assert len(outcome.videos) == 30
    assert outcome.external_linkage == {"record_id": "rec-9"}
    with pytest.raises(TaskNotFoundError):
        await scheduler.load_task(outcome.task_id)


@pytest.mark.asyncio
async def test_failed_items_reported_in_final_outcome() -> None:
    images = _images(3)
    router = FakeRouter(failures={images[1].url: UploadFailedError("Upload recusado")})
    use_case, _, _ = _build(BatchSettings(batch_interval_ms=0), router)

    outcome = await use_case.execute(images)

    assert outcome.is_complete is True
    assert len(outcome.images) == 2
    assert outcome.failed_items == [
        {
            "url": images[1].url,
            "role": "image",
            "error_kind": "upload_failed",
            "message": "Upload recusado",
        }
    ]


@pytest.mark.asyncio
async def test_continue_unknown_task() -> None:
    use_case, _, _ = _build(BatchSettings())

    with pytest.raises(TaskNotFoundError):
        await use_case.continue_task("missing")

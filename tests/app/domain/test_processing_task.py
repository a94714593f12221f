"""Testes do modelo ProcessingTask."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from app.domain.media import MediaReference, MediaRole
from app.domain.processing_task import (
    FailedItem,
    ProcessedItem,
    ProcessingTask,
    TaskStatus,
    compute_total_batches,
)


def _video(n: int) -> MediaReference:
    return MediaReference(url=f"https://v.douyin.com/{n}.mp4", role=MediaRole.VIDEO)


def _image(n: int) -> MediaReference:
    return MediaReference(url=f"https://ci.xiaohongshu.com/{n}.jpg")


class TestComputeTotalBatches:
    def test_takes_the_larger_lane(self) -> None:
        assert compute_total_batches(30, 0, 8, 12) == 4
        assert compute_total_batches(8, 25, 8, 12) == 3

    def test_empty(self) -> None:
        assert compute_total_batches(0, 0, 8, 12) == 0


class TestProcessingTask:
    def test_empty_task_is_complete(self) -> None:
        assert ProcessingTask(task_id="t").is_complete is True

    def test_completion_bound_by_total_batches(self) -> None:
        task = ProcessingTask(
            task_id="t", pending_images=[_image(1)], total_batches=2, completed_batches=2
        )
        assert task.is_complete is True

    def test_pending_items_keep_task_open(self) -> None:
        task = ProcessingTask(task_id="t", pending_videos=[_video(1)], total_batches=1)
        assert task.is_complete is False

    def test_progress_percent(self) -> None:
        task = ProcessingTask(task_id="t", total_batches=4, completed_batches=1)
        assert task.progress_percent == 25
        assert ProcessingTask(task_id="t").progress_percent == 100

    def test_is_expired(self) -> None:
        now = datetime.now(UTC)
        task = ProcessingTask(task_id="t", expires_at=now + timedelta(seconds=5))
        assert task.is_expired(now) is False
        assert task.is_expired(now + timedelta(seconds=6)) is True

    def test_dict_round_trip_preserves_state(self) -> None:
        task = ProcessingTask(
            task_id="abc",
            pending_videos=[_video(1)],
            pending_images=[
                MediaReference(
                    url="https://ci.xiaohongshu.com/c.jpg",
                    role=MediaRole.COVER,
                    backup_urls=("https://sns-webpic.xhscdn.com/c",),
                )
            ],
            processed_images=[ProcessedItem("https://a/1.jpg", "https://img/1.jpg")],
            failed_items=[FailedItem("https://a/2.jpg", "image", "upload_failed", "boom")],
            completed_batches=1,
            total_batches=2,
            external_linkage={"page_id": "p-1"},
        )

        restored = ProcessingTask.from_dict(task.to_dict())

        assert restored.task_id == "abc"
        assert restored.pending_videos == task.pending_videos
        assert restored.pending_images[0].role is MediaRole.COVER
        assert restored.pending_images[0].backup_urls == ("https://sns-webpic.xhscdn.com/c",)
        assert restored.processed_images == task.processed_images
        assert restored.failed_items == task.failed_items
        assert restored.status is TaskStatus.PROCESSING
        assert restored.external_linkage == {"page_id": "p-1"}
        assert restored.expires_at == task.expires_at

    def test_cover_counts_as_image(self) -> None:
        assert MediaReference(url="u", role=MediaRole.COVER).kind == "image"
        assert _video(1).kind == "video"

"""
Unit tests for ProcessingStatusTracker.

Tests status publication, the delayed revert to Idle after terminal
statuses, and queue overflow handling.
"""

import asyncio

import pytest

from knowledge_recall.ingestion import (
    Completed,
    Deleting,
    Failed,
    Idle,
    Processing,
    ProcessingStatusTracker,
)


def _processing(progress=0, step="Chunking document..."):
    return Processing(document_id="doc1", document_name="notes.txt", progress=progress, step=step)


def test_starts_idle(status_tracker):
    assert status_tracker.status == Idle()
    assert status_tracker.drain() == []


@pytest.mark.asyncio
async def test_publish_is_observable(status_tracker):
    status_tracker.publish(_processing())

    assert status_tracker.status == _processing()
    assert await status_tracker.next_update() == _processing()


@pytest.mark.asyncio
async def test_completed_reverts_to_idle(status_tracker):
    status_tracker.publish(_processing())
    status_tracker.complete("doc1")

    assert status_tracker.status == Completed(document_id="doc1")

    await asyncio.sleep(0.05)

    assert status_tracker.status == Idle()
    assert status_tracker.drain() == [_processing(), Completed(document_id="doc1"), Idle()]


@pytest.mark.asyncio
async def test_failed_keeps_reason(status_tracker):
    status_tracker.fail("doc1", "document is empty or too short")

    assert status_tracker.status == Failed(document_id="doc1", reason="document is empty or too short")

    await asyncio.sleep(0.05)
    assert status_tracker.status == Idle()


@pytest.mark.asyncio
async def test_deleted_reports_full_progress(status_tracker):
    status_tracker.deleted("doc1", "notes.txt")

    assert status_tracker.status == Deleting(
        document_id="doc1", document_name="notes.txt", progress=100
    )

    await asyncio.sleep(0.05)
    assert status_tracker.status == Idle()


@pytest.mark.asyncio
async def test_new_operation_cancels_pending_revert():
    tracker = ProcessingStatusTracker(completed_delay=0.02)

    tracker.complete("doc1")
    tracker.publish(_processing(progress=40, step="Embedding chunk 2/5..."))
    await asyncio.sleep(0.05)

    assert tracker.status == _processing(progress=40, step="Embedding chunk 2/5...")


@pytest.mark.asyncio
async def test_reset(status_tracker):
    status_tracker.fail("doc1", "boom")
    status_tracker.reset()

    assert status_tracker.status == Idle()
    await asyncio.sleep(0.05)
    assert status_tracker.drain() == [Failed(document_id="doc1", reason="boom"), Idle()]


def test_reset_when_idle_publishes_nothing(status_tracker):
    status_tracker.reset()

    assert status_tracker.drain() == []


def test_full_queue_drops_oldest():
    tracker = ProcessingStatusTracker(max_pending=2)

    for progress in (10, 20, 30):
        tracker.publish(_processing(progress=progress))

    assert [update.progress for update in tracker.drain()] == [20, 30]
    assert tracker.status.progress == 30


def test_status_kinds():
    assert Idle().kind == "idle"
    assert _processing().kind == "processing"
    assert Completed(document_id="doc1").kind == "completed"
    assert Failed(document_id="doc1", reason="x").kind == "failed"
    assert Deleting(document_id="doc1", document_name="n", progress=50).kind == "deleting"

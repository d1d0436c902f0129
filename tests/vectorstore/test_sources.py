"""Tests for SourceRemover retry and error classification."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from docflow.core.config import RetryConfig
from docflow.tasks.cancellation import CancellationRegistry
from docflow.tasks.errors import ErrorKind, NonRetriableError, TaskCancelledError
from docflow.vectorstore import SourceRemover, VectorStoreError
from docflow.worker.retry import RetryExecutor


@pytest.fixture
def registry():
    return CancellationRegistry()


@pytest.fixture
def executor(registry):
    return RetryExecutor(registry, RetryConfig(max_attempts=3, initial_delay=0.0), sleep=AsyncMock())


@pytest.fixture
def store():
    store = AsyncMock()
    store.delete_by_sources.return_value = "completed"
    return store


class TestRemove:
    @pytest.mark.asyncio
    async def test_success_message(self, store, executor):
        remover = SourceRemover(store, executor)
        message = await remover.remove(["https://a.dev", "https://b.dev"])
        assert message == (
            "Successfully removed documentation from 2 sources: https://a.dev, https://b.dev"
        )
        store.delete_by_sources.assert_awaited_once_with(
            "documentation", ["https://a.dev", "https://b.dev"]
        )

    @pytest.mark.asyncio
    async def test_single_source_message(self, store, executor):
        remover = SourceRemover(store, executor, collection="docs")
        message = await remover.remove(["https://a.dev"])
        assert message.endswith("1 source: https://a.dev")
        store.delete_by_sources.assert_awaited_once_with("docs", ["https://a.dev"])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sources", [[], [""], ["ok", ""]])
    async def test_invalid_sources_rejected(self, store, executor, sources):
        with pytest.raises(NonRetriableError):
            await SourceRemover(store, executor).remove(sources)
        store.delete_by_sources.assert_not_awaited()


class TestErrors:
    @pytest.mark.asyncio
    async def test_connection_errors_are_retried(self, store, executor):
        store.delete_by_sources.side_effect = [
            OSError("connect ECONNREFUSED 127.0.0.1:6333"),
            "acknowledged",
        ]
        await SourceRemover(store, executor).remove(["src"])
        assert store.delete_by_sources.await_count == 2

    @pytest.mark.asyncio
    async def test_unauthorized_is_not_retried(self, store, executor):
        store.delete_by_sources.side_effect = RuntimeError("Unauthorized: bad api key")
        with pytest.raises(VectorStoreError) as exc_info:
            await SourceRemover(store, executor).remove(["src"])
        assert exc_info.value.kind == ErrorKind.NON_RETRIABLE
        assert "authenticate" in exc_info.value.message
        assert store.delete_by_sources.await_count == 1

    @pytest.mark.asyncio
    async def test_bad_status_exhausts_retries(self, store, executor):
        store.delete_by_sources.return_value = "failed"
        with pytest.raises(VectorStoreError, match="status: failed") as exc_info:
            await SourceRemover(store, executor).remove(["src"])
        assert exc_info.value.kind == ErrorKind.RETRIABLE
        assert store.delete_by_sources.await_count == 3

    @pytest.mark.asyncio
    async def test_cancelled_task_skips_store(self, store, executor, registry):
        registry.request_cancel("t-1")
        with pytest.raises(TaskCancelledError):
            await SourceRemover(store, executor).remove(["src"], task_id="t-1")
        store.delete_by_sources.assert_not_awaited()

import asyncio
from unittest.mock import patch

import pytest

from legalflow.pipeline.tasks import BackgroundTasks


class TestBackgroundTasks:
    @pytest.mark.asyncio
    async def test_join_waits_for_tasks(self) -> None:
        tasks = BackgroundTasks()
        done: list[int] = []

        async def work() -> None:
            await asyncio.sleep(0.01)
            done.append(1)

        tasks.spawn(work(), name="work")
        assert len(tasks) == 1
        await tasks.join()
        assert done == [1]
        assert len(tasks) == 0

    @pytest.mark.asyncio
    async def test_join_includes_tasks_spawned_meanwhile(self) -> None:
        tasks = BackgroundTasks()
        done: list[str] = []

        async def child() -> None:
            done.append("child")

        async def parent() -> None:
            tasks.spawn(child(), name="child")

        tasks.spawn(parent(), name="parent")
        await tasks.join()
        assert done == ["child"]

    @pytest.mark.asyncio
    async def test_crash_is_logged(self) -> None:
        tasks = BackgroundTasks()

        async def boom() -> None:
            raise RuntimeError("kaput")

        with patch("legalflow.pipeline.tasks.Log") as mock_log:
            tasks.spawn(boom(), name="boom")
            await tasks.join()
        message = mock_log.error.call_args.args[0]
        assert "boom" in message
        assert "kaput" in message

    @pytest.mark.asyncio
    async def test_cancel_all(self) -> None:
        tasks = BackgroundTasks()
        task = tasks.spawn(asyncio.sleep(60), name="sleeper")
        await tasks.cancel_all()
        assert task.cancelled()

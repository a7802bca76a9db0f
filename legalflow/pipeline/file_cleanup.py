import asyncio
from pathlib import Path

from legalflow.logging.logger import Log
from legalflow.pipeline.tasks import BackgroundTasks


def delete_file(path: Path) -> bool:
    """Remove ``path`` if present. Failures are logged, never raised."""
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        Log.error(f"Error deleting file {path}: {exc}")
        return False
    Log.info(f"File deleted: {path}")
    return True


class DelayedFileRemover:
    """Deletes temporary uploads a fixed delay after extraction finishes."""

    def __init__(self, delay_seconds: float) -> None:
        self._delay_seconds = delay_seconds
        self._tasks = BackgroundTasks()
        self._pending: set[Path] = set()

    @property
    def pending(self) -> frozenset[Path]:
        return frozenset(self._pending)

    def schedule(self, path: Path) -> None:
        self._pending.add(path)
        self._tasks.spawn(self._remove_later(path), name=f"delete-{path.name}")

    async def _remove_later(self, path: Path) -> None:
        await asyncio.sleep(self._delay_seconds)
        await asyncio.to_thread(delete_file, path)
        self._pending.discard(path)

    async def close(self) -> None:
        """Cancel pending timers and delete their files right away."""
        await self._tasks.cancel_all()
        for path in list(self._pending):
            delete_file(path)
        self._pending.clear()

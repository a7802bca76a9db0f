import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest

from legalflow.pipeline.file_cleanup import DelayedFileRemover, delete_file


class TestDeleteFile:
    def test_deletes_existing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "upload.pdf"
        path.write_bytes(b"x")
        assert delete_file(path) is True
        assert not path.exists()

    def test_missing_file_is_not_an_error(self, tmp_path: Path) -> None:
        assert delete_file(tmp_path / "gone.pdf") is True

    def test_failure_is_logged_not_raised(self, tmp_path: Path) -> None:
        with (
            patch.object(Path, "unlink", side_effect=PermissionError("denied")),
            patch("legalflow.pipeline.file_cleanup.Log") as mock_log,
        ):
            assert delete_file(tmp_path / "locked.pdf") is False
        mock_log.error.assert_called_once()


class TestDelayedFileRemover:
    @pytest.mark.asyncio
    async def test_deletes_after_delay(self, tmp_path: Path) -> None:
        path = tmp_path / "upload.pdf"
        path.write_bytes(b"x")
        remover = DelayedFileRemover(delay_seconds=0.01)
        remover.schedule(path)
        assert path in remover.pending
        await asyncio.sleep(0.2)
        assert not path.exists()
        assert remover.pending == frozenset()

    @pytest.mark.asyncio
    async def test_keeps_file_until_delay_elapses(self, tmp_path: Path) -> None:
        path = tmp_path / "upload.pdf"
        path.write_bytes(b"x")
        remover = DelayedFileRemover(delay_seconds=60)
        remover.schedule(path)
        await asyncio.sleep(0)
        assert path.exists()
        await remover.close()

    @pytest.mark.asyncio
    async def test_close_deletes_pending_files_immediately(self, tmp_path: Path) -> None:
        path = tmp_path / "upload.pdf"
        path.write_bytes(b"x")
        remover = DelayedFileRemover(delay_seconds=60)
        remover.schedule(path)
        await remover.close()
        assert not path.exists()
        assert remover.pending == frozenset()

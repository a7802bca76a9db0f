import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path

from legalflow.config.settings import Settings
from legalflow.events.broadcaster import Subscription
from legalflow.events.models import ProgressStage
from legalflow.logging.logger import Log
from legalflow.pipeline.exceptions import ValidationError
from legalflow.service import DocumentService, build_service

_TERMINAL_STAGES = frozenset(
    {
        ProgressStage.EXTRACTION,
        ProgressStage.ANALYSIS_COMPLETE,
        ProgressStage.QUESTION_ANSWERED,
        ProgressStage.ERROR,
    }
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="legalflow",
        description="Extract and analyze one legal document end-to-end.",
    )
    parser.add_argument("file", type=Path, help="PDF, DOC or DOCX file to analyze")
    parser.add_argument("--question", help="question to ask about the document")
    parser.add_argument("--language", default="English", help="answer language")
    return parser.parse_args(argv)


async def _wait_for(subscription: Subscription, stage: ProgressStage) -> bool:
    """Print events until ``stage`` completes. Returns ``False`` on an error event."""
    async for event in subscription:
        print(json.dumps(event.to_message()), flush=True)
        if event.stage not in _TERMINAL_STAGES:
            continue
        if event.stage is ProgressStage.ERROR:
            return False
        if event.stage is stage and event.progress == 100:
            return True
    return False


async def run(service: DocumentService, args: argparse.Namespace) -> int:
    mime_type = mimetypes.guess_type(args.file.name)[0] or ""
    data = await asyncio.to_thread(args.file.read_bytes)
    subscription = service.subscribe()
    try:
        try:
            receipt = await service.start_upload(data, args.file.name, mime_type)
        except ValidationError as exc:
            Log.error(f"Upload rejected: {exc}")
            return 2
        subscription.session_id = receipt.session_id

        if not await _wait_for(subscription, ProgressStage.EXTRACTION):
            return 1
        await service.start_analysis(receipt.session_id)
        if not await _wait_for(subscription, ProgressStage.ANALYSIS_COMPLETE):
            return 1
        if args.question:
            await service.ask_question(receipt.session_id, args.question, args.language)
            if not await _wait_for(subscription, ProgressStage.QUESTION_ANSWERED):
                return 1

        result = await service.get_analysis_result(receipt.session_id)
        print(json.dumps(result.value, indent=2))
        return 0
    finally:
        service.unsubscribe(subscription)


async def amain(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> build service -> run one document."""
    args = parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    service = await build_service(settings)
    try:
        return await run(service, args)
    finally:
        await service.aclose()


def main() -> None:
    sys.exit(asyncio.run(amain()))


if __name__ == "__main__":
    main()

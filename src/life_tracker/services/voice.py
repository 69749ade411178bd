"""Voice command orchestration: parse a transcript, then execute it."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date

from life_tracker.domain.actions import ParseResult
from life_tracker.domain.execution import ExecutionSummary
from life_tracker.services.executor import ActionExecutor, DomainHandles
from life_tracker.services.intents import IntentParser

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoiceCommandOutcome:
    """Parsed actions together with what executing them did."""

    parse_result: ParseResult
    summary: ExecutionSummary

    def to_payload(self) -> dict[str, object]:
        return {
            **self.parse_result.to_payload(),
            **self.summary.to_payload(),
        }


@dataclass
class VoiceAssistant:
    """Runs one utterance through the parser and the executor."""

    parser: IntentParser
    executor: ActionExecutor
    _running: set[asyncio.Task[ExecutionSummary]] = field(
        default_factory=set, init=False, repr=False
    )

    async def understand(
        self,
        transcript: str,
        language_hint: str | None = None,
        today: date | None = None,
    ) -> ParseResult:
        """Parse without touching any store."""
        return await self.parser.parse(transcript, language_hint, today)

    async def handle(
        self,
        transcript: str,
        handles: DomainHandles,
        language_hint: str | None = None,
        today: date | None = None,
    ) -> VoiceCommandOutcome:
        """Parse a transcript and apply every resulting action.

        Once execution starts it runs to completion even if the caller is
        cancelled, so a batch is never left half applied.
        """
        parse_result = await self.parser.parse(transcript, language_hint, today)
        task = asyncio.ensure_future(
            self.executor.execute(parse_result.actions, handles)
        )
        self._running.add(task)
        task.add_done_callback(self._running.discard)
        try:
            summary = await asyncio.shield(task)
        except asyncio.CancelledError:
            _logger.warning(
                "Caller cancelled while %s action(s) were executing; finishing them",
                len(parse_result.actions),
            )
            raise
        _logger.info(
            "Voice command finished: %s succeeded, %s failed",
            len(summary.succeeded),
            len(summary.failed),
        )
        return VoiceCommandOutcome(parse_result=parse_result, summary=summary)

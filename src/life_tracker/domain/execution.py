"""Results produced by the action executor."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ActionResult:
    """Terminal outcome of one dispatched action."""

    intent: str
    success: bool
    message: str | None = None


@dataclass(frozen=True)
class ExecutionSummary:
    """Aggregated outcome of a batch of actions."""

    results: list[ActionResult] = field(default_factory=list)
    success_message: str | None = None
    failure_message: str | None = None

    @property
    def succeeded(self) -> list[ActionResult]:
        return [result for result in self.results if result.success]

    @property
    def failed(self) -> list[ActionResult]:
        return [result for result in self.results if not result.success]

    @property
    def all_succeeded(self) -> bool:
        return bool(self.results) and not self.failed

    def to_payload(self) -> dict[str, object]:
        """Serialize for API responses."""
        return {
            "results": [
                {
                    "intent": result.intent,
                    "success": result.success,
                    "message": result.message,
                }
                for result in self.results
            ],
            "successMessage": self.success_message,
            "failureMessage": self.failure_message,
        }

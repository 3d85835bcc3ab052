"""Per-step failure policy for submission processing.

Every Salesforce call made while processing a submission is a named step.
The policy table decides whether a failing step aborts the submission
(fatal) or is logged and skipped (best-effort).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from salesforce_proxy.core.exceptions import AppException, StepFailedError
from salesforce_proxy.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class StepPolicy(str, Enum):
    FATAL = "fatal"
    BEST_EFFORT = "best_effort"


STEP_POLICIES: dict[str, StepPolicy] = {
    "lead.sync": StepPolicy.BEST_EFFORT,
    "lead.status": StepPolicy.BEST_EFFORT,
    "lead.convert": StepPolicy.BEST_EFFORT,
    "account.resolve": StepPolicy.FATAL,
    "account.sync": StepPolicy.BEST_EFFORT,
    "contact.resolve": StepPolicy.FATAL,
    "opportunity.create": StepPolicy.FATAL,
    "opportunity.update": StepPolicy.BEST_EFFORT,
    "premises.create": StepPolicy.BEST_EFFORT,
    "service_point.create": StepPolicy.BEST_EFFORT,
    "file.upload": StepPolicy.BEST_EFFORT,
    "file.link": StepPolicy.BEST_EFFORT,
}


@dataclass(frozen=True)
class StepFailure:
    step: str
    error: str


class StepRunner:
    """Runs submission steps under the policy table.

    One runner per submission; it collects the best-effort failures.
    """

    def __init__(self, policies: Mapping[str, StepPolicy] | None = None):
        self._policies = STEP_POLICIES if policies is None else policies
        self.failures: list[StepFailure] = []

    def policy(self, step: str) -> StepPolicy:
        try:
            return self._policies[step]
        except KeyError:
            raise ValueError(f"No policy declared for step: {step}") from None

    async def run(
        self,
        step: str,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T | None:
        """Await func(*args, **kwargs) under the step's policy.

        Returns:
            The step result, or None when a best-effort step failed

        Raises:
            StepFailedError: When a fatal step failed
        """
        policy = self.policy(step)
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            error = e.message if isinstance(e, AppException) else str(e)
            if policy is StepPolicy.FATAL:
                logger.error("Submission step failed", step=step, error=error)
                raise StepFailedError(step, error) from e

            logger.warning("Best-effort step failed, continuing", step=step, error=error)
            self.failures.append(StepFailure(step=step, error=error))
            return None

    @property
    def last_error(self) -> str | None:
        return self.failures[-1].error if self.failures else None

    @property
    def failed_steps(self) -> list[str]:
        return [failure.step for failure in self.failures]

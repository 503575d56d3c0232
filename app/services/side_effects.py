import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class SideEffectResult:
    """Outcome of one best-effort step."""

    name: str
    ok: bool
    error: Optional[str] = None


@dataclass
class SideEffectLog:
    """Runs best-effort steps and remembers which of them failed.

    A step is an async callable.  When *savepoint* is given it must return
    an async context manager (``repo.savepoint``) and every step runs
    inside its own SAVEPOINT, so a failed INSERT/UPDATE is rolled back on
    its own without aborting the surrounding transaction.

    Failures are logged with traceback and recorded; they never
    propagate to the caller.
    """

    savepoint: Optional[Callable[[], Any]] = None
    results: List[SideEffectResult] = field(default_factory=list)

    async def attempt(
        self, name: str, step: Callable[[], Awaitable[Any]]
    ) -> Optional[Any]:
        """Run *step*; return its value, or ``None`` if it raised."""
        try:
            if self.savepoint is not None:
                async with self.savepoint():
                    value = await step()
            else:
                value = await step()
        except Exception as exc:
            logger.warning("Side effect %s failed", name, exc_info=True)
            self.results.append(SideEffectResult(name=name, ok=False, error=str(exc)))
            return None
        self.results.append(SideEffectResult(name=name, ok=True))
        return value

    @property
    def failures(self) -> List[SideEffectResult]:
        return [r for r in self.results if not r.ok]

    @property
    def failed_names(self) -> List[str]:
        """Names of the failed steps, in execution order."""
        return [r.name for r in self.failures]

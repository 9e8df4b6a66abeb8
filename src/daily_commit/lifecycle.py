"""
Invocation lifecycle management for reused worker processes.

A worker process (Celery worker, uvicorn worker) handles many invocations
without being restarted. Credential cache, metric batch and the scratch git
checkout survive between them, so every invocation starts with
``reset_for_new_invocation`` and ends with ``force_send_metrics``.

Both are best-effort: they never raise. Instead of silently discarding
failures, ``reset_for_new_invocation`` returns one StepReport per step so the
caller can log what was attempted and what failed.
"""

import resource
import sys
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import structlog

from daily_commit.credentials.cache import CredentialCache
from daily_commit.monitoring.aggregator import MetricsAggregator
from daily_commit.scm.git import GitWorkspace

logger = structlog.get_logger(__name__)

MEMORY_THRESHOLD_BYTES = 100 * 1024 * 1024
CACHE_SIZE_THRESHOLD = 10
UPTIME_THRESHOLD_SECONDS = 300.0

_PROCESS_STARTED = time.monotonic()


def current_memory_bytes() -> int:
    """Peak resident set size of this process."""
    usage = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is bytes on macOS, kilobytes elsewhere
    return usage if sys.platform == "darwin" else usage * 1024


@dataclass(frozen=True)
class StepReport:
    """Outcome of one cleanup step."""

    name: str
    ok: bool
    skipped: bool = False
    error: Optional[str] = None


@dataclass
class HealthReport:
    """Advisory environment health; ``valid`` is not a gate."""

    valid: bool
    issues: list[str] = field(default_factory=list)


class LifecycleManager:
    """
    Resets shared process state between invocations.

    Attributes:
        credentials: Credential cache to clear
        aggregator: Metrics aggregator to clear / drain
        workspace: Scratch git checkout to reset
        sink_id: Namespace used when draining metrics
    """

    def __init__(
        self,
        credentials: CredentialCache,
        aggregator: MetricsAggregator,
        workspace: GitWorkspace,
        sink_id: str,
        memory_probe: Callable[[], int] = current_memory_bytes,
        clock: Callable[[], float] = time.monotonic,
        started_at: float = _PROCESS_STARTED,
    ):
        self.credentials = credentials
        self.aggregator = aggregator
        self.workspace = workspace
        self.sink_id = sink_id
        self._memory_probe = memory_probe
        self._clock = clock
        self._started_at = started_at

    async def reset_for_new_invocation(self) -> list[StepReport]:
        """
        Clear state left behind by a previous invocation.

        Steps, each independently fault-tolerant:
            1. Clear the credential cache
            2. Drop the metric batch without sending it
            3. Hard-reset the scratch checkout (skipped if none exists)

        Returns:
            One StepReport per step
        """
        reports: list[StepReport] = []

        try:
            self.credentials.clear()
            reports.append(StepReport(name="credential_cache", ok=True))
        except Exception as exc:
            reports.append(StepReport(name="credential_cache", ok=False, error=repr(exc)))

        try:
            dropped = self.aggregator.clear()
            if dropped:
                logger.warning("Dropped metrics left by a previous invocation", dropped=dropped)
            reports.append(StepReport(name="metrics_batch", ok=True))
        except Exception as exc:
            reports.append(StepReport(name="metrics_batch", ok=False, error=repr(exc)))

        reports.append(await self._reset_checkout())

        for report in reports:
            if not report.ok:
                logger.warning("Cleanup step failed", step=report.name, error=report.error)
        return reports

    async def _reset_checkout(self) -> StepReport:
        try:
            if not self.workspace.has_checkout():
                return StepReport(name="git_checkout", ok=True, skipped=True)
            await self.workspace.reset_to_clean()
            logger.info("Git checkout reset", workdir=str(self.workspace.workdir))
            return StepReport(name="git_checkout", ok=True)
        except Exception as exc:
            # str() keeps the per-command failures carried in JobError details
            return StepReport(name="git_checkout", ok=False, error=str(exc))

    async def force_send_metrics(self) -> bool:
        """
        Flush a non-empty metric batch regardless of thresholds.

        Returns:
            False if the flush failed (the batch is dropped either way)
        """
        try:
            if self.aggregator.pending:
                logger.info("Force sending cached metrics", pending=self.aggregator.pending)
                await self.aggregator.flush(self.sink_id)
            return True
        except Exception as exc:
            logger.error("Failed to force send metrics", error_type=type(exc).__name__)
            return False

    def uptime_seconds(self) -> float:
        return self._clock() - self._started_at

    def state_info(self) -> dict:
        """Snapshot of process state for debugging."""
        stats = self.credentials.stats()
        return {
            "credential_cache": {"size": stats.size, "keys": stats.keys},
            "pending_metrics": self.aggregator.pending,
            "memory_bytes": self._memory_probe(),
            "uptime_seconds": round(self.uptime_seconds(), 1),
        }

    def validate_environment_health(self) -> HealthReport:
        """Report memory, cache size and uptime over their advisory thresholds."""
        issues: list[str] = []

        memory = self._memory_probe()
        if memory > MEMORY_THRESHOLD_BYTES:
            issues.append(f"High memory usage: {round(memory / 1024 / 1024)}MB")

        cache_size = self.credentials.stats().size
        if cache_size > CACHE_SIZE_THRESHOLD:
            issues.append(f"Large credential cache: {cache_size} entries")

        uptime = self.uptime_seconds()
        if uptime > UPTIME_THRESHOLD_SECONDS:
            issues.append(f"Long uptime: {round(uptime)}s")

        return HealthReport(valid=not issues, issues=issues)

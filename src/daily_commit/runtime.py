"""
Composition root for the Daily Commit job.

JobRuntime owns every piece of process-wide state (credential cache, metric
batch, rate limiter, scratch checkout) as explicitly constructed objects.
Entrypoints (FastAPI app, Celery task) build one runtime per process and call
``invoke``; tests build isolated runtimes per case.

Invocation flow:

    rate limit (HTTP only) -> lock -> lifecycle reset -> config check
         -> job.run -> record MetricRecord -> force-send metrics

Invocations are serialized with an asyncio.Lock: the HTTP server accepts
concurrent requests, and the cache and metric batch are not safe to interleave
across invocations. The limiter is checked before the lock; it never awaits.

The metric record counts one error per failed invocation. Failed attempts
that were retried show up in the retry count.
"""

import asyncio
import time
from pathlib import Path
from typing import Optional

import structlog

from daily_commit.config import Settings, validate_environment
from daily_commit.credentials.cache import CredentialCache
from daily_commit.credentials.store import HttpCredentialStore
from daily_commit.errors import ConfigurationError, RateLimitExceeded
from daily_commit.job import DailyCommitJob
from daily_commit.lifecycle import LifecycleManager
from daily_commit.models.job import JobRequest, JobResult
from daily_commit.monitoring.aggregator import MetricRecord, MetricsAggregator
from daily_commit.monitoring.metrics import (
    job_duration_seconds,
    job_invocations_total,
    rate_limit_rejections_total,
)
from daily_commit.monitoring.sinks import LogMetricsSink, MetricsSink, PushgatewayMetricsSink
from daily_commit.ratelimit import RateLimiter
from daily_commit.retry.executor import RetryExecutor, RetryStats
from daily_commit.scm.git import GitWorkspace

logger = structlog.get_logger(__name__)

HIGH_MEMORY_WARNING_BYTES = 50 * 1024 * 1024


class JobRuntime:
    """
    Process-level container for the job and its reliability components.

    Attributes:
        settings: Application settings
        job: Business action
        credentials: Credential cache
        aggregator: Metrics aggregator
        rate_limiter: HTTP rate limiter
        lifecycle: Lifecycle manager
    """

    def __init__(
        self,
        settings: Settings,
        job: DailyCommitJob,
        credentials: CredentialCache,
        aggregator: MetricsAggregator,
        rate_limiter: RateLimiter,
        lifecycle: LifecycleManager,
        store: Optional[HttpCredentialStore] = None,
    ):
        self.settings = settings
        self.job = job
        self.credentials = credentials
        self.aggregator = aggregator
        self.rate_limiter = rate_limiter
        self.lifecycle = lifecycle
        self._store = store
        self._lock = asyncio.Lock()

    @classmethod
    def build(
        cls,
        settings: Settings,
        sink: Optional[MetricsSink] = None,
        executor: Optional[RetryExecutor] = None,
    ) -> "JobRuntime":
        """Wire all components from settings."""
        executor = executor or RetryExecutor()
        store = HttpCredentialStore(
            base_url=settings.CREDENTIAL_STORE_URL,
            token=settings.CREDENTIAL_STORE_TOKEN,
            timeout=settings.CREDENTIAL_STORE_TIMEOUT,
        )
        credentials = CredentialCache(
            store=store,
            executor=executor,
            policy=settings.retry_policy("credentials"),
            default_ttl=settings.CACHE_TTL_SECONDS,
        )
        if sink is None:
            if settings.PUSHGATEWAY_URL:
                sink = PushgatewayMetricsSink(
                    settings.PUSHGATEWAY_URL, timeout=settings.METRICS_TIMEOUT_SECONDS
                )
            else:
                sink = LogMetricsSink()
        aggregator = MetricsAggregator(
            sink=sink,
            batch_size=settings.METRICS_BATCH_SIZE,
            batch_timeout=settings.METRICS_BATCH_TIMEOUT_SECONDS,
        )
        workspace = GitWorkspace(
            workdir=Path(settings.WORKDIR),
            branch=settings.GIT_BRANCH,
            timeout=settings.GIT_TIMEOUT_SECONDS,
            git_binary=settings.GIT_BINARY,
        )
        job = DailyCommitJob(
            credentials=credentials,
            workspace=workspace,
            executor=executor,
            file_policy=settings.retry_policy("file"),
            scm_policy=settings.retry_policy("scm"),
            cache_ttl=settings.CACHE_TTL_SECONDS,
        )
        lifecycle = LifecycleManager(
            credentials=credentials,
            aggregator=aggregator,
            workspace=workspace,
            sink_id=settings.metrics_namespace,
        )

        logger.info(
            "JobRuntime initialized",
            environment=settings.ENVIRONMENT,
            cache_ttl=settings.CACHE_TTL_SECONDS,
            metrics_batch_size=settings.METRICS_BATCH_SIZE,
            metrics_sink=type(sink).__name__,
            workdir=settings.WORKDIR,
        )
        return cls(settings, job, credentials, aggregator, RateLimiter(), lifecycle, store=store)

    def resolve_request(self, request: Optional[JobRequest]) -> JobRequest:
        """Substitute defaults for every omitted field."""
        return (request or JobRequest()).with_defaults(
            credential_key=self.settings.SECRET_NAME,
            file_path=self.settings.DEFAULT_FILE_PATH,
        )

    async def invoke(
        self,
        request: Optional[JobRequest] = None,
        *,
        trigger: str = "http",
        caller_id: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> JobResult:
        """
        Run one job invocation.

        Args:
            request: Optional overrides (defaults substituted)
            trigger: "http" or "schedule" (metric label)
            caller_id: Caller identity; rate limiting applies when given
            request_id: Correlation id echoed in the result

        Returns:
            JobResult

        Raises:
            RateLimitExceeded: Caller over quota
            ConfigurationError: Required configuration missing
            CredentialFetchFailed / IncompleteCredential / RetryExhausted: Job failed
        """
        # Outside the lock: a rejected caller never waits for a running job
        if caller_id is not None and not self.rate_limiter.allow(
            caller_id,
            self.settings.RATE_LIMIT_MAX_REQUESTS,
            self.settings.RATE_LIMIT_WINDOW_SECONDS,
        ):
            rate_limit_rejections_total.inc()
            job_invocations_total.labels(trigger=trigger, outcome="rate_limited").inc()
            logger.warning("Rate limit exceeded", client_id=caller_id)
            raise RateLimitExceeded(caller_id)

        async with self._lock:
            started = time.perf_counter()
            stats = RetryStats()
            success = False
            error_count = 0
            outcome = "failure"

            await self.lifecycle.reset_for_new_invocation()
            health = self.lifecycle.validate_environment_health()
            if not health.valid:
                logger.warning("Environment issues detected", issues=health.issues)

            try:
                env_check = validate_environment(self.settings)
                if not env_check.valid:
                    raise ConfigurationError(
                        "Missing required environment variables",
                        {"missing": env_check.missing},
                    )
                if env_check.warnings:
                    logger.warning("Environment configuration warnings", warnings=env_check.warnings)

                resolved = self.resolve_request(request)
                logger.info("Job started", trigger=trigger, file_path=resolved.file_path)

                await self.job.run(resolved, stats)

                success = True
                outcome = "success"
                elapsed_ms = int((time.perf_counter() - started) * 1000)
                logger.info("Job completed successfully", execution_time_ms=elapsed_ms)
                return JobResult(
                    file_path=resolved.file_path,
                    commit_message=resolved.commit_message,
                    execution_time_ms=elapsed_ms,
                    retries=stats.retries,
                    request_id=request_id,
                )
            except Exception as exc:
                error_count += 1
                logger.error(
                    "Job failed",
                    trigger=trigger,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise
            finally:
                elapsed = time.perf_counter() - started
                job_invocations_total.labels(trigger=trigger, outcome=outcome).inc()
                job_duration_seconds.labels(trigger=trigger).observe(elapsed)
                await self.aggregator.record(
                    MetricRecord(
                        duration_ms=elapsed * 1000,
                        success=success,
                        error_count=error_count,
                        retry_count=stats.retries,
                    ),
                    self.settings.metrics_namespace,
                )
                await self.lifecycle.force_send_metrics()

    async def health(self) -> tuple[bool, dict]:
        """
        Diagnostic health check; never runs the business action.

        Returns:
            (healthy, details) where details covers environment completeness,
            memory, advisory lifecycle issues and credential-store access
        """
        details: dict = {}
        healthy = True

        env_check = validate_environment(self.settings)
        details["environment"] = {
            "valid": env_check.valid,
            "missing": env_check.missing,
            "warnings": env_check.warnings,
        }
        if not env_check.valid:
            healthy = False

        state = self.lifecycle.state_info()
        details["memory"] = {"used_mb": round(state["memory_bytes"] / 1024 / 1024)}
        if state["memory_bytes"] > HIGH_MEMORY_WARNING_BYTES:
            details["memory_warning"] = "High memory usage detected"
        details["lifecycle"] = {
            "issues": self.lifecycle.validate_environment_health().issues,
            "uptime_seconds": state["uptime_seconds"],
            "credential_cache_size": state["credential_cache"]["size"],
        }

        try:
            await self.credentials.get(self.settings.SECRET_NAME)
            details["credential_store_access"] = True
        except Exception as exc:
            details["credential_store_access"] = False
            details["credential_store_error"] = type(exc).__name__
            healthy = False

        return healthy, details

    async def aclose(self) -> None:
        """Release network resources."""
        if self._store is not None:
            await self._store.aclose()

"""
The business action: rewrite a file, commit it, push it.

Steps run strictly in order, each under its operation-class retry policy:

1. Credentials (cache, store call retried under the ``credentials`` policy)
2. File rewrite (``file`` policy, normally a single attempt)
3. Git publish sequence (``scm`` policy)
"""

import structlog

from daily_commit.credentials.cache import CredentialCache
from daily_commit.files import FileRewriteResult, rewrite_text_file
from daily_commit.models.job import JobRequest
from daily_commit.retry.executor import RetryExecutor, RetryStats
from daily_commit.retry.policy import RetryPolicy
from daily_commit.scm.git import GitWorkspace

logger = structlog.get_logger(__name__)


class DailyCommitJob:
    """
    Rewrite-commit-push action.

    Attributes:
        credentials: Credential cache
        workspace: Scratch git checkout
        executor: Retry executor
        file_policy: Policy for the file rewrite
        scm_policy: Policy for the git publish sequence
        cache_ttl: TTL for freshly fetched credentials (seconds)
    """

    def __init__(
        self,
        credentials: CredentialCache,
        workspace: GitWorkspace,
        executor: RetryExecutor,
        file_policy: RetryPolicy,
        scm_policy: RetryPolicy,
        cache_ttl: float,
    ):
        self.credentials = credentials
        self.workspace = workspace
        self.executor = executor
        self.file_policy = file_policy
        self.scm_policy = scm_policy
        self.cache_ttl = cache_ttl

    async def run(self, request: JobRequest, stats: RetryStats) -> FileRewriteResult:
        """
        Execute the job for a fully resolved request (see JobRequest.with_defaults).

        Raises:
            CredentialFetchFailed / IncompleteCredential: Credentials unavailable
            RetryExhausted: File rewrite or git sequence gave up
        """
        logger.info("Retrieving git credentials", credential_key=request.credential_key)
        bundle = await self.credentials.get(request.credential_key, self.cache_ttl, stats=stats)

        target = self.workspace.workdir / request.file_path
        logger.info("Modifying text file", file_path=request.file_path)
        file_result = await self.executor.execute(
            lambda: rewrite_text_file(target, request.new_content),
            self.file_policy,
            "file_rewrite",
            stats,
        )

        logger.info(
            "Performing git operations",
            file_path=request.file_path,
            commit_message=request.commit_message,
        )
        await self.executor.execute(
            lambda: self.workspace.publish(request.file_path, request.commit_message, bundle),
            self.scm_policy,
            "scm_publish",
            stats,
        )

        return file_result

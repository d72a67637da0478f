import asyncio
import logging
import os
import random
from typing import List, Optional

from jobsweep.adapters.base import SiteProfile
from jobsweep.browser.page import PageAccessor
from jobsweep.browser.proxy import ProxyPool
from jobsweep.browser.session import SessionProvider
from jobsweep.config.settings import settings
from jobsweep.core.clock import Clock, SystemClock
from jobsweep.core.diagnostics import CaptureMode, capture_failure
from jobsweep.core.errors import AttemptTimeoutError, ExhaustedRetries, ScrapeError
from jobsweep.core.models import (
    Attempt,
    AttemptOutcome,
    ProxyCredential,
    ResultSet,
    ScrapeResult,
)
from jobsweep.core.pipeline import ScrapeConfig, ScrapePipeline
from jobsweep.core.retry import backoff_delay

logger = logging.getLogger(__name__)


class RetryOrchestrator:
    """
    Runs the scrape pipeline in strictly sequential attempts, each on a freshly
    provisioned session (and, with a pool, a freshly picked proxy identity).

    A failed attempt leaves diagnostics behind, releases its session and backs
    off before the next one. Only ExhaustedRetries reaches the caller.
    """

    def __init__(
        self,
        sessions: SessionProvider,
        pipeline: Optional[ScrapePipeline] = None,
        pool: Optional[ProxyPool] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        attempt_timeout: float = settings.ATTEMPT_TIMEOUT,
        base_delay: float = settings.RETRY_BASE_DELAY,
        max_delay: float = settings.RETRY_MAX_DELAY,
    ):
        self.sessions = sessions
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random()
        self.pipeline = pipeline or ScrapePipeline(clock=self.clock, rng=self.rng)
        self.pool = pool
        self.attempt_timeout = attempt_timeout
        self.base_delay = base_delay
        self.max_delay = max_delay

    async def run(self, profile: SiteProfile, config: ScrapeConfig) -> ScrapeResult:
        # Bad input is not worth a retry
        config.resolve_start_url(profile)

        attempts: List[Attempt] = []
        last_error: Optional[BaseException] = None

        for index in range(config.max_attempts):
            proxy = self.pool.pick(index) if self.pool else None
            attempt = Attempt(index=index, proxy_label=proxy.username if proxy else None)
            attempts.append(attempt)

            logger.info(
                f"[{profile.name}] Attempt {index + 1}/{config.max_attempts}"
                + (f" via {proxy.server} ({attempt.proxy_label})" if proxy else "")
            )

            try:
                records = await self._attempt(attempt, proxy, profile, config)
            except Exception as e:
                last_error = e
                if attempt.outcome is not AttemptOutcome.FAILURE:
                    # Failed before a page existed, e.g. while provisioning
                    attempt.fail(e)
                self._log_failure(profile, attempt, e)

                if index + 1 < config.max_attempts:
                    delay = backoff_delay(index, self.base_delay, self.max_delay, self.rng)
                    logger.info(f"Rotating session, next attempt in {delay:.2f}s")
                    await self.clock.sleep(delay)
                continue

            attempt.succeed()
            logger.info(
                f"[{profile.name}] Attempt {index + 1} succeeded with {len(records)} records "
                f"in {attempt.elapsed:.1f}s"
            )
            return ScrapeResult(records=records, attempts=attempts)

        logger.error(
            f"[{profile.name}] All {config.max_attempts} attempts failed. Last error: {last_error}"
        )
        raise ExhaustedRetries(last_error, attempts)

    async def _attempt(
        self,
        attempt: Attempt,
        proxy: Optional[ProxyCredential],
        profile: SiteProfile,
        config: ScrapeConfig,
    ) -> ResultSet:
        async with self.sessions.acquire(proxy) as session:
            try:
                return await asyncio.wait_for(
                    self.pipeline.run(session.page, profile, config),
                    timeout=self.attempt_timeout,
                )
            except asyncio.TimeoutError as e:
                error = AttemptTimeoutError(
                    f"Attempt {attempt.index + 1} exceeded {self.attempt_timeout}s"
                )
                attempt.fail(error, await self._capture(session.page, profile, attempt, error, config))
                raise error from e
            except Exception as e:
                attempt.fail(e, await self._capture(session.page, profile, attempt, e, config))
                raise

    async def _capture(
        self,
        page: PageAccessor,
        profile: SiteProfile,
        attempt: Attempt,
        error: BaseException,
        config: ScrapeConfig,
    ) -> List[str]:
        if config.capture == CaptureMode.OFF:
            return []
        return await capture_failure(
            page,
            profile.name,
            attempt.index + 1,
            error,
            os.fspath(config.artifacts_dir),
            proxy_label=attempt.proxy_label,
            elapsed=attempt.elapsed,
        )

    def _log_failure(self, profile: SiteProfile, attempt: Attempt, error: BaseException) -> None:
        if isinstance(error, ScrapeError):
            logger.warning(
                f"[{profile.name}] Attempt {attempt.index + 1} failed "
                f"({error.signal.value}, {attempt.error_kind}): {error}"
            )
        else:
            logger.exception(
                f"[{profile.name}] Attempt {attempt.index + 1} failed unexpectedly: {error}"
            )

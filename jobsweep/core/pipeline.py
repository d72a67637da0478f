"""
One attempt's worth of scraping on an already provisioned page:

    warm-up -> start url -> consent -> gate loop -> per results page:
    wait -> materialize -> extract -> canonicalize + dedupe -> advance

Every failure is raised as a ScrapeError for the orchestrator to handle.
"""

import logging
import os
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from jobsweep.adapters.base import SiteProfile
from jobsweep.browser.page import PageAccessor
from jobsweep.config.settings import settings
from jobsweep.core.canonical import Canonicalizer
from jobsweep.core.clock import Clock, SystemClock
from jobsweep.core.consent import ConsentHandler
from jobsweep.core.dedupe import dedupe
from jobsweep.core.diagnostics import CaptureMode, capture_snapshot
from jobsweep.core.errors import NavigationError, PersistentGateError, ResultsNotReadyError
from jobsweep.core.evasion import EvasionController
from jobsweep.core.extract import Extractor
from jobsweep.core.gate import GateDetector
from jobsweep.core.materialize import ResultMaterializer, Strategy
from jobsweep.core.models import GateState, ProxyCredential, ResultSet
from jobsweep.core.retry import retry_async

logger = logging.getLogger(__name__)


@dataclass
class ScrapeConfig:
    """
    Per-invocation input. Budgets left as None fall back to the site profile,
    then to settings.
    """

    start_url: Optional[str] = None
    query: str = ""
    location: str = ""
    max_attempts: int = settings.MAX_ATTEMPTS
    max_pages: int = settings.MAX_PAGES
    scroll_rounds: Optional[int] = None
    gate_rounds: Optional[int] = None
    proxies: List[ProxyCredential] = field(default_factory=list)
    seed: Optional[int] = None
    output_path: Optional[Union[str, Path]] = None
    artifacts_dir: Union[str, Path] = settings.ARTIFACTS_DIR
    capture: str = settings.CAPTURE_DIAGNOSTICS

    def resolve_start_url(self, profile: SiteProfile) -> str:
        if self.start_url:
            return self.start_url
        if not self.query:
            raise ValueError(f"Either start_url or query is required for '{profile.name}'")
        return profile.build_start_url(self.query, self.location)

    def resolve_scroll_rounds(self, profile: SiteProfile) -> int:
        return self.scroll_rounds or profile.scroll_rounds or settings.SCROLL_ROUNDS

    def resolve_gate_rounds(self, profile: SiteProfile) -> int:
        return self.gate_rounds or profile.gate_rounds or settings.GATE_ROUNDS


class ScrapePipeline:
    def __init__(
        self,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        extractor: Optional[Extractor] = None,
        evasion_rounds: int = settings.EVASION_ROUNDS,
        results_timeout: int = settings.RESULTS_TIMEOUT,
        navigation_retries: int = settings.NAVIGATION_RETRIES,
    ):
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random()
        self.extractor = extractor or Extractor()
        self.evasion_rounds = evasion_rounds
        self.results_timeout = results_timeout
        self.navigation_retries = navigation_retries

    async def run(
        self, page: PageAccessor, profile: SiteProfile, config: ScrapeConfig
    ) -> ResultSet:
        start_url = config.resolve_start_url(profile)
        consent = ConsentHandler(
            profile.consent_locators or None,
            press_escape=profile.press_escape,
            clock=self.clock,
            rng=self.rng,
        )
        detector = GateDetector(
            profile.results_landmark, profile.challenge_locators, profile.gate_phrases
        )
        evasion = EvasionController(rng=self.rng, clock=self.clock)
        materializer = ResultMaterializer(
            profile.result_marker,
            container=profile.results_container,
            load_more_locator=profile.load_more_locator,
            next_locator=profile.next_locator,
            clock=self.clock,
            rng=self.rng,
        )
        canonicalizer = Canonicalizer(profile.canonical_rules)
        full_capture = config.capture == CaptureMode.FULL
        artifacts_dir = os.fspath(config.artifacts_dir)

        if profile.home_url:
            logger.info(f"Warming up on {profile.home_url}")
            await self._navigate(page, profile.home_url)
            await consent.dismiss(page)
            await evasion.attempt_evasion(page, 1, reload=False)

        logger.info(f"Navigating to {start_url}")
        await self._navigate(page, start_url)
        await consent.dismiss(page)
        await self._clear_gate(page, detector, evasion, consent, config.resolve_gate_rounds(profile))

        if full_capture:
            await capture_snapshot(page, profile.name, "before", artifacts_dir)

        results = ResultSet()
        scroll_rounds = config.resolve_scroll_rounds(profile)
        for page_number in range(1, config.max_pages + 1):
            await self._wait_for_results(page, profile)

            if profile.scroll_each_page and profile.strategy is not Strategy.SCROLL:
                await materializer.materialize(page, Strategy.SCROLL, scroll_rounds)
            budget = scroll_rounds if profile.strategy is Strategy.SCROLL else config.max_pages
            await materializer.materialize(page, profile.strategy, budget)

            records = await self.extractor.extract(page, profile.field_map)
            before = len(results)
            dedupe(records, canonicalizer, into=results)
            added = len(results) - before
            logger.info(
                f"[{profile.name}] Page {page_number}: {len(records)} extracted, "
                f"{added} new, {len(results)} total"
            )

            if full_capture:
                await capture_snapshot(
                    page, profile.name, f"page-{page_number}", artifacts_dir, html=page_number == 1
                )

            if added == 0:
                logger.info("No new jobs found, stopping pagination")
                break
            if profile.strategy is not Strategy.PAGINATED or page_number >= config.max_pages:
                break
            if not await materializer.advance(page):
                break
            await consent.dismiss(page)
            await self._clear_gate(
                page, detector, evasion, consent, config.resolve_gate_rounds(profile)
            )

        if full_capture:
            await capture_snapshot(page, profile.name, "after", artifacts_dir)
        return results

    async def _navigate(self, page: PageAccessor, url: str) -> None:
        await retry_async(
            lambda: page.navigate(url),
            tries=self.navigation_retries,
            retry_on=(NavigationError,),
            clock=self.clock,
            rng=self.rng,
            label=f"navigation to {url}",
        )

    async def _clear_gate(
        self,
        page: PageAccessor,
        detector: GateDetector,
        evasion: EvasionController,
        consent: ConsentHandler,
        rounds: int,
    ) -> None:
        for round_number in range(1, rounds + 1):
            if await detector.check(page) is GateState.CLEAR:
                return
            logger.warning(f"Gate present, evasion round {round_number}/{rounds}")
            await evasion.attempt_evasion(page, self.evasion_rounds, reload=True)
            await consent.dismiss(page)

        if await detector.check(page) is GateState.GATED:
            raise PersistentGateError(f"Still gated after {rounds} evasion rounds at {page.url}")

    async def _wait_for_results(self, page: PageAccessor, profile: SiteProfile) -> None:
        deadline = self.clock.monotonic() + self.results_timeout / 1000
        while await page.count(profile.results_landmark) == 0:
            if self.clock.monotonic() >= deadline:
                raise ResultsNotReadyError(
                    f"Results did not render within {self.results_timeout}ms at {page.url}"
                )
            await self.clock.sleep(0.4)

import json
import logging
import os
import random
import tempfile
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from jobsweep.adapters import google, indeed, jobbank, linkedin
from jobsweep.adapters.base import SiteProfile
from jobsweep.browser.proxy import ProxyPool, get_proxy_pool
from jobsweep.browser.session import PlaywrightSessionProvider, SessionProvider
from jobsweep.config.settings import settings
from jobsweep.core.clock import Clock, SystemClock
from jobsweep.core.models import JobRecord, ScrapeResult
from jobsweep.core.orchestrator import RetryOrchestrator
from jobsweep.core.pipeline import ScrapeConfig, ScrapePipeline

logger = logging.getLogger(__name__)

PROFILES: Dict[str, SiteProfile] = {
    "indeed": indeed.PROFILE,
    "google": google.PROFILE,
    "linkedin": linkedin.PROFILE,
    "jobbank": jobbank.PROFILE,
}


def get_profile(profile_or_name: Union[str, SiteProfile]) -> SiteProfile:
    if isinstance(profile_or_name, SiteProfile):
        return profile_or_name
    profile = PROFILES.get(profile_or_name.lower())
    if not profile:
        raise ValueError(
            f"Site '{profile_or_name}' not supported. Available sites: {list(PROFILES.keys())}"
        )
    return profile


def build_pool(profile: SiteProfile, config: ScrapeConfig, rng: random.Random) -> ProxyPool:
    """Explicit config proxies win over the PROXY_PROVIDER from settings."""
    entries = config.proxies or get_proxy_pool().entries
    return ProxyPool(
        entries, default_country=profile.proxy_country or settings.PROXY_COUNTRY, rng=rng
    )


async def run_scrape(
    profile_or_name: Union[str, SiteProfile],
    config: Optional[ScrapeConfig] = None,
    sessions: Optional[SessionProvider] = None,
    clock: Optional[Clock] = None,
) -> ScrapeResult:
    """
    Scrape one site end to end. Raises ExhaustedRetries when every attempt fails.
    Results are saved when config.output_path is set.
    """
    profile = get_profile(profile_or_name)
    config = config or ScrapeConfig()
    rng = random.Random(config.seed)
    clock = clock or SystemClock()

    orchestrator = RetryOrchestrator(
        sessions or PlaywrightSessionProvider(),
        pipeline=ScrapePipeline(clock=clock, rng=rng),
        pool=build_pool(profile, config, rng),
        clock=clock,
        rng=rng,
    )

    logger.info(f"Starting scrape for {profile.name}")
    result = await orchestrator.run(profile, config)
    logger.info(
        f"Scraped {len(result.records)} unique jobs from {profile.name} "
        f"in {result.attempts_used} attempt(s)"
    )

    if config.output_path:
        save_results(result.records, config.output_path)
    return result


def save_results(records: Iterable[JobRecord], path: Union[str, Path]) -> str:
    """
    Write records as a UTF-8 JSON array, atomically (temp file + os.replace).
    """
    path = os.fspath(path)
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    data = [record.to_dict() for record in records]

    tmp_path = ""
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            delete=False,
            dir=directory,
            suffix=".tmp",
            encoding="utf-8",
        ) as tmp:
            json.dump(data, tmp, ensure_ascii=False, indent=2)
            tmp.flush()
            os.fsync(tmp.fileno())
            tmp_path = tmp.name
        os.replace(tmp_path, path)
    finally:
        if tmp_path and os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError:
                pass

    logger.info(f"Saved {len(data)} jobs -> {path}")
    return path

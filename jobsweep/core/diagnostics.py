"""
Diagnostic artifact capture.

On a failed attempt the orchestrator captures, while the page is still open,
a full-page screenshot, the raw HTML and a JSON FailureBundle, all keyed by
the 1-based attempt number. Capture is best effort and never raises.
"""

import json
import logging
import os
import time
from dataclasses import asdict, dataclass, field
from typing import List, Optional

from jobsweep.browser.page import PageAccessor

logger = logging.getLogger(__name__)

SNIPPET_CHARS = 2000


class CaptureMode:
    OFF = "off"  # nothing is written
    FAILURES = "failures"  # failed attempts only
    FULL = "full"  # + before/after and per-page screenshots


@dataclass
class FailureBundle:
    site: str
    attempt: int
    reason: str
    error_kind: str
    page_url: str = ""
    page_title: str = ""
    page_text_snippet: str = ""
    proxy_label: Optional[str] = None
    elapsed: float = 0.0
    artifacts: List[str] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return asdict(self)


async def capture_failure(
    page: Optional[PageAccessor],
    site: str,
    attempt_number: int,
    error: BaseException,
    artifacts_dir: str,
    proxy_label: Optional[str] = None,
    elapsed: float = 0.0,
) -> List[str]:
    """
    Write <site>-failure-attempt-<n>.png, <site>-error-attempt-<n>.html and
    <site>-failure-attempt-<n>.json. Returns the paths actually written.
    """
    bundle = FailureBundle(
        site=site,
        attempt=attempt_number,
        reason=str(error),
        error_kind=type(error).__name__,
        proxy_label=proxy_label,
        elapsed=round(elapsed, 3),
    )

    try:
        os.makedirs(artifacts_dir, exist_ok=True)
    except OSError as e:
        logger.debug(f"Cannot create artifacts dir {artifacts_dir}: {e}")
        return []

    if page is not None:
        try:
            bundle.page_url = page.url or ""
        except Exception:
            pass
        try:
            bundle.page_title = await page.title() or ""
        except Exception:
            pass
        try:
            bundle.page_text_snippet = (await page.read_text("body") or "")[:SNIPPET_CHARS]
        except Exception:
            pass

        png = os.path.join(artifacts_dir, f"{site}-failure-attempt-{attempt_number}.png")
        try:
            await page.screenshot(png)
            bundle.artifacts.append(png)
        except Exception as e:
            logger.debug(f"Failure screenshot not captured: {e}")

        html = os.path.join(artifacts_dir, f"{site}-error-attempt-{attempt_number}.html")
        try:
            content = await page.content()
            with open(html, "w", encoding="utf-8") as f:
                f.write(content)
            bundle.artifacts.append(html)
        except Exception as e:
            logger.debug(f"HTML dump not captured: {e}")

    path = save_failure_bundle(bundle, artifacts_dir)
    if path:
        bundle.artifacts.append(path)

    if bundle.artifacts:
        logger.info(f"Saved {len(bundle.artifacts)} diagnostic artifact(s) for attempt {attempt_number}")
    return list(bundle.artifacts)


def save_failure_bundle(bundle: FailureBundle, artifacts_dir: str) -> str:
    """Save bundle to JSON. Returns file path, or '' on failure."""
    path = os.path.join(artifacts_dir, f"{bundle.site}-failure-attempt-{bundle.attempt}.json")
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(bundle.to_dict(), f, ensure_ascii=False, indent=2, default=str)
        return path
    except Exception as e:
        logger.debug(f"Failed to save failure bundle: {e}")
        return ""


async def capture_snapshot(
    page: PageAccessor, site: str, label: str, artifacts_dir: str, html: bool = False
) -> List[str]:
    """Full-mode screenshot <site>-<label>.png, optionally with the HTML. Never raises."""
    written: List[str] = []
    try:
        os.makedirs(artifacts_dir, exist_ok=True)
        png = os.path.join(artifacts_dir, f"{site}-{label}.png")
        await page.screenshot(png)
        written.append(png)
        if html:
            dump = os.path.join(artifacts_dir, f"{site}-{label}.html")
            content = await page.content()
            with open(dump, "w", encoding="utf-8") as f:
                f.write(content)
            written.append(dump)
    except Exception as e:
        logger.debug(f"Snapshot '{label}' not captured: {e}")
    return written

"""
Human-like pointer movement for PageAccessor pages.

Provides Bézier-curve cursor paths and smooth pointer traversal with jittered
per-step timing. All randomness comes from the caller's random.Random.
"""

import logging
import random
from typing import List, Tuple

from jobsweep.browser.page import PageAccessor
from jobsweep.core.clock import Clock

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


def _bezier_point(t: float, p0: Point, p1: Point, p2: Point, p3: Point) -> Point:
    """Evaluate a cubic Bézier curve at parameter *t* in [0, 1]."""
    u = 1 - t
    x = u**3 * p0[0] + 3 * u**2 * t * p1[0] + 3 * u * t**2 * p2[0] + t**3 * p3[0]
    y = u**3 * p0[1] + 3 * u**2 * t * p1[1] + 3 * u * t**2 * p2[1] + t**3 * p3[1]
    return (x, y)


def random_cursor_path(
    start: Point,
    end: Point,
    rng: random.Random,
    steps: int = 25,
) -> List[Point]:
    """
    Natural-looking path between *start* and *end*: a cubic Bézier curve with
    two randomly offset control points.

    Returns ``steps + 1`` waypoints, the first being *start* and the last *end*.
    """
    dx = end[0] - start[0]
    dy = end[1] - start[1]

    cp1 = (
        start[0] + dx * rng.uniform(0.2, 0.4) + rng.uniform(-80, 80),
        start[1] + dy * rng.uniform(0.2, 0.4) + rng.uniform(-80, 80),
    )
    cp2 = (
        start[0] + dx * rng.uniform(0.6, 0.8) + rng.uniform(-80, 80),
        start[1] + dy * rng.uniform(0.6, 0.8) + rng.uniform(-80, 80),
    )

    return [_bezier_point(i / steps, start, cp1, cp2, end) for i in range(steps + 1)]


def random_point_in(
    region: Tuple[float, float, float, float], rng: random.Random
) -> Point:
    """Uniform point inside an (x0, y0, x1, y1) region."""
    x0, y0, x1, y1 = region
    return (rng.uniform(x0, x1), rng.uniform(y0, y1))


def clamp_region(
    region: Tuple[float, float, float, float], width: int, height: int, margin: int = 20
) -> Tuple[float, float, float, float]:
    """Intersect region with the viewport, keeping a margin from the edges."""
    x0, y0, x1, y1 = region
    x1 = min(x1, width - margin)
    y1 = min(y1, height - margin)
    x0 = min(max(x0, margin), x1)
    y0 = min(max(y0, margin), y1)
    return (x0, y0, x1, y1)


async def glide_pointer(
    page: PageAccessor,
    start: Point,
    end: Point,
    rng: random.Random,
    clock: Clock,
) -> Point:
    """
    Move the pointer from *start* to *end* along a random curve, pausing a few
    milliseconds between waypoints to mimic hand jitter. Returns *end*.
    """
    path = random_cursor_path(start, end, rng, steps=rng.randint(10, 18))

    logger.debug(
        "Moving pointer from (%.0f, %.0f) to (%.0f, %.0f) in %d steps",
        start[0],
        start[1],
        end[0],
        end[1],
        len(path),
    )

    for x, y in path[1:]:
        await page.move_pointer(x, y)
        await clock.sleep(rng.uniform(0.005, 0.025))

    return end

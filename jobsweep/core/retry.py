import logging
import random
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar

from jobsweep.config.settings import settings
from jobsweep.core.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(
    retries: int,
    base_delay: float = settings.RETRY_BASE_DELAY,
    max_delay: float = settings.RETRY_MAX_DELAY,
    rng: Optional[random.Random] = None,
) -> float:
    """
    Exponential backoff capped at max_delay, plus up to 50% jitter.
    """
    rng = rng or random.Random()
    delay = min(base_delay * (2**retries), max_delay)
    return delay + rng.uniform(0, 0.5 * delay)


async def retry_async(
    func: Callable[[], Awaitable[T]],
    *,
    tries: int = settings.NAVIGATION_RETRIES,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    base_delay: float = settings.RETRY_BASE_DELAY,
    max_delay: float = settings.RETRY_MAX_DELAY,
    clock: Optional[Clock] = None,
    rng: Optional[random.Random] = None,
    label: str = "",
) -> Any:
    """
    Await func() up to `tries` times, sleeping with jittered exponential backoff
    between failures. The last error is re-raised.
    """
    clock = clock or SystemClock()
    label = label or getattr(func, "__name__", "call")
    retries = 0
    while True:
        try:
            return await func()
        except retry_on as e:
            retries += 1
            if retries >= tries:
                logger.error(f"Max retries reached for {label}. Error: {e}")
                raise

            sleep_time = backoff_delay(retries - 1, base_delay, max_delay, rng)
            logger.warning(
                f"Try {retries}/{tries} failed for {label}. "
                f"Retrying in {sleep_time:.2f}s. Error: {e}"
            )
            await clock.sleep(sleep_time)

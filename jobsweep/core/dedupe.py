import dataclasses
import logging
from typing import Callable, Iterable, Optional

from jobsweep.core.models import JobRecord, ResultSet

logger = logging.getLogger(__name__)


def dedupe(
    records: Iterable[JobRecord],
    canonicalize: Callable[[str], str],
    into: Optional[ResultSet] = None,
) -> ResultSet:
    """
    Keep the first record per canonical url, in first-seen order.

    Kept records have their url rewritten to the canonical key; every other
    field is kept as extracted. Later duplicates are discarded even when they
    carry more fields. Records whose url canonicalizes to "" are dropped.
    """
    result = into if into is not None else ResultSet()
    seen = dropped = 0
    for record in records:
        seen += 1
        key = canonicalize(record.url)
        if not key or key in result:
            dropped += 1
            continue
        result.add(dataclasses.replace(record, url=key))

    if dropped:
        logger.debug(f"Dropped {dropped}/{seen} duplicate records")
    return result

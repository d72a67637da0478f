import logging
from typing import Optional

from fake_useragent import UserAgent

logger = logging.getLogger(__name__)

# Used when fake_useragent cannot load its data file
FALLBACK_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


class UserAgentProvider:
    """
    Rotates desktop Chrome user agents, one per session.
    Only Chrome strings are served because every session runs on Chromium.
    """

    _ua: Optional[UserAgent] = None

    @classmethod
    def initialize(cls):
        if cls._ua is None:
            try:
                cls._ua = UserAgent(
                    browsers=["Chrome"],
                    os=["Windows", "Mac OS X"],
                    platforms=["desktop"],
                    fallback=FALLBACK_UA,
                )
            except Exception as e:
                logger.warning(
                    f"Failed to initialize fake_useragent, using fallback: {e}"
                )

    @classmethod
    def get_random(cls) -> str:
        """
        Return a random user-agent string, or the fallback if unavailable.
        """
        cls.initialize()
        if cls._ua:
            return cls._ua.random
        return FALLBACK_UA

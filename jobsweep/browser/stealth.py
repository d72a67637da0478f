import json
import logging
from typing import List

from playwright.async_api import BrowserContext

logger = logging.getLogger(__name__)


def _platform_for(user_agent: str) -> str:
    if "Windows" in user_agent:
        return "Win32"
    if "Mac" in user_agent:
        return "MacIntel"
    return "Linux x86_64"


def _languages_for(locale: str) -> List[str]:
    language = locale.split("-")[0]
    return [locale, language] if language != locale else [locale]


async def apply_stealth_scripts(context: BrowserContext, user_agent: str, locale: str):
    """
    Install init scripts that mask the most common automation tells.
    Navigator values are derived from the session's user agent and locale so
    they stay consistent with the request headers.
    """
    platform = json.dumps(_platform_for(user_agent))
    languages = json.dumps(_languages_for(locale))

    await context.add_init_script(f"""
        Object.defineProperty(navigator, 'webdriver', {{ get: () => undefined }});
        Object.defineProperty(navigator, 'platform', {{ get: () => {platform} }});
        Object.defineProperty(navigator, 'languages', {{ get: () => {languages} }});

        if (!window.chrome) {{
            window.chrome = {{ runtime: {{}} }};
        }}

        const originalQuery = window.navigator.permissions && window.navigator.permissions.query;
        if (originalQuery) {{
            window.navigator.permissions.query = (parameters) => (
                parameters.name === 'notifications'
                    ? Promise.resolve({{ state: Notification.permission }})
                    : originalQuery(parameters)
            );
        }}
    """)

    logger.debug(f"Stealth scripts applied (platform={platform}, languages={languages})")

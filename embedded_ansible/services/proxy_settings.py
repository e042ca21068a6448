from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Whole lines, newline included, so repeated runs leave no blank lines behind.
PROXY_LINE_RE = re.compile(
    r"^.*AWX_TASK_ENV\['(HTTPS?_PROXY|NO_PROXY)'\].*(?:\n|$)",
    re.MULTILINE,
)


def render_proxy_settings(contents: str, proxy_uri: Optional[str]) -> str:
    new_contents = PROXY_LINE_RE.sub("", contents)

    if proxy_uri:
        if new_contents and not new_contents.endswith("\n"):
            new_contents += "\n"
        new_contents += f"AWX_TASK_ENV['HTTP_PROXY'] = '{proxy_uri}'\n"
        new_contents += f"AWX_TASK_ENV['HTTPS_PROXY'] = '{proxy_uri}'\n"
        new_contents += "AWX_TASK_ENV['NO_PROXY'] = '127.0.0.1'\n"

    return new_contents


def update_proxy_settings(settings_file: Path, proxy_uri: Optional[str]) -> None:
    """
    Rewrite Tower's settings.py so its task environment uses `proxy_uri`.

    Previous proxy lines are always dropped; new ones are added only when a
    proxy is configured.
    """
    settings_file = Path(settings_file)
    current = settings_file.read_text(encoding="utf-8")
    new_contents = render_proxy_settings(current, proxy_uri)

    if new_contents == current:
        logger.debug("Proxy settings in %s already up to date", settings_file)
        return

    settings_file.write_text(new_contents, encoding="utf-8")
    logger.info(
        "Updated proxy settings in %s (%s)",
        settings_file,
        "proxy configured" if proxy_uri else "no proxy",
    )

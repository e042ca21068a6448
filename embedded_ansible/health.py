# embedded_ansible/health.py
from __future__ import annotations

import logging

import requests

logger = logging.getLogger(__name__)


class LivenessProbe:
    """
    Reachability check for the local Tower web service.

    check() never raises: a refused connection is the normal answer while
    Tower is still coming up.
    """

    def __init__(self, host: str, port: int, path: str = "/api/v1/ping/", timeout: float = 5.0):
        self.host = host
        self.port = port
        self.path = path if path.startswith("/") else f"/{path}"
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}{self.path}"

    def check(self) -> bool:
        try:
            resp = requests.get(self.url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.debug("Liveness check against %s failed: %s", self.url, exc)
            return False

        if 200 <= resp.status_code < 300:
            return True

        logger.debug("Liveness check against %s returned HTTP %s", self.url, resp.status_code)
        return False

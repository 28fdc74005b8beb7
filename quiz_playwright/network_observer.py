from __future__ import annotations

"""Capture of the quiz's recommendation submissions."""

import json
import logging
import os
from typing import Any, List, Optional

from playwright.async_api import Page, Request, Route

logger = logging.getLogger(__name__)

MOCK_RESPONSE = {"success": True, "message": "Mocked response"}


class PayloadObserver:
    """Records every POST to the capture endpoint as ``payload_<n>.json``.

    The endpoint is answered with a canned response so the real backend is
    never hit. Numbering continues from ``start_count`` so payloads from a
    resumed run do not overwrite earlier ones. Once ``max_artifacts`` is
    reached further submissions are still mocked but no longer recorded.
    """

    def __init__(
        self,
        payload_dir: str,
        capture_endpoint: str,
        start_count: int = 0,
        max_artifacts: int | None = None,
    ) -> None:
        self._payload_dir = payload_dir
        self._endpoint = capture_endpoint
        self._count = start_count
        self._max_artifacts = max_artifacts
        self.saved_files: List[str] = []
        os.makedirs(self._payload_dir, exist_ok=True)

    def artifacts_captured(self) -> int:
        return self._count

    def matches(self, url: str) -> bool:
        return self._endpoint in url

    async def attach(self, page: Page) -> None:
        await page.route(f"**{self._endpoint}", self._fulfil)
        page.on("request", self._on_request)
        logger.info("Capturing submissions to %s into %s", self._endpoint, self._payload_dir)

    # ------------------------------------------------------------------
    async def _fulfil(self, route: Route) -> None:
        await route.fulfill(status=200, content_type="application/json", body=json.dumps(MOCK_RESPONSE))

    def _on_request(self, request: Request) -> None:
        if not self.matches(request.url):
            return
        self.record(request.post_data)

    def record(self, payload: Optional[str]) -> Optional[str]:
        """Store one submission body; returns the file written, if any."""
        if not payload:
            return None
        if self._max_artifacts is not None and self._count >= self._max_artifacts:
            logger.debug("Artifact cap reached, ignoring submission")
            return None
        self._count += 1
        file_name = os.path.join(self._payload_dir, f"payload_{self._count}.json")
        try:
            body: Any = json.loads(payload)
        except json.JSONDecodeError:
            logger.warning("Payload #%d is not JSON, storing it verbatim", self._count)
            body = {"raw": payload}
        with open(file_name, "w", encoding="utf-8") as fh:
            json.dump(body, fh, indent=2)
        self.saved_files.append(file_name)
        logger.info("Captured payload #%d -> %s", self._count, file_name)
        return file_name

from __future__ import annotations

"""Playwright implementation of the explorer's PageDriver."""

import asyncio
import logging
from typing import Awaitable, Callable, List, TypeVar

from playwright.async_api import ElementHandle, Page
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from quiz_explorer.candidates import Candidate, CandidateKind, ShapeDescriptor
from quiz_explorer.errors import TransientDriverFailure
from quiz_explorer.page_identity import page_id_from_url

from .page_rules import (
    CONSENT_CHECKBOX_NAME,
    COOKIE_BUTTON_LABEL,
    NAVIGATION_BUTTON_SELECTOR,
    OPTION_SELECTOR,
    SELECTED_CHIP_CLOSE_SELECTOR,
    SELECTED_OPTION_SELECTOR,
    SUBMIT_BUTTON_SELECTOR,
    VISIBLE_INPUT_SELECTOR,
    YES_NO_SELECTOR,
    PageRule,
    is_text_field,
    rule_for,
    shape_for,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Keeps the post-submission loading page from pushing the app on to the
# results screen, so that going back returns to the e-mail page.
HISTORY_GUARD_SCRIPT = """
(() => {
  const originalPushState = history.pushState;
  const originalReplaceState = history.replaceState;
  let allowGoBack = false;
  history.pushState = function (...args) {
    if (!allowGoBack && location.pathname === "/loading") return;
    return originalPushState.apply(history, args);
  };
  history.replaceState = function (...args) {
    if (!allowGoBack && location.pathname === "/loading") return;
    return originalReplaceState.apply(history, args);
  };
  window.addEventListener("popstate", () => {
    allowGoBack = true;
    setTimeout(() => { allowGoBack = false; }, 100);
  });
})();
"""


class PlaywrightQuizDriver:
    """Drives the quiz in a single Playwright page."""

    def __init__(
        self,
        page: Page,
        start_url: str,
        navigation_timeout_ms: int = 3000,
        action_delay_ms: int = 200,
        retry_attempts: int = 3,
    ) -> None:
        self._page = page
        self._start_url = start_url
        self._navigation_timeout_ms = navigation_timeout_ms
        self._action_delay_ms = action_delay_ms
        self._retry_attempts = retry_attempts

    async def install_history_guard(self) -> None:
        await self._page.add_init_script(HISTORY_GUARD_SCRIPT)

    # ------------------------------------------------------------------
    # PageDriver --------------------------------------------------------

    async def current_page_id(self) -> str:
        return page_id_from_url(self._page.url)

    async def probe_shape(self) -> ShapeDescriptor:
        page_id = await self.current_page_id()
        options = await self._options()
        inputs = await self._text_inputs()
        shape = shape_for(page_id, len(options), len(inputs))
        logger.debug("Probed %r: %s (%d options, %d inputs)", page_id, shape.kind.value, len(options), len(inputs))
        return shape

    async def apply_candidate(self, candidate: Candidate) -> None:
        page_id = await self.current_page_id()
        rule = rule_for(page_id)
        kind = candidate.kind
        if kind in (CandidateKind.OPTION_SET, CandidateKind.PAIR):
            await self._retry(f"select {candidate.describe()}", lambda: self._select_options(candidate.indices))
        elif kind in (CandidateKind.TEXT, CandidateKind.NUMBER):
            await self._retry(f"fill {candidate.value!r}", lambda: self._fill(rule, str(candidate.value)))
            if rule is not None and rule.submits:
                await self._retry("submit", self._submit)
        elif kind == CandidateKind.TEXT_SET:
            await self._retry(f"pick {candidate.describe()}", lambda: self._pick_texts(candidate.value or ()))
        elif kind == CandidateKind.PASS:
            if rule is not None and rule.accept_cookies:
                await self._accept_cookies()
        else:
            raise ValueError(f"Unsupported candidate kind: {kind!r}")

    async def navigate_forward(self) -> bool:
        before = await self.current_page_id()
        try:
            button = await self._page.query_selector(NAVIGATION_BUTTON_SELECTOR)
            if button is None or not await button.is_enabled():
                logger.debug("No enabled navigation button on %r", before)
                return False
            logger.info("Clicking '%s' button", ((await button.text_content()) or "").strip())
            await button.click()
            await self._page.wait_for_url(
                lambda url: page_id_from_url(url) != before, timeout=self._navigation_timeout_ms
            )
        except PlaywrightTimeoutError:
            logger.debug("Forward navigation from %r timed out", before)
        except PlaywrightError as exc:
            # e.g. the button was detached by a re-render; counts as no progress
            logger.warning("Forward navigation from %r failed: %s", before, exc)
        return await self.current_page_id() != before

    async def navigate_back(self) -> bool:
        before = await self.current_page_id()
        logger.info("Going back from %r", before)
        try:
            await self._page.go_back(timeout=self._navigation_timeout_ms)
        except PlaywrightTimeoutError:
            logger.debug("Back navigation from %r timed out", before)
        except PlaywrightError as exc:
            logger.warning("Back navigation from %r failed: %s", before, exc)
        await self._pause()
        return await self.current_page_id() != before

    async def navigate_to_root(self) -> None:
        await self._page.goto(self._start_url)
        await self._page.wait_for_load_state("load")

    # ------------------------------------------------------------------
    # Helpers -----------------------------------------------------------

    async def _retry(self, description: str, action: Callable[[], Awaitable[T]]) -> T:
        last_error: Exception | None = None
        for attempt in range(1, self._retry_attempts + 1):
            try:
                return await action()
            except (PlaywrightError, LookupError) as exc:
                last_error = exc
                logger.debug("Attempt %d/%d to %s failed: %s", attempt, self._retry_attempts, description, exc)
                await self._pause()
        raise TransientDriverFailure(
            f"Could not {description} after {self._retry_attempts} attempts: {last_error}",
            attempts=self._retry_attempts,
        )

    async def _pause(self) -> None:
        await asyncio.sleep(self._action_delay_ms / 1000)

    async def _options(self) -> List[ElementHandle]:
        options = await self._page.query_selector_all(OPTION_SELECTOR)
        if options:
            return options
        return await self._page.query_selector_all(YES_NO_SELECTOR)

    async def _select_options(self, indices: tuple) -> None:
        for selected in await self._page.query_selector_all(SELECTED_OPTION_SELECTOR):
            await selected.click()
            await self._pause()
        options = await self._options()
        for index in indices:
            if index >= len(options):
                raise LookupError(f"option {index + 1} not present ({len(options)} on page)")
            await options[index].click()
            await self._pause()

    async def _fill(self, rule: PageRule | None, value: str) -> None:
        if rule is not None and rule.input_selector:
            field = await self._page.query_selector(rule.input_selector)
            if field is None:
                raise LookupError(f"input {rule.input_selector} not present")
            await field.fill(value)
            await self._pause()
            return
        fields = await self._text_inputs()
        if not fields:
            raise LookupError("no text input present")
        for field in fields:
            await field.fill(value)
            await self._pause()

    async def _text_inputs(self) -> List[ElementHandle]:
        """Visible fields that accept typed text; selects, checkboxes and the like are skipped."""
        fields = []
        for field in await self._page.query_selector_all(VISIBLE_INPUT_SELECTOR):
            tag_name = await field.evaluate("el => el.tagName")
            if is_text_field(tag_name, await field.get_attribute("type")):
                fields.append(field)
        return fields

    async def _pick_texts(self, values: tuple) -> None:
        for close_button in await self._page.query_selector_all(SELECTED_CHIP_CLOSE_SELECTOR):
            await close_button.click()
            await self._pause()
        textbox = self._page.get_by_role("textbox")
        for value in values:
            await textbox.click()
            await textbox.fill(value)
            await self._page.get_by_text(value, exact=True).click()
            await self._pause()

    async def _submit(self) -> None:
        checkbox = self._page.get_by_role("img", name=CONSENT_CHECKBOX_NAME)
        if await checkbox.is_visible():
            await checkbox.click()
            await self._pause()
        button = await self._page.query_selector(SUBMIT_BUTTON_SELECTOR)
        if button is None or not await button.is_enabled():
            raise LookupError("submit button not available")
        await button.click()
        try:
            await self._page.wait_for_load_state("networkidle", timeout=self._navigation_timeout_ms)
        except PlaywrightTimeoutError:
            # already clicked; retrying would submit twice
            logger.debug("Network did not settle after submitting")
        await self._pause()
        logger.info("Quiz submitted")

    async def _accept_cookies(self) -> None:
        banner = self._page.get_by_label(COOKIE_BUTTON_LABEL)
        if await banner.is_visible():
            await banner.click()

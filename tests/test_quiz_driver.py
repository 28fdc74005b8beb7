"""
Playwright Quiz Driver Test Suite

Runs the driver against a minimal stand-in for a Playwright page, covering
field detection on pages without a rule and navigation failures.
"""

import asyncio

from playwright.async_api import Error as PlaywrightError

from quiz_explorer.candidates import Candidate, FieldKind, ShapeKind
from quiz_playwright.page_rules import NAVIGATION_BUTTON_SELECTOR, VISIBLE_INPUT_SELECTOR
from quiz_playwright.quiz_driver import PlaywrightQuizDriver


class StubField:
    def __init__(self, tag, input_type=None):
        self.tag = tag
        self.input_type = input_type
        self.value = None

    async def evaluate(self, expression):
        return self.tag.upper()

    async def get_attribute(self, name):
        return self.input_type if name == "type" else None

    async def fill(self, value):
        if self.tag not in ("input", "textarea"):
            raise PlaywrightError("Element is not an <input>, <textarea> or [contenteditable] element")
        self.value = value


class DetachedButton:
    async def is_enabled(self):
        return True

    async def text_content(self):
        return "Next"

    async def click(self):
        raise PlaywrightError("Element is not attached to the DOM")


class StubPage:
    def __init__(self, url, fields=(), button=None, back_error=None):
        self.url = url
        self.fields = list(fields)
        self.button = button
        self.back_error = back_error

    async def query_selector_all(self, selector):
        if selector == VISIBLE_INPUT_SELECTOR:
            return list(self.fields)
        return []

    async def query_selector(self, selector):
        if selector == NAVIGATION_BUTTON_SELECTOR:
            return self.button
        return None

    async def go_back(self, timeout=None):
        if self.back_error is not None:
            raise self.back_error


def make_driver(page):
    return PlaywrightQuizDriver(page, start_url="https://quiz.example.com/", action_delay_ms=0, retry_attempts=2)


class TestUnknownPageFields:
    def test_dropdown_is_not_counted_as_text_input(self):
        page = StubPage("https://quiz.example.com/country", [StubField("select")])
        shape = asyncio.run(make_driver(page).probe_shape())
        assert shape.kind == ShapeKind.PASSTHROUGH

    def test_only_text_fields_are_filled(self):
        text, dropdown, checkbox, notes = (
            StubField("input", "text"),
            StubField("select"),
            StubField("input", "checkbox"),
            StubField("textarea"),
        )
        page = StubPage("https://quiz.example.com/nickname", [text, dropdown, checkbox, notes])
        driver = make_driver(page)

        shape = asyncio.run(driver.probe_shape())
        assert shape.kind == ShapeKind.SCALAR
        assert shape.field_kind == FieldKind.FREE_TEXT

        asyncio.run(driver.apply_candidate(Candidate.text("John Doe")))
        assert text.value == "John Doe"
        assert notes.value == "John Doe"
        assert dropdown.value is None
        assert checkbox.value is None


class TestNavigationFailures:
    def test_detached_button_counts_as_no_progress(self):
        page = StubPage("https://quiz.example.com/concerns", button=DetachedButton())
        assert asyncio.run(make_driver(page).navigate_forward()) is False

    def test_missing_button_counts_as_no_progress(self):
        page = StubPage("https://quiz.example.com/concerns")
        assert asyncio.run(make_driver(page).navigate_forward()) is False

    def test_failed_back_navigation_counts_as_no_progress(self):
        page = StubPage("https://quiz.example.com/height", back_error=PlaywrightError("Target closed"))
        assert asyncio.run(make_driver(page).navigate_back()) is False

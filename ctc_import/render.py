"""Rendering of puzzle pages to PDF with a headless browser."""

from __future__ import annotations

import logging
from typing import NamedTuple, Protocol

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

logger = logging.getLogger(__name__)

RENDER_TIMEOUT_MS = 60_000

# Pre-accepted cookie banner, otherwise it ends up in the PDF
COOKIE_CONSENT = {
    "name": "CookieConsent",
    "value": (
        "{stamp:%270kLHuwNDMwNQd43gONztu/5XvN2fgihE7hST78UmO+hotXNDfgLurQ==%27"
        "%2Cnecessary:true%2Cpreferences:true%2Cstatistics:true%2Cmarketing:true"
        "%2Cver:1%2Cutc:1619256930043%2Cregion:%27se%27}"
    ),
}

AUTHOR_SELECTOR = ".puzzle-author"
TITLE_SELECTOR = ".puzzle-title"


class RenderError(Exception):
    """Raised when a puzzle page cannot be rendered."""

    pass


class RenderedPuzzle(NamedTuple):
    title: str
    pdf: bytes


class PuzzleRenderer(Protocol):
    def render(self, url: str) -> RenderedPuzzle: ...


class PlaywrightRenderer:
    """Renders puzzle pages with headless Chromium.

    The page is considered ready once the author element has text, which
    happens after the puzzle app has started.
    """

    def __init__(self, timeout_ms: int = RENDER_TIMEOUT_MS) -> None:
        self.timeout_ms = timeout_ms

    def render(self, url: str) -> RenderedPuzzle:
        """Load the puzzle page and print it as an A4 PDF.

        Args:
            url: Puzzle page URL.

        Returns:
            The puzzle title and PDF bytes.

        Raises:
            RenderError: If the page does not load or has no title.
        """
        try:
            with sync_playwright() as playwright:
                browser = playwright.chromium.launch()
                try:
                    context = browser.new_context()
                    context.add_cookies([{**COOKIE_CONSENT, "url": url}])
                    page = context.new_page()
                    page.set_default_timeout(self.timeout_ms)

                    page.goto(url, wait_until="domcontentloaded")
                    page.wait_for_function(
                        "sel => !!document.querySelector(sel)?.textContent",
                        arg=AUTHOR_SELECTOR,
                    )

                    title_element = page.wait_for_selector(TITLE_SELECTOR)
                    title = (title_element.text_content() if title_element else "") or ""
                    title = title.strip()
                    if not title:
                        raise RenderError(f"No puzzle title found at {url}")
                    logger.debug("Found puzzle title %r", title)

                    pdf = page.pdf(format="A4")
                finally:
                    browser.close()
        except PlaywrightError as e:
            raise RenderError(f"Failed to render {url}: {e}") from e

        return RenderedPuzzle(title=title, pdf=pdf)

import logging
import re
from typing import Any, List, Optional

from playwright.sync_api import sync_playwright, Browser, BrowserContext, Page
from playwright.sync_api import Locator as PlaywrightLocator
from playwright.sync_api import Error as PlaywrightError

from uiflow.config import RunnerConfig
from uiflow.driver.document import Document, ElementHandle
from uiflow.errors import ActionRejectedError
from uiflow.models.locator import Locator

LOGGER = logging.getLogger("uiflow.playwright")

# State reads run inside polling loops and must not wait themselves (0 means no limit in Playwright)
READ_TIMEOUT_MS = 1


def build_locator(root, locator: Locator) -> PlaywrightLocator:
    """
    Translates a Locator into a Playwright locator rooted at a page (or a parent locator).
    All criteria are intersected; text is applied last as a has-text filter.
    """
    scope = root
    if locator.within is not None:
        scope = build_locator(root, locator.within).nth(locator.within.index)

    parts = []
    if locator.testid:
        parts.append(scope.get_by_test_id(locator.testid))
    if locator.role:
        role_kwargs = {}
        if locator.name is not None:
            role_kwargs["name"] = locator.name
            role_kwargs["exact"] = locator.exact
        parts.append(scope.get_by_role(locator.role, **role_kwargs))
    if locator.css:
        parts.append(scope.locator(locator.css))
    if locator.attribute:
        parts.append(scope.locator(locator.attribute_selector))
    if locator.label:
        parts.append(scope.get_by_label(locator.label, exact=locator.exact))
    if locator.placeholder:
        parts.append(scope.get_by_placeholder(locator.placeholder, exact=locator.exact))

    if not parts:
        # text only
        return scope.get_by_text(locator.text, exact=locator.exact)

    result = parts[0]
    for part in parts[1:]:
        result = result.and_(part)
    if locator.text:
        if locator.exact:
            result = result.filter(has_text=re.compile(rf"^\s*{re.escape(locator.text)}\s*$"))
        else:
            result = result.filter(has_text=locator.text)
    return result


class PlaywrightElement(ElementHandle):
    def __init__(self, locator: PlaywrightLocator, action_timeout_ms: int):
        self._locator = locator
        self._timeout = action_timeout_ms

    def _apply(self, action: str, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except PlaywrightError as e:
            # Playwright messages carry a multi-line call log; keep the first line
            reason = str(e).strip().splitlines()[0] if str(e).strip() else e.__class__.__name__
            raise ActionRejectedError(action, reason) from e

    def is_visible(self) -> bool:
        try:
            return self._locator.is_visible()
        except PlaywrightError:
            return False

    def is_enabled(self) -> bool:
        try:
            return self._locator.is_enabled(timeout=READ_TIMEOUT_MS)
        except PlaywrightError:
            return False

    def text(self) -> str:
        return self._apply("text", self._locator.text_content, timeout=READ_TIMEOUT_MS) or ""

    def click(self, button: str = "left", click_count: int = 1, force: bool = False) -> None:
        self._apply("click", self._locator.click, button=button, click_count=click_count,
                    force=force, timeout=self._timeout)

    def hover(self, force: bool = False) -> None:
        self._apply("hover", self._locator.hover, force=force, timeout=self._timeout)

    def type(self, text: str) -> None:
        self._apply("type", self._locator.press_sequentially, text, timeout=self._timeout)

    def fill(self, text: str) -> None:
        self._apply("fill", self._locator.fill, text, timeout=self._timeout)

    def press(self, key: str) -> None:
        self._apply("press", self._locator.press, key, timeout=self._timeout)

    def select_option(self, value: str) -> None:
        self._apply("select", self._locator.select_option, value, timeout=self._timeout)

    def check(self, force: bool = False) -> None:
        self._apply("check", self._locator.check, force=force, timeout=self._timeout)

    def set_input_files(self, path: str) -> None:
        self._apply("upload_file", self._locator.set_input_files, path, timeout=self._timeout)


class PlaywrightDocument(Document):
    def __init__(self, context: BrowserContext, page: Page, action_timeout_ms: int):
        self.context = context
        self.page = page
        self._action_timeout = action_timeout_ms
        self._requests = 0
        self.page.on("request", self._on_request)

    def _on_request(self, request) -> None:
        self._requests += 1

    def goto(self, url: str) -> None:
        LOGGER.info("Navigating to %s", url)
        try:
            self.page.goto(url)
        except PlaywrightError as e:
            raise ActionRejectedError("goto", str(e).strip().splitlines()[0]) from e

    def query(self, locator: Locator) -> List[ElementHandle]:
        try:
            items = build_locator(self.page, locator).all()
        except PlaywrightError as e:
            # e.g. the page navigated mid-query; the next poll asks again
            LOGGER.debug("Query %s failed: %s", locator.describe(), e)
            return []
        return [PlaywrightElement(item, self._action_timeout) for item in items]

    def current_url(self) -> str:
        return self.page.url

    @property
    def request_count(self) -> int:
        return self._requests

    def auth_state(self, path: Optional[str] = None) -> Any:
        if path:
            LOGGER.info("Saving state to %s", path)
        try:
            return self.context.storage_state(path=path)
        except PlaywrightError as e:
            raise ActionRejectedError("auth_state", str(e).strip().splitlines()[0]) from e

    def close(self) -> None:
        self.context.close()


class PlaywrightBrowser:
    """
    Owns the Playwright runtime and one browser process.
    Every open_document() call gets its own isolated browser context.
    """

    def __init__(self, config: RunnerConfig):
        self.config = config
        self._playwright = None
        self._browser: Optional[Browser] = None

    def start(self) -> "PlaywrightBrowser":
        launch_args = []
        if self.config.ignore_https_errors:
            launch_args.append('--ignore-certificate-errors')
        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.launch(headless=self.config.headless, args=launch_args)
        return self

    def open_document(self) -> PlaywrightDocument:
        if self._browser is None:
            self.start()
        context_options = {
            "viewport": {"width": self.config.viewport_width, "height": self.config.viewport_height},
        }
        if self.config.ignore_https_errors:
            context_options['ignore_https_errors'] = True
        context = self._browser.new_context(**context_options)
        page = context.new_page()
        return PlaywrightDocument(context, page, self.config.action_timeout_ms)

    def close(self) -> None:
        if self._browser is not None:
            self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    def __enter__(self) -> "PlaywrightBrowser":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.close()

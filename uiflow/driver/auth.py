import logging
from typing import Callable, List, Optional

from uiflow.driver.document import Document, ElementHandle
from uiflow.driver.polling import poll
from uiflow.driver.session import Session
from uiflow.errors import ActionRejectedError, AuthenticationError, WaitTimeoutError
from uiflow.models.dsl import SessionConfig
from uiflow.models.locator import Locator

LOGGER = logging.getLogger("uiflow.auth")


class AuthManager:
    def __init__(self, driver, state_file: Optional[str] = None):
        self.driver = driver
        self.state_file = state_file

    def login(self, config: SessionConfig, document_factory: Callable[[], Document]) -> Session:
        """
        Opens a fresh document, submits the login form and waits for the
        post-login marker. The whole flow shares one login timeout.
        Field locators are tried in order, so generic defaults can be overridden.
        """
        timeout = config.login_timeout_ms or self.driver.config.login_timeout_ms
        clock = self.driver.clock
        started = clock.now_ms()

        def remaining() -> float:
            return max(timeout - (clock.now_ms() - started), 0)

        login_url = config.effective_login_url
        document = document_factory()
        try:
            LOGGER.info("Logging in as '%s' at %s", config.username, login_url)
            document.goto(login_url)

            # An existing SSO cookie can land us straight on the application
            first = self._first_of(document, [config.marker] + config.username_locators, remaining(), "login form")
            if first[0] != 0:
                LOGGER.debug("Filling username")
                first[1].fill(config.username)

                password = self._first_of(document, config.password_locators, remaining(), "password field")[1]
                LOGGER.debug("Filling password")
                password.fill(config.password.get_secret_value())

                submit = self._first_of(document, config.submit_locators, remaining(), "submit button")[1]
                LOGGER.debug("Submitting login form")
                submit.click()

                LOGGER.info("Waiting for %s...", config.marker.describe())
                self._first_of(document, [config.marker], remaining(), "post-login marker")

            auth_state = document.auth_state(self.state_file)
        except (WaitTimeoutError, ActionRejectedError) as e:
            document.close()
            raise AuthenticationError(f"Login failed for '{config.username}' at {login_url}: {e}",
                                      login_url=login_url) from e
        except Exception:
            document.close()
            raise

        LOGGER.info("Logged in as '%s' after %.0fms", config.username, clock.now_ms() - started)
        return Session(base_url=config.base_url, username=config.username,
                       document=document, auth_state=auth_state)

    def _first_of(self, document: Document, locators: List[Locator], timeout_ms: float,
                  description: str) -> tuple:
        """Polls until any of the locators resolves; returns (position, element)."""
        def first_match():
            for position, locator in enumerate(locators):
                element: Optional[ElementHandle] = self.driver.find(document, locator)
                if element is not None:
                    return position, element
            return None

        return poll(first_match, timeout_ms, self.driver.config.poll_interval_ms,
                    self.driver.clock, description=description).value

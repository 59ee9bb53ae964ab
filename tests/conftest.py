import pytest

from uiflow.config import RunnerConfig
from uiflow.driver.driver import InteractionDriver
from uiflow.driver.session import Session
from uiflow.models.dsl import SessionConfig
from uiflow.models.locator import Locator

from fakes import FakeClock, FakeDocument, login_document


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return RunnerConfig(defaultTimeoutMs=5000, pollIntervalMs=100, loginTimeoutMs=10000, baseUrl="http://app.test/")


@pytest.fixture
def document(clock):
    return FakeDocument(clock)


@pytest.fixture
def driver(config, clock):
    return InteractionDriver(config, document_factory=lambda: login_document(clock), clock=clock)


@pytest.fixture
def session(document):
    return Session(base_url="http://app.test/", username="jamal", document=document)


@pytest.fixture
def session_config():
    return SessionConfig(
        base_url="http://app.test/",
        username="jamal",
        password="password",
        marker=Locator(css="button", text="N1"),
    )

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from uiflow.models.locator import Locator


class ElementHandle(ABC):
    """One element of a rendered document. Actions raise on rejection."""

    @abstractmethod
    def is_visible(self) -> bool:
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        pass

    @abstractmethod
    def text(self) -> str:
        pass

    @abstractmethod
    def click(self, button: str = "left", click_count: int = 1, force: bool = False) -> None:
        pass

    @abstractmethod
    def hover(self, force: bool = False) -> None:
        pass

    @abstractmethod
    def type(self, text: str) -> None:
        """Appends keystrokes to the current value."""

    @abstractmethod
    def fill(self, text: str) -> None:
        """Replaces the current value."""

    @abstractmethod
    def press(self, key: str) -> None:
        pass

    @abstractmethod
    def select_option(self, value: str) -> None:
        pass

    @abstractmethod
    def check(self, force: bool = False) -> None:
        pass

    @abstractmethod
    def set_input_files(self, path: str) -> None:
        pass


class Document(ABC):
    """
    A remotely rendered document reachable only through polling queries.
    query() never waits: it returns what is in the tree right now.
    """

    @abstractmethod
    def goto(self, url: str) -> None:
        pass

    @abstractmethod
    def query(self, locator: Locator) -> List[ElementHandle]:
        pass

    @abstractmethod
    def current_url(self) -> str:
        pass

    @property
    @abstractmethod
    def request_count(self) -> int:
        """Number of network requests issued since the document was opened."""

    @abstractmethod
    def auth_state(self, path: Optional[str] = None) -> Any:
        """Opaque authentication state (cookies, storage), optionally saved to path."""

    @abstractmethod
    def close(self) -> None:
        pass

import logging
from typing import Any, Optional
from urllib.parse import urljoin

from uiflow.driver.document import Document
from uiflow.errors import SessionClosedError

LOGGER = logging.getLogger("uiflow.session")


class Session:
    """
    One authenticated browser context. It exclusively owns its document;
    nothing in it is shared with other Sessions.
    """

    def __init__(self, base_url: str, username: str, document: Document, auth_state: Any = None):
        self.base_url = base_url
        self.username = username
        self.auth_state = auth_state
        self._document: Optional[Document] = document

    @property
    def is_open(self) -> bool:
        return self._document is not None

    @property
    def document(self) -> Document:
        if self._document is None:
            raise SessionClosedError(f"Session for '{self.username}' on {self.base_url} is closed")
        return self._document

    def absolute_url(self, url: str) -> str:
        return urljoin(self.base_url, url)

    def close(self) -> None:
        if self._document is None:
            return
        LOGGER.info("Closing session for '%s'", self.username)
        document, self._document = self._document, None
        document.close()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<Session {self.username}@{self.base_url} {state}>"

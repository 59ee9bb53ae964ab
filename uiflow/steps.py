"""Shorthand constructors for Steps, for scenarios written in Python."""
from typing import Optional, Union

from uiflow.models.dsl import Step
from uiflow.models.locator import Locator

Target = Union[Locator, str]


def _loc(target: Target) -> Locator:
    # bare strings are CSS selectors
    return target if isinstance(target, Locator) else Locator(css=target)


def goto(url: str, **kwargs) -> Step:
    return Step(action="goto", value=url, **kwargs)


def click(target: Target, multiple: bool = False, **kwargs) -> Step:
    args = {"multiple": True} if multiple else {}
    return Step(action="click", locator=_loc(target), args=args, **kwargs)


def right_click(target: Target, **kwargs) -> Step:
    return Step(action="right_click", locator=_loc(target), **kwargs)


def hover(target: Target, **kwargs) -> Step:
    return Step(action="hover", locator=_loc(target), **kwargs)


def type_text(target: Target, text: str, **kwargs) -> Step:
    return Step(action="type", locator=_loc(target), value=text, **kwargs)


def fill(target: Target, text: str, **kwargs) -> Step:
    return Step(action="fill", locator=_loc(target), value=text, **kwargs)


def press(target: Target, key: str, **kwargs) -> Step:
    return Step(action="press", locator=_loc(target), value=key, **kwargs)


def upload_file(target: Target, path: str, **kwargs) -> Step:
    return Step(action="upload_file", locator=_loc(target), value=path, **kwargs)


def select_menu_item(menu: str, entry: str, css: str = "li", **kwargs) -> Step:
    """Hovers the menu entry labelled `menu`, then clicks its sub-entry `entry`."""
    return Step(action="select_menu_item", locator=Locator(css=css, text=menu), value=entry, **kwargs)


def wait_for(target: Target, timeout_ms: Optional[int] = None, **kwargs) -> Step:
    return Step(action="wait_for", locator=_loc(target), timeout_ms=timeout_ms, **kwargs)


def assert_visible(target: Target, **kwargs) -> Step:
    return Step(action="assert_visible", locator=_loc(target), **kwargs)


def assert_hidden(target: Target, **kwargs) -> Step:
    return Step(action="assert_hidden", locator=_loc(target), **kwargs)


def assert_text(target: Target, text: str, **kwargs) -> Step:
    return Step(action="assert_text", locator=_loc(target), value=text, **kwargs)


def wait_for_url(fragment: str, **kwargs) -> Step:
    return Step(action="wait_for_url", value=fragment, **kwargs)


def wait_for_requests(count: int, **kwargs) -> Step:
    return Step(action="wait_for_requests", value=str(count), **kwargs)

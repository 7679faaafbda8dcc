from __future__ import annotations

import time
from typing import Callable, TypeVar

T = TypeVar("T")


def wait_until(predicate: Callable[[], T], timeout: float, interval: float = 0.2) -> T:
    """Polls ``predicate`` until truthy; the last result is returned either way."""

    deadline = time.monotonic() + timeout
    result = predicate()
    while not result and time.monotonic() < deadline:
        time.sleep(interval)
        result = predicate()
    return result


def document_ready(driver) -> bool:
    return driver.execute_script("return document.readyState") == "complete"

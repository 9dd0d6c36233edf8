"""Simple span helper for timing external collaborator calls."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator


@contextmanager
def span(name: str) -> Iterator[Dict[str, Any]]:
    """Yield a timing record whose ``ms`` field is filled when the block exits."""

    record: Dict[str, Any] = {"span": name, "ms": None}
    start = time.perf_counter()
    try:
        yield record
    finally:
        record["ms"] = int((time.perf_counter() - start) * 1000)


__all__ = ["span"]

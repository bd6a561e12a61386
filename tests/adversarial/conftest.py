"""
Shared fixtures for adversarial tests.

Provides a barrier-synchronized runner so simulated attackers hit the
services at the same moment.
"""

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pytest


@pytest.fixture
def run_concurrently() -> Callable[[Callable[[], Any], int], list[Any]]:
    """
    Run ``attack`` from ``n`` threads released together.

    Returns each call's result, or the exception it raised.
    """

    def runner(attack: Callable[[], Any], n: int) -> list[Any]:
        barrier = threading.Barrier(n)

        def attempt() -> Any:
            barrier.wait()
            try:
                return attack()
            except Exception as exc:  # noqa: BLE001
                return exc

        with ThreadPoolExecutor(max_workers=n) as executor:
            futures = [executor.submit(attempt) for _ in range(n)]
            return [f.result() for f in futures]

    return runner

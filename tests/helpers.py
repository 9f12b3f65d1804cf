"""Test doubles and polling helpers shared by the checker tests."""

import threading
import time
from typing import Callable, Dict, List, Optional, Tuple, Union

from mass_checker.model.ip_report import IpReport

Outcome = Union[int, IpReport, Exception]


class StubLookupClient:
    """In-memory lookup client.

    ``outcomes`` maps an address to a report count, a ready ``IpReport`` or an
    exception to raise. When ``gate`` is given every lookup blocks until the
    gate is set, which keeps a lookup "in flight" for cancellation tests.
    """

    def __init__(self, outcomes: Optional[Dict[str, Outcome]] = None, gate: Optional[threading.Event] = None):
        self.outcomes = outcomes or {}
        self.gate = gate
        self.calls: List[Tuple[str, float]] = []
        self.started = threading.Event()

    def lookup(self, address: str) -> IpReport:
        self.calls.append((address, time.monotonic()))
        self.started.set()
        if self.gate is not None:
            self.gate.wait(5)
        outcome = self.outcomes.get(address, 0)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, IpReport):
            return outcome
        return IpReport(ip_address=address, total_reports=outcome)

    @property
    def called_addresses(self) -> List[str]:
        return [address for address, _ in self.calls]


def wait_until(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()

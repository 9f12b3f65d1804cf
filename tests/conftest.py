"""Shared fixtures for the checker test suite."""

import os
import tempfile

# Point the runtime directory at a scratch folder before anything under
# mass_checker is imported, so setting.json and the log files land there.
os.environ.setdefault("MASS_CHECKER_HOME", tempfile.mkdtemp(prefix="mass_checker_"))

from typing import List, Optional, Tuple

import pytest

from helpers import StubLookupClient
from mass_checker.checker.batch_verifier import BatchVerifier


@pytest.fixture
def stub_client():
    return StubLookupClient()


@pytest.fixture
def make_verifier():
    """Build verifiers with a short request interval and stop them afterwards."""
    created: List[Tuple[BatchVerifier, StubLookupClient]] = []

    def _make(client: Optional[StubLookupClient] = None, interval: float = 0.01) -> BatchVerifier:
        client = client or StubLookupClient()
        verifier = BatchVerifier(client, interval_seconds=interval)
        created.append((verifier, client))
        return verifier

    yield _make

    for verifier, client in created:
        if client.gate is not None:
            client.gate.set()
        verifier.reset()

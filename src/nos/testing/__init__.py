"""Test utilities for nos applications::

    from nos.testing import TestClient
"""

from nos.testing.client import TestClient, parse_events

__all__ = ["TestClient", "parse_events"]

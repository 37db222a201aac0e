"""Testing infrastructure for the fleet observability addon.

Components:
    fixtures: In-memory resource store and manifest factories

Usage:
    from testing.fixtures.store import FakeResourceStore, make_secret
"""

from __future__ import annotations

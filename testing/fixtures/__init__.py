"""Test doubles and manifest factories.

Modules:
    store: FakeResourceStore, an in-memory ResourceStore
    manifests: Builders for the objects the resolver reads
"""

from __future__ import annotations

"""Test suite for ArtistPulse.

This package contains hermetic tests following the pytest framework.
Tests are structured to mirror the artistpulse/ package hierarchy for
discoverability.

Testing Philosophy:
    - Use pytest-mock for Playwright isolation and synthetic documents
      (tests/fakes.py) for locator, retry and extraction behavior
    - Focus coverage on fallback order, retry counts and failure isolation
    - Avoid external dependencies - no browser, no network, no real delays
"""

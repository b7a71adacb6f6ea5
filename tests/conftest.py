"""Pytest configuration and shared fixtures for the ArtistPulse test suite.

Guarantees:
- No browser and no network: Playwright objects are mocks, pages are
  synthetic ``FakeDocument``/``FakeSession`` instances.
- No waiting: every configured delay is zero in ``mock_config``.
- Isolated state: the ``get_config`` cache is cleared around each test.
"""

from pathlib import Path
from typing import Any, Callable, Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytest_mock import MockerFixture

from config.settings import GlobalConfig
from tests.fakes import FakeNode


@pytest.fixture
def mock_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[GlobalConfig]:
    """Provide an isolated GlobalConfig with zero delays.

    Example:
        def test_something(mock_config: GlobalConfig) -> None:
            assert mock_config.pacing_delay_ms == 0
    """
    from config.settings import get_config

    get_config.cache_clear()

    log_dir = tmp_path / "logs"
    output_dir = tmp_path / "output"
    log_dir.mkdir()
    output_dir.mkdir()

    test_env = {
        "APP_NAME": "ArtistPulse-Test",
        "ENVIRONMENT": "test",
        "DEBUG": "false",
        "HEADLESS": "true",
        "LOG_LEVEL": "DEBUG",
        "LOG_DIR": str(log_dir),
        "LOG_ROTATION": "1 day",
        "LOG_RETENTION": "1 day",
        "OUTPUT_DIR": str(output_dir),
        "TARGET_BASE_URL": "https://test.example.com/artist/",
        "NAVIGATION_TIMEOUT_MS": "5000",
        "SETTLE_DELAY_MS": "0",
        "INSPECTION_PAUSE_MS": "0",
        "ACTIVATION_MAX_ATTEMPTS": "2",
        "ACTIVATION_RETRY_DELAY_MS": "0",
        "POST_ACTIVATION_SETTLE_MS": "0",
        "PACING_DELAY_MS": "0",
    }

    for key, value in test_env.items():
        monkeypatch.setenv(key, value)

    config = get_config()

    yield config

    get_config.cache_clear()


@pytest.fixture
def artist_page_factory(mock_config: GlobalConfig) -> Callable[..., dict[str, FakeNode]]:
    """Factory for synthetic artist pages keyed by locator expression.

    By default every field is served by the primary (first) locator of its
    chain. ``use_fallback`` lists field names to serve from the second
    locator instead, ``missing`` lists fields to leave out entirely, and
    ``city_rows`` controls how many city rows are rendered.
    """

    def _build(
        artist_name: str = "Posted By Test Artist",
        followers: str = "1,234 Followers",
        monthly_listeners: str = "98,765 monthly listeners",
        city_rows: int | None = None,
        use_fallback: set[str] | None = None,
        missing: set[str] | None = None,
        with_button: bool = True,
    ) -> dict[str, FakeNode]:
        cfg = mock_config
        use_fallback = use_fallback or set()
        missing = missing or set()
        rows = cfg.city_count if city_rows is None else city_rows
        nodes: dict[str, FakeNode] = {}

        def put(field: str, chain: list[str], node: FakeNode) -> None:
            if field in missing:
                return
            nodes[chain[1] if field in use_fallback else chain[0]] = node

        if with_button:
            put("button", cfg.activation_locators, FakeNode(text="Audience insights"))
        put("artist_name", cfg.artist_name_locators, FakeNode(text=artist_name))
        put("image_src", cfg.image_locators, FakeNode(attributes={"src": "https://img.example.com/a.jpg"}))
        put("username", cfg.username_locators, FakeNode(text="  @testartist "))
        put("followers", cfg.followers_locators, FakeNode(text=followers))
        put("monthly_listeners", cfg.monthly_listeners_locators, FakeNode(text=monthly_listeners))
        put(
            "social_link",
            cfg.social_link_locators,
            FakeNode(attributes={"href": "https://instagram.com/testartist"}),
        )

        for offset in range(rows):
            index = cfg.city_start_index + offset
            put(
                "city_label",
                [entry.replace("{index}", str(index)) for entry in cfg.city_label_locators],
                FakeNode(text=f"City {offset + 1}"),
            )
            put(
                "city_count",
                [entry.replace("{index}", str(index)) for entry in cfg.city_count_locators],
                FakeNode(text=f"{(offset + 1) * 1000:,} listeners"),
            )

        return nodes

    return _build


def create_playwright_mock() -> tuple[MagicMock, MagicMock, MagicMock, MagicMock, MagicMock]:
    """Build the async_playwright().start() -> chromium -> context -> page chain.

    Returns:
        Tuple of (async_playwright_instance, playwright, browser, context, page).
    """
    page_mock = MagicMock()
    page_mock.goto = AsyncMock(return_value=MagicMock(status=200))
    page_mock.evaluate = AsyncMock(return_value=None)
    page_mock.query_selector = AsyncMock(return_value=None)

    context_mock = MagicMock()
    context_mock.new_page = AsyncMock(return_value=page_mock)
    context_mock.close = AsyncMock()

    browser_mock = MagicMock()
    browser_mock.new_context = AsyncMock(return_value=context_mock)
    browser_mock.close = AsyncMock()
    browser_mock.is_connected = MagicMock(return_value=True)

    playwright_mock = MagicMock()
    playwright_mock.chromium.launch = AsyncMock(return_value=browser_mock)
    playwright_mock.stop = AsyncMock()

    async_playwright_instance = MagicMock()
    async_playwright_instance.start = AsyncMock(return_value=playwright_mock)

    return async_playwright_instance, playwright_mock, browser_mock, context_mock, page_mock


@pytest.fixture
def playwright_mocks(mocker: MockerFixture) -> dict[str, Any]:
    """Patch ``async_playwright`` in the session driver with a mock chain."""
    async_pw, pw_mock, browser_mock, context_mock, page_mock = create_playwright_mock()
    mocker.patch("artistpulse.browser.async_playwright", return_value=async_pw)
    return {
        "playwright": pw_mock,
        "browser": browser_mock,
        "context": context_mock,
        "page": page_mock,
    }


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests requiring full stack",
    )

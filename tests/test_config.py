"""Tests for run configuration, browser configuration and site profiles."""

import os

import pytest
from pydantic import ValidationError

from harvester.browser_config import DEBUG_CONFIG, HEADLESS_CONFIG, BrowserConfig
from harvester.config import CrawlConfig, default_failure_path
from harvester.runner import build_browser_config
from harvester.site_profile import (
    DEFAULT_START_URL,
    TOKOPEDIA_PROFILE,
    SiteProfile,
    get_profile,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every HARVEST_* variable so defaults apply."""
    for name in list(os.environ):
        if name.startswith("HARVEST_"):
            monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestCrawlConfig:
    """Tests for CrawlConfig."""

    def test_defaults(self):
        """Test default configuration values."""
        config = CrawlConfig()

        assert config.url == DEFAULT_START_URL
        assert config.target == 2000
        assert config.delay_ms == 2500
        assert config.jitter_ms == 600
        assert config.max_no_new == 10
        assert config.tries == 4
        assert config.output_path == "tokopedia_laptop.jsonl"
        assert config.failure_path == "tokopedia_laptop.failures.jsonl"
        assert config.browser_type == "firefox"
        assert config.headless is True

    def test_explicit_failure_path(self):
        """Test an explicit failure journal path."""
        config = CrawlConfig(failure_output_path="errors.jsonl")
        assert config.failure_path == "errors.jsonl"

    def test_seconds_conversion(self):
        """Test millisecond to second conversion."""
        config = CrawlConfig(delay_ms=1500, jitter_ms=250)
        assert config.delay_seconds == 1.5
        assert config.jitter_seconds == 0.25

    def test_slow_mo_defaults_with_headful(self):
        """Test that a visible browser gets a default slow_mo."""
        assert CrawlConfig().effective_slow_mo == 0
        assert CrawlConfig(headless=False).effective_slow_mo == 120
        assert CrawlConfig(headless=False, slow_mo=0).effective_slow_mo == 0

    @pytest.mark.parametrize("kwargs", [
        {"target": 0},
        {"max_no_new": 0},
        {"delay_ms": -1},
        {"jitter_ms": -5},
        {"tries": 0},
        {"browser_type": "netscape"},
    ])
    def test_validation(self, kwargs):
        """Test that out-of-range values are rejected."""
        with pytest.raises(ValueError):
            CrawlConfig(**kwargs)

    def test_from_env_defaults(self, clean_env):
        """Test that an empty environment gives the defaults."""
        config = CrawlConfig.from_env()
        assert config == CrawlConfig()

    def test_from_env(self, clean_env):
        """Test reading settings from HARVEST_* variables."""
        clean_env.setenv("HARVEST_TARGET", "50")
        clean_env.setenv("HARVEST_DELAY", "1000")
        clean_env.setenv("HARVEST_MAX_NO_NEW", "4")
        clean_env.setenv("HARVEST_OUT", "data/laptops.jsonl")
        clean_env.setenv("HARVEST_BROWSER", "chromium")
        clean_env.setenv("HARVEST_HEADFUL", "true")
        clean_env.setenv("HARVEST_BLOCK_IMAGES", "no")

        config = CrawlConfig.from_env()

        assert config.target == 50
        assert config.delay_ms == 1000
        assert config.max_no_new == 4
        assert config.output_path == "data/laptops.jsonl"
        assert config.failure_path == os.path.join("data", "laptops.failures.jsonl")
        assert config.browser_type == "chromium"
        assert config.headless is False
        assert config.block_images is False

    def test_from_env_invalid_number(self, clean_env):
        """Test that a non-numeric variable raises ValueError."""
        clean_env.setenv("HARVEST_TARGET", "lots")
        with pytest.raises(ValueError):
            CrawlConfig.from_env()

    def test_to_dict(self):
        """Test dictionary export of the configuration."""
        data = CrawlConfig(target=7).to_dict()
        assert data["target"] == 7
        assert "output_path" in data


class TestDefaultFailurePath:
    """Tests for default_failure_path()."""

    @pytest.mark.parametrize("output, expected", [
        ("items.jsonl", "items.failures.jsonl"),
        ("items", "items.failures.jsonl"),
        (os.path.join("out", "run.v2.jsonl"), os.path.join("out", "run.v2.failures.jsonl")),
    ])
    def test_paths(self, output, expected):
        """Test deriving the failure journal path from the output path."""
        assert default_failure_path(output) == expected


class TestBrowserConfig:
    """Tests for BrowserConfig."""

    def test_defaults(self):
        """Test default browser configuration values."""
        config = BrowserConfig()

        assert config.browser_type == "firefox"
        assert config.headless is True
        assert config.wait_until == "commit"
        assert config.block_resources == ["image", "font", "media"]
        assert config.engine == "firefox"

    def test_firefox_launch_options_omit_chromium_args(self):
        """Test that firefox gets no chromium-only launch args."""
        options = BrowserConfig().launch_options()
        assert options == {"headless": True, "slow_mo": 0}

    def test_chrome_uses_channel_and_args(self):
        """Test that chrome launches chromium on the chrome channel."""
        config = BrowserConfig(browser_type="chrome")
        options = config.launch_options()

        assert config.engine == "chromium"
        assert options["channel"] == "chrome"
        assert "--disable-quic" in options["args"]

    def test_context_options(self):
        """Test locale, timezone, viewport and headers."""
        options = BrowserConfig().context_options()

        assert options["locale"] == "id-ID"
        assert options["timezone_id"] == "Asia/Jakarta"
        assert options["viewport"] == {"width": 1366, "height": 768}
        assert "accept-language" in options["extra_http_headers"]

    def test_invalid_browser_type(self):
        """Test that an unknown browser type is rejected."""
        with pytest.raises(ValidationError):
            BrowserConfig(browser_type="netscape")

    def test_negative_slow_mo(self):
        """Test that a negative slow_mo is rejected."""
        with pytest.raises(ValidationError):
            BrowserConfig(slow_mo=-1)

    def test_presets(self):
        """Test the headless and debug presets."""
        assert HEADLESS_CONFIG.headless is True
        assert DEBUG_CONFIG.headless is False
        assert DEBUG_CONFIG.block_resources == []

    def test_build_from_crawl_config(self):
        """Test translating run options into a browser config."""
        config = CrawlConfig(browser_type="webkit", headless=False, block_images=False)

        browser_config = build_browser_config(config)

        assert browser_config.browser_type == "webkit"
        assert browser_config.headless is False
        assert browser_config.slow_mo == 120
        assert browser_config.block_resources == []

    def test_headful_run_starts_from_debug_preset(self):
        """Test that a visible browser keeps image blocking when it is requested."""
        config = CrawlConfig(browser_type="chrome", headless=False, block_images=True)

        browser_config = build_browser_config(config)

        assert browser_config.headless is DEBUG_CONFIG.headless
        assert browser_config.slow_mo == DEBUG_CONFIG.slow_mo
        assert browser_config.browser_type == "chrome"
        assert browser_config.block_resources == ["image", "font", "media"]

    def test_headless_run_starts_from_headless_preset(self):
        """Test that the default run matches the headless preset."""
        browser_config = build_browser_config(CrawlConfig())

        assert browser_config.headless is True
        assert browser_config.slow_mo == 0
        assert browser_config.block_resources == HEADLESS_CONFIG.block_resources
        assert browser_config.wait_until == HEADLESS_CONFIG.wait_until


class TestSiteProfile:
    """Tests for SiteProfile and the profile registry."""

    def test_get_profile(self):
        """Test lookup by case-insensitive name."""
        assert get_profile("tokopedia") is TOKOPEDIA_PROFILE
        assert get_profile("Tokopedia") is TOKOPEDIA_PROFILE

    def test_unknown_profile(self):
        """Test that an unknown profile name raises KeyError."""
        with pytest.raises(KeyError, match="Unknown site profile"):
            get_profile("amazon")

    def test_host_normalized(self):
        """Test that host and blocked segments are normalized."""
        profile = SiteProfile(
            name="shop",
            host=" WWW.Shop.Example ",
            blocked_first_segments={"Search"},
            item_link_selector="a.item",
            title_selector="h1",
            price_selector=".price",
            description_selector=".desc",
        )
        assert profile.host == "shop.example"
        assert profile.blocked_first_segments == frozenset({"search"})

    def test_profile_is_frozen(self):
        """Test that a profile cannot be modified."""
        with pytest.raises(ValidationError):
            TOKOPEDIA_PROFILE.host = "example.com"

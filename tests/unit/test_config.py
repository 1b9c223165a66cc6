"""Tests for config.py: defaults, validation and the masked repr."""

from __future__ import annotations

import pytest

from rbxupload.config import UploaderConfig


class TestDefaults:
    def test_endpoint_defaults(self):
        cfg = UploaderConfig()
        assert cfg.cloud_base_url == "https://apis.roblox.com"
        assert cfg.session_upload_url == "https://data.roblox.com/data/upload/json"
        assert cfg.csrf_url == "https://auth.roblox.com/v2/logout"
        assert cfg.prefetch_csrf is False

    def test_timing_defaults(self):
        cfg = UploaderConfig()
        assert (cfg.poll_initial_delay, cfg.poll_multiplier, cfg.poll_max_delay) == (0.5, 2.0, 4.0)
        assert cfg.poll_deadline == 60.0
        assert cfg.moderation_retries == 4
        assert cfg.moderation_delay == 5.0
        assert cfg.timeout_seconds == 30.0


class TestValidation:
    @pytest.mark.parametrize("field", ["cloud_base_url", "session_upload_url", "csrf_url"])
    def test_plain_http_to_remote_host_rejected(self, field):
        with pytest.raises(ValueError, match="insecure HTTP"):
            UploaderConfig(**{field: "http://example.com/x"})

    @pytest.mark.parametrize("url", ["http://localhost:8000", "http://127.0.0.1/x", "http://[::1]:9/"])
    def test_plain_http_to_local_host_allowed(self, url):
        assert UploaderConfig(cloud_base_url=url).cloud_base_url == url

    def test_non_http_scheme_rejected(self):
        with pytest.raises(ValueError, match="http"):
            UploaderConfig(csrf_url="ftp://auth.roblox.com/")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"timeout_seconds": 0},
            {"timeout_seconds": -1},
            {"poll_initial_delay": -0.1},
            {"poll_multiplier": 0.5},
            {"poll_max_delay": -1},
            {"poll_deadline": 0},
            {"moderation_retries": -1},
            {"moderation_delay": -5},
        ],
    )
    def test_out_of_range_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            UploaderConfig(**kwargs)


class TestRepr:
    def test_secrets_masked(self):
        text = repr(UploaderConfig(api_key="the-key", cookie="the-cookie"))
        assert "the-key" not in text
        assert "the-cookie" not in text
        assert "api_key='****'" in text
        assert "cookie='****'" in text

    def test_absent_secrets_shown_as_none(self):
        assert "api_key=None" in repr(UploaderConfig())

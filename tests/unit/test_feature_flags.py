import pytest

from marketplace.utils.feature_flags import (
    get_feature_flags,
    is_feature_enabled,
    refresh_feature_flag_cache,
)

_ENV_FLAG_MAPPING = {
    "FEATURE_REALTIME_ENABLED": "realtime_enabled",
    "FEATURE_EMAIL_NOTIFICATIONS_ENABLED": "email_notifications_enabled",
    "FEATURE_SELLER_REGISTRATION_ENABLED": "seller_registration_enabled",
}


def test_get_feature_flags_defaults_true():
    assert get_feature_flags() == {
        "realtime_enabled": True,
        "email_notifications_enabled": True,
        "seller_registration_enabled": True,
    }


@pytest.mark.parametrize("env_name,flag_key", list(_ENV_FLAG_MAPPING.items()))
def test_individual_flag_disabled_via_env(monkeypatch, env_name, flag_key):
    monkeypatch.setenv(env_name, "off")
    refresh_feature_flag_cache()
    assert is_feature_enabled(flag_key) is False


@pytest.mark.parametrize("raw_value", ["maybe", "2"])
def test_invalid_value_falls_back_to_default(monkeypatch, raw_value):
    monkeypatch.setenv("FEATURE_REALTIME_ENABLED", raw_value)
    refresh_feature_flag_cache()
    assert get_feature_flags()["realtime_enabled"] is True


def test_root_reports_flags(client, monkeypatch):
    monkeypatch.setenv("FEATURE_SELLER_REGISTRATION_ENABLED", "false")
    refresh_feature_flag_cache()
    body = client.get("/").json()
    assert body["status"] == "running"
    assert body["features"]["seller_registration_enabled"] is False

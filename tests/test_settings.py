from update_center.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in ("DEFAULT_CHANNEL", "HISTORY_MAX_PAGE_SIZE", "CATALOG_CACHE_TTL_SECONDS", "GRAY_RELEASE_FAIL_OPEN"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.API_V1_PREFIX == "/api/v1"
    assert settings.DEFAULT_CHANNEL == "official"
    assert settings.HISTORY_MAX_PAGE_SIZE == 100
    assert settings.CATALOG_CACHE_TTL_SECONDS == 0
    assert settings.GRAY_RELEASE_FAIL_OPEN is True


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("DEFAULT_CHANNEL", "beta")
    monkeypatch.setenv("CATALOG_CACHE_TTL_SECONDS", "15")
    monkeypatch.setenv("GRAY_RELEASE_FAIL_OPEN", "false")

    settings = Settings(_env_file=None)

    assert settings.DEFAULT_CHANNEL == "beta"
    assert settings.CATALOG_CACHE_TTL_SECONDS == 15
    assert settings.GRAY_RELEASE_FAIL_OPEN is False

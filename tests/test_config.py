from core.config import DEFAULT_ORIGINS, Settings, _parse_origins


def test_default_origins_include_frontend_url():
    origins = _parse_origins("", "https://chat.example.com/")

    assert origins == DEFAULT_ORIGINS + ["https://chat.example.com"]


def test_origin_list_is_trimmed_and_deduplicated():
    origins = _parse_origins(" https://a.example , ,https://b.example,https://a.example", "https://a.example")

    assert origins == ["https://a.example", "https://b.example"]


def test_missing_origin_is_allowed(monkeypatch):
    s = Settings()
    monkeypatch.setattr(s, "ALLOWED_ORIGINS", ["https://chat.example.com"])

    assert s.is_origin_allowed(None)
    assert s.is_origin_allowed("")
    assert s.is_origin_allowed("https://chat.example.com/")
    assert not s.is_origin_allowed("https://evil.example")


def test_setup_logging_applies_configured_level(monkeypatch):
    import logging

    from core.config import settings
    from core.logging import setup_logging

    root = logging.getLogger()
    previous = root.level
    monkeypatch.setattr(settings, "LOG_LEVEL", "debug")
    try:
        setup_logging()
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)

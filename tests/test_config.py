from studybuddy.core.config import _env_flag, _env_list, _env_number


def test_numbers_fall_back_on_missing_or_malformed(monkeypatch):
    monkeypatch.setenv("PLAN_LIST_LIMIT", "25")
    monkeypatch.setenv("LLM_TEMPERATURE", "warm")
    monkeypatch.delenv("LLM_MAX_TOKENS", raising=False)

    assert _env_number("PLAN_LIST_LIMIT", 10, int) == 25
    assert _env_number("LLM_TEMPERATURE", 0.2, float) == 0.2
    assert _env_number("LLM_MAX_TOKENS", 2000, int) == 2000


def test_flags_and_lists(monkeypatch):
    monkeypatch.setenv("DEBUG", "Off")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, ,http://b.test")

    assert _env_flag("DEBUG", True) is False
    assert _env_flag("UNSET_FLAG_FOR_TEST", True) is True
    assert _env_list("CORS_ALLOW_ORIGINS") == ["http://a.test", "http://b.test"]

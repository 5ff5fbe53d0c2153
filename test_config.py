from config import GEMINI_OPENAI_BASE_URL, Settings, parse_api_keys
from llm_client import create_client, normalize_content


def test_parse_api_keys():
    assert parse_api_keys(" k1, ,k2 ,") == ["k1", "k2"]
    assert parse_api_keys("") == []
    assert parse_api_keys(None) == []


def test_from_env_prefers_key_list(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEYS", "a,b")
    monkeypatch.setenv("GEMINI_API_KEY", "single")
    monkeypatch.setenv("KEY_COOLDOWN_SECONDS", "15")
    monkeypatch.setenv("MONGODB_DB", "newsroom")
    settings = Settings.from_env()
    assert settings.api_keys == ["a", "b"]
    assert settings.key_cooldown_seconds == 15.0
    assert settings.mongodb_db == "newsroom"


def test_from_env_falls_back_to_single_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEYS", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("GOOGLE_API_KEY", "google")
    monkeypatch.delenv("LLM_MODEL", raising=False)
    monkeypatch.setenv("GEMINI_MODEL", "gemini-1.5-pro")
    settings = Settings.from_env()
    assert settings.api_keys == ["google"]
    assert settings.llm_model == "gemini-1.5-pro"
    assert settings.key_max_retries == 3


def test_from_env_without_keys(monkeypatch):
    for name in ("GEMINI_API_KEYS", "GEMINI_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    assert Settings.from_env().api_keys == []


def test_create_client_binds_key():
    client = create_client("secret-key", Settings())
    assert client.api_key == "secret-key"
    assert str(client.base_url).rstrip("/") == GEMINI_OPENAI_BASE_URL.rstrip("/")
    assert client.max_retries == 0


def test_normalize_content():
    assert normalize_content("x") == "x"
    assert normalize_content(None) == ""
    assert normalize_content(["a"]) == "['a']"

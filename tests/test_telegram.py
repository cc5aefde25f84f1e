import pytest
import requests

from notifications import telegram


class _Response:
    def __init__(self, ok=True, status_code=200, text="{}"):
        self.ok = ok
        self.status_code = status_code
        self.text = text


@pytest.fixture
def configured(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "42")


def test_message_is_sent_to_bot_api(configured, monkeypatch):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params, timeout))
        return _Response()

    monkeypatch.setattr(telegram.requests, "get", fake_get)
    telegram.send_telegram_message("hello")

    assert calls == [
        ("https://api.telegram.org/bot123:abc/sendMessage", {"chat_id": "42", "text": "hello"}, 10),
    ]


def test_missing_configuration_raises(monkeypatch):
    monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
    monkeypatch.delenv("TELEGRAM_CHAT_ID", raising=False)
    with pytest.raises(RuntimeError, match="not set"):
        telegram.send_telegram_message("hello")


def test_http_error_raises(configured, monkeypatch):
    monkeypatch.setattr(
        telegram.requests, "get",
        lambda url, params=None, timeout=None: _Response(ok=False, status_code=401, text="Unauthorized"),
    )
    with pytest.raises(RuntimeError, match="401 Unauthorized"):
        telegram.send_telegram_message("hello")


def test_network_error_raises(configured, monkeypatch):
    def fail(url, params=None, timeout=None):
        raise requests.ConnectionError("no route")

    monkeypatch.setattr(telegram.requests, "get", fail)
    with pytest.raises(RuntimeError, match="no route"):
        telegram.send_telegram_message("hello")

"""Tests for Gemini logo lookup / advice and the background logo fix."""
from datetime import date
from unittest.mock import MagicMock, patch

import requests

from subtracker.application.enrichment import GeminiClient, fix_logo
from subtracker.application.subscriptions import CreateSubscriptionUseCase, get_subscription
from subtracker.domain.subscription import create_subscription


def _response(text, status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.text = "error"
    resp.json.return_value = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return resp


class TestGeminiClient:
    def test_no_key_returns_none(self):
        client = GeminiClient(api_key="")
        with patch("subtracker.application.enrichment.requests.post") as post:
            assert client.generate("hi") is None
        post.assert_not_called()

    def test_lookup_logo(self):
        client = GeminiClient(api_key="k", model="m")
        with patch("subtracker.application.enrichment.requests.post",
                   return_value=_response(" https://cdn.example/netflix.png \n")) as post:
            assert client.lookup_logo("Netflix") == "https://cdn.example/netflix.png"
        body = post.call_args.kwargs["json"]
        assert "Netflix" in body["contents"][0]["parts"][0]["text"]
        assert body["tools"] == [{"google_search": {}}]
        assert post.call_args.kwargs["params"] == {"key": "k"}

    def test_lookup_rejects_non_url(self):
        client = GeminiClient(api_key="k")
        with patch("subtracker.application.enrichment.requests.post",
                   return_value=_response("Sorry, I can't find that")):
            assert client.lookup_logo("Netflix") is None

    def test_http_error(self):
        client = GeminiClient(api_key="k")
        with patch("subtracker.application.enrichment.requests.post", return_value=_response("", status=500)):
            assert client.lookup_logo("Netflix") is None

    def test_timeout(self):
        client = GeminiClient(api_key="k")
        with patch("subtracker.application.enrichment.requests.post",
                   side_effect=requests.Timeout("slow")):
            assert client.generate("hi") is None

    def test_advise_prompt_lists_prices(self):
        client = GeminiClient(api_key="k")
        subs = [create_subscription(name="Netflix", price=649), create_subscription(name="Spotify", price=119)]
        with patch("subtracker.application.enrichment.requests.post",
                   return_value=_response("Cancel one!")) as post:
            assert client.advise(subs) == "Cancel one!"
        prompt = post.call_args.kwargs["json"]["contents"][0]["parts"][0]["text"]
        assert "Netflix: ₹649" in prompt
        assert "Spotify: ₹119" in prompt

    def test_advise_empty(self):
        assert GeminiClient(api_key="k").advise([]) is None


class TestFixLogo:
    def test_patches_on_success(self, store):
        sub = CreateSubscriptionUseCase(store).execute(name="Netflix", price="649", start_date=date(2024, 5, 10))
        client = MagicMock()
        client.lookup_logo.return_value = "https://cdn.example/netflix.png"

        assert fix_logo(store, sub.id, client) == "https://cdn.example/netflix.png"
        assert get_subscription(store, sub.id).logo_url == "https://cdn.example/netflix.png"

    def test_noop_on_failure(self, store):
        sub = CreateSubscriptionUseCase(store).execute(name="Netflix", price="649", start_date=date(2024, 5, 10))
        client = MagicMock()
        client.lookup_logo.return_value = None

        assert fix_logo(store, sub.id, client) is None
        assert store.load() == [sub]

    def test_missing_subscription(self, store):
        client = MagicMock()
        assert fix_logo(store, "missing", client) is None
        client.lookup_logo.assert_not_called()

"""Unit tests for ResponseData."""

from __future__ import annotations

import httpx

from paramix.extraction.response import ResponseData


class TestResponseData:
    """Test the response bundle handed to extraction backends."""

    def test_headers_from_mapping_are_case_insensitive(self) -> None:
        response = ResponseData(headers={"Content-Type": "application/json"})
        assert isinstance(response.headers, httpx.Headers)
        assert response.headers["content-type"] == "application/json"

    def test_headers_from_pairs_keep_repeats(self) -> None:
        response = ResponseData(headers=[("Set-Cookie", "a=1"), ("set-cookie", "b=2")])
        assert response.headers.get_list("SET-COOKIE") == ["a=1", "b=2"]

    def test_json_view_is_cached(self) -> None:
        response = ResponseData(body='{"a": 1}')
        assert response.json == {"a": 1}
        assert response.json is response.json

    def test_edn_view(self) -> None:
        assert ResponseData(body="{:a 1}").edn == {":a": 1}

    def test_document_view(self) -> None:
        response = ResponseData(body="<p id='x'>hi</p>")
        assert response.document.select_one("#x").get_text() == "hi"

    def test_from_httpx(self) -> None:
        request = httpx.Request("GET", "https://example.com/posts/1")
        raw = httpx.Response(
            200,
            headers={"X-Request-Id": "abc"},
            text='{"ok": true}',
            request=request,
        )
        response = ResponseData.from_httpx(raw)
        assert response.status == 200
        assert response.status_text == "OK"
        assert response.body == '{"ok": true}'
        assert response.headers["x-request-id"] == "abc"
        assert response.response_time is None

    def test_from_httpx_elapsed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            raw = client.get("https://example.com/ping")

        response = ResponseData.from_httpx(raw)
        assert response.status == 204
        assert response.status_text == "No Content"
        assert response.response_time is not None
        assert response.response_time >= 0

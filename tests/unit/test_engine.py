"""End-to-end tests for the runner-facing entry points."""

from __future__ import annotations

import pytest

import paramix
from paramix import (
    ExtractionQuery,
    MissingParameterError,
    ResponseData,
    RunInfo,
    evaluate_condition,
    resolve_template,
    run_extractions,
    validate_defaults,
)
from paramix.store import ParameterStore


class TestScenario:
    """A two-step scenario: create a post, then fetch it."""

    def test_create_then_fetch(self) -> None:
        defaults = validate_defaults(
            {"host": "api.example.com", "base_url": "https://${host}"}
        )
        store = defaults.fork(RunInfo(launched_by="ci"))

        assert resolve_template("${base_url}/posts", store) == (
            "https://api.example.com/posts"
        )

        created = ResponseData(
            body='{"post":{"id":123}}',
            headers={"Location": "/posts/123"},
            status=201,
            status_text="Created",
        )
        run_extractions(
            [
                ExtractionQuery(parameter="post_id", type="jsonpath", query="post.id"),
                ExtractionQuery(parameter="location", type="header", query="location"),
            ],
            created,
            store,
        )

        assert evaluate_condition("${__status == '201'}", store)
        assert resolve_template("${base_url}${location}", store) == (
            "https://api.example.com/posts/123"
        )
        assert resolve_template("/posts/${post_id}/comments", store) == (
            "/posts/123/comments"
        )
        assert defaults.get("post_id") is None

    def test_skip_condition_on_unset_flag(self) -> None:
        store = ParameterStore()
        assert not evaluate_condition("${skip_login}", store)
        store.set("skip_login", "yes")
        assert evaluate_condition("${skip_login}", store)

    def test_failed_step(self) -> None:
        store = ParameterStore()
        with pytest.raises(MissingParameterError):
            resolve_template("${__if_then_else(is_good,'Success!',':_(')}", store)


@pytest.mark.parametrize(
    "text",
    ["", "no spans here", "price: $5 {approx}", '{"json": [1, 2]}', "$$}{"],
)
def test_text_without_spans_is_identity(text: str) -> None:
    assert resolve_template(text, ParameterStore()) == text


def test_concurrent_runs_are_isolated() -> None:
    seed = validate_defaults({"user": "base"})
    first, second = seed.fork(), seed.fork()
    first.set("user", "alice")
    assert second.get("user") == "base"
    assert first.get("__testRunId") != second.get("__testRunId")


def test_public_api() -> None:
    for name in paramix.__all__:
        assert hasattr(paramix, name)

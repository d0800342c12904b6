"""Tests for the pipeline engine and the Complete/CONTINUE protocol."""

import pytest
from helpers import make_context

from nos.errors import PipelineError
from nos.pipeline import CONTINUE, Complete, Context, Continue, Pipeline


class TestOutcome:
    def test_continue_is_singleton(self) -> None:
        assert Continue() is CONTINUE
        assert repr(CONTINUE) == "CONTINUE"

    def test_complete_defaults(self) -> None:
        outcome = Complete(b"hi")
        assert outcome.status == 200
        assert "text/html" in outcome.content_type
        assert outcome.headers == ()


class TestContext:
    def test_complete_applies_outcome(self) -> None:
        ctx = make_context("/")
        ctx.complete(Complete(b"body", status=201, headers=(("X-A", "1"),)))
        assert ctx.completed
        assert ctx.body == b"body"
        assert ctx.status == 201
        assert ctx.headers == (("X-A", "1"),)

    def test_completing_twice_raises(self) -> None:
        ctx = make_context("/")
        ctx.complete(Complete(b"first"))
        with pytest.raises(PipelineError):
            ctx.complete(Complete(b"second"))
        assert ctx.body == b"first"

    def test_path_is_request_path(self) -> None:
        assert make_context("/docs/").path == "/docs/"


class TestPipelineOrdering:
    async def test_first_complete_wins_and_later_handlers_never_run(self) -> None:
        calls: list[str] = []

        async def a(ctx: Context):
            calls.append("a")
            ctx.state["seen_by_a"] = True
            return CONTINUE

        async def b(ctx: Context):
            calls.append("b")
            return Complete(b"from b")

        async def c(ctx: Context):
            calls.append("c")
            return Complete(b"from c")

        ctx = make_context("/")
        outcome = await Pipeline((a, b, c)).run(ctx)

        assert calls == ["a", "b"]
        assert isinstance(outcome, Complete)
        assert ctx.body == b"from b"
        # A's side effect survives B completing the request
        assert ctx.state["seen_by_a"] is True

    async def test_exhausted_pipeline_returns_continue(self) -> None:
        ctx = make_context("/")
        outcome = await Pipeline((lambda ctx: CONTINUE,)).run(ctx)
        assert outcome is CONTINUE
        assert not ctx.completed

    async def test_empty_pipeline_returns_continue(self) -> None:
        assert await Pipeline().run(make_context("/")) is CONTINUE

    async def test_sync_and_async_handlers_mix(self) -> None:
        def sync_handler(ctx: Context):
            return CONTINUE

        async def async_handler(ctx: Context):
            return Complete("done")

        ctx = make_context("/")
        await Pipeline((sync_handler, async_handler)).run(ctx)
        assert ctx.body == "done"

    async def test_each_handler_sees_previous_state(self) -> None:
        async def first(ctx: Context):
            ctx.state["order"] = ["first"]
            return CONTINUE

        async def second(ctx: Context):
            ctx.state["order"].append("second")
            return Complete(",".join(ctx.state["order"]))

        ctx = make_context("/")
        await Pipeline((first, second)).run(ctx)
        assert ctx.body == "first,second"

    async def test_invalid_return_value_raises(self) -> None:
        with pytest.raises(PipelineError, match="expected Complete or CONTINUE"):
            await Pipeline((lambda ctx: None,)).run(make_context("/"))

    async def test_handler_exception_propagates(self) -> None:
        side_effects: list[str] = []

        def records(ctx: Context):
            side_effects.append("ran")
            return CONTINUE

        def explodes(ctx: Context):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await Pipeline((records, explodes)).run(make_context("/"))
        assert side_effects == ["ran"]


class TestPipelineAssembly:
    def test_then_returns_new_pipeline(self) -> None:
        def h1(ctx):
            return CONTINUE

        def h2(ctx):
            return CONTINUE

        base = Pipeline().then(h1)
        extended = base.then(h2)
        assert base.handlers == (h1,)
        assert extended.handlers == (h1, h2)
        assert list(extended) == [h1, h2]
        assert len(extended) == 2

    def test_pipeline_is_frozen(self) -> None:
        pipeline = Pipeline()
        with pytest.raises(AttributeError):
            pipeline.handlers = ()  # type: ignore[misc]

"""Tests for chainmux.chain, the middleware chain executor."""

import logging
from contextlib import contextmanager

import pytest

from chainmux.chain import ChainSettings, MiddlewareChain
from chainmux.errors import ConfigurationError, NotFound
from chainmux.middleware.protocol import CONTINUE, STOP, Fail
from chainmux.testing import call_chain


def _recorder(calls: list[str], name: str, *, cont: bool):
    def mw(writer, request, ctx):
        calls.append(name)
        if cont:
            return ctx.next()
        return None

    mw.__name__ = name
    return mw


class TestConstruction:
    def test_empty_chain_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="at least one middleware"):
            MiddlewareChain([])

    def test_keeps_order(self) -> None:
        a = _recorder([], "a", cont=True)
        b = _recorder([], "b", cont=False)
        chain = MiddlewareChain([a, b])
        assert chain.middlewares == (a, b)
        assert len(chain) == 2

    def test_shared_settings(self) -> None:
        settings = ChainSettings()
        chain = MiddlewareChain([_recorder([], "a", cont=False)], settings=settings)
        assert chain.settings is settings


class TestContinuation:
    async def test_all_continue_runs_every_middleware_once(self) -> None:
        calls: list[str] = []
        chain = [_recorder(calls, name, cont=True) for name in "abcd"]

        result = await call_chain(chain)

        assert calls == ["a", "b", "c", "d"]
        # No implicit write by the executor.
        assert result.response.status == 200
        assert result.response.body == b""

    @pytest.mark.parametrize("k", [1, 2, 3])
    async def test_stop_without_next_halts_at_k(self, k: int) -> None:
        calls: list[str] = []
        names = ["m1", "m2", "m3", "m4"]
        chain = [_recorder(calls, name, cont=(i + 1) != k) for i, name in enumerate(names)]

        await call_chain(chain)

        assert calls == names[:k]

    async def test_explicit_stop_outcome(self) -> None:
        calls: list[str] = []

        def first(writer, request, ctx):
            calls.append("first")
            ctx.next()
            return STOP

        await call_chain([first, _recorder(calls, "second", cont=False)])

        assert calls == ["first"]

    async def test_explicit_continue_outcome(self) -> None:
        calls: list[str] = []

        def first(writer, request, ctx):
            calls.append("first")
            return CONTINUE

        await call_chain([first, _recorder(calls, "second", cont=False)])

        assert calls == ["first", "second"]

    async def test_signal_is_reset_between_middlewares(self) -> None:
        """A later middleware cannot mark an earlier invocation as continued."""
        calls: list[str] = []
        seen: list[bool] = []

        def first(writer, request, ctx):
            calls.append("first")
            return ctx.next()

        def second(writer, request, ctx):
            seen.append(ctx.next_called)
            calls.append("second")
            return None

        await call_chain([first, second, _recorder(calls, "third", cont=True)])

        assert seen == [False]
        assert calls == ["first", "second"]

    async def test_async_middlewares(self) -> None:
        calls: list[str] = []

        async def first(writer, request, ctx):
            calls.append("first")
            return ctx.next()

        async def second(writer, request, ctx):
            calls.append("second")
            writer.write("done")

        result = await call_chain([first, second])

        assert calls == ["first", "second"]
        assert result.response.text == "done"

    async def test_unknown_return_value_stops(self) -> None:
        calls: list[str] = []

        def first(writer, request, ctx):
            calls.append("first")
            return "something"

        await call_chain([first, _recorder(calls, "second", cont=True)])

        assert calls == ["first"]


class TestErrors:
    async def test_raised_error_halts_and_writes_500(self, caplog) -> None:
        calls: list[str] = []
        status = logging.getLogger("tests.chain.status")

        def first(writer, request, ctx):
            calls.append("first")
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="tests.chain.status"):
            result = await call_chain(
                [first, _recorder(calls, "second", cont=True)],
                method="POST",
                path="/v1/items?x=1",
                status_logger=status,
            )

        assert calls == ["first"]
        assert result.response.status == 500
        assert result.response.text == "boom"
        assert result.response.content_type == "text/plain; charset=utf-8"
        assert result.response.header("X-Content-Type-Options") == "nosniff"

        records = [r for r in caplog.records if r.name == "tests.chain.status"]
        assert len(records) == 1
        assert records[0].levelno == logging.ERROR
        assert "POST" in records[0].getMessage()
        assert "/v1/items?x=1" in records[0].getMessage()
        assert records[0].exc_info is not None

    async def test_fail_outcome(self) -> None:
        def first(writer, request, ctx):
            return Fail(ValueError("bad input"))

        result = await call_chain([first])

        assert result.response.status == 500
        assert result.response.text == "bad input"

    async def test_returned_exception_is_a_failure(self) -> None:
        def first(writer, request, ctx):
            ctx.next()
            return KeyError("missing")

        result = await call_chain([first, _recorder([], "never", cont=True)])

        assert result.response.status == 500

    async def test_error_after_next_still_halts(self) -> None:
        calls: list[str] = []

        def first(writer, request, ctx):
            ctx.next()
            raise RuntimeError("late")

        result = await call_chain([first, _recorder(calls, "second", cont=True)])

        assert calls == []
        assert result.response.text == "late"

    async def test_no_status_logger_is_silent(self, caplog) -> None:
        def first(writer, request, ctx):
            raise RuntimeError("quiet")

        with caplog.at_level(logging.DEBUG):
            result = await call_chain([first])

        assert result.response.status == 500
        assert not [r for r in caplog.records if "quiet" in r.getMessage()]

    async def test_continue_path_does_not_log(self, caplog) -> None:
        status = logging.getLogger("tests.chain.quiet")
        chain = [_recorder([], "a", cont=True), _recorder([], "b", cont=False)]

        with caplog.at_level(logging.DEBUG, logger="tests.chain.quiet"):
            await call_chain(chain, status_logger=status)

        assert not [r for r in caplog.records if r.name == "tests.chain.quiet"]

    async def test_http_error_inside_context_manager(self) -> None:
        @contextmanager
        def transaction():
            yield

        def lookup(writer, request, ctx):
            with transaction():
                raise NotFound("gone")

        result = await call_chain([lookup])

        assert result.response.status == 500
        assert result.response.text == "404: gone"

    async def test_error_after_write_keeps_committed_headers(self) -> None:
        def render(writer, request, ctx):
            ctx.response.json({"ok": True})
            raise RuntimeError("boom")

        result = await call_chain([render])

        assert result.response.status == 200
        assert result.response.content_type == "application/json"
        assert result.response.header("X-Content-Type-Options") is None
        assert result.response.body == b'{"ok": true}boom'

    async def test_failing_context_factory_is_contained(self, caplog) -> None:
        calls: list[str] = []

        def factory():
            raise LookupError("no database")

        with caplog.at_level(logging.ERROR, logger="tests.chain.factory"):
            result = await call_chain(
                [_recorder(calls, "first", cont=True)],
                path="/v1/items",
                context_factory=factory,
                status_logger=logging.getLogger("tests.chain.factory"),
            )

        assert calls == []
        assert result.response.status == 500
        assert result.response.text == "no database"
        records = [r for r in caplog.records if r.name == "tests.chain.factory"]
        assert len(records) == 1
        assert "GET /v1/items" in records[0].getMessage()


class TestScenario:
    async def test_a_continues_b_stops(self, caplog) -> None:
        calls: list[str] = []
        status = logging.getLogger("tests.chain.scenario")

        def a(writer, request, ctx):
            calls.append("A")
            return ctx.next()

        def b(writer, request, ctx):
            calls.append("B")

        with caplog.at_level(logging.DEBUG, logger="tests.chain.scenario"):
            result = await call_chain([a, b], status_logger=status)

        assert calls == ["A", "B"]
        assert result.response.body == b""
        assert not [r for r in caplog.records if r.name == "tests.chain.scenario"]

    async def test_a_fails_with_boom(self, caplog) -> None:
        calls: list[str] = []
        status = logging.getLogger("tests.chain.scenario")

        def a(writer, request, ctx):
            calls.append("A")
            raise RuntimeError("boom")

        def b(writer, request, ctx):
            calls.append("B")

        with caplog.at_level(logging.DEBUG, logger="tests.chain.scenario"):
            result = await call_chain([a, b], status_logger=status)

        assert calls == ["A"]
        assert result.response.status == 500
        assert result.response.text == "boom"
        assert len([r for r in caplog.records if r.name == "tests.chain.scenario"]) == 1


class TestAppContext:
    async def test_fresh_payload_per_request(self) -> None:
        payloads: list[dict] = []

        def remember(writer, request, ctx):
            ctx.app["hits"] += 1
            payloads.append(ctx.app)

        for _ in range(2):
            await call_chain([remember], context_factory=lambda: {"hits": 0})

        assert [p["hits"] for p in payloads] == [1, 1]
        assert payloads[0] is not payloads[1]

    async def test_payload_shared_across_chain(self) -> None:
        def load(writer, request, ctx):
            ctx.app["user"] = "alice"
            return ctx.next()

        def show(writer, request, ctx):
            ctx.response.text(ctx.app["user"])

        result = await call_chain([load, show], context_factory=dict)

        assert result.response.text == "alice"

    async def test_async_context_factory(self) -> None:
        async def factory():
            return {"source": "async"}

        def show(writer, request, ctx):
            ctx.response.text(ctx.app["source"])

        result = await call_chain([show], context_factory=factory)

        assert result.response.text == "async"

    async def test_payload_none_without_factory(self) -> None:
        seen: list[object] = []

        def show(writer, request, ctx):
            seen.append(ctx.app)

        await call_chain([show])

        assert seen == [None]

    async def test_path_params_visible(self) -> None:
        def show(writer, request, ctx):
            ctx.response.text(ctx.path_params["id"])

        result = await call_chain([show], path_params={"id": "42"})

        assert result.response.text == "42"

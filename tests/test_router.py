"""
Router Engine Tests

Tests for router construction and matching using a lookup-table encoder,
so every expected score can be worked out by hand.

Test Categories:
1. TestRouterBuild - Embedding and persisting utterances
2. TestMatching - Best-route selection and scoring
3. TestMatchErrors - Encoding, retrieval and no-match failures
4. TestTimeoutAndCancellation - Bounded and cancelled matches
5. TestConfigure - Option sealing after the first match
6. TestRoutesInfo - Introspection helpers
7. TestRouterSingleton - Settings-driven global router
"""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest

from fixtures import FakeEncoder, RecordingStore
from semroute.config import Settings
from semroute.errors import (
    EncodingError,
    MatchTimeoutError,
    NoRouteFoundError,
    RetrievalError,
    RouterConfigurationError,
    StoreError,
)
from semroute.router import (
    Route,
    RouteMatch,
    Router,
    close_router,
    create_router_from_settings,
    get_router,
    with_dot_product_similarity,
    with_euclidean_distance,
    with_metric,
)
from semroute.router import engine as engine_module


class TestRouterBuild:
    """Construction embeds and stores every utterance once."""

    @pytest.mark.asyncio
    async def test_every_utterance_stored_in_order(self, routes, fake_encoder, recording_store):
        await Router.build(routes, fake_encoder, recording_store)

        assert recording_store.puts == [
            "hi",
            "hello there",
            "will it rain tomorrow?",
            "do I need an umbrella",
            "I want a refund",
            "I was charged twice",
        ]
        assert await recording_store.get("hi") == [1.0, 0.0, 0.0]

    @pytest.mark.asyncio
    async def test_router_routes_are_embedded(self, routes, fake_encoder, recording_store):
        router = await Router.build(routes, fake_encoder, recording_store)

        for route in router.routes:
            for utterance in route.utterances:
                assert utterance.is_embedded

    @pytest.mark.asyncio
    async def test_caller_routes_not_mutated(self, routes, fake_encoder, recording_store):
        router = await Router.build(routes, fake_encoder, recording_store)

        assert not any(u.is_embedded for r in routes for u in r.utterances)
        assert router.routes[0] is not routes[0]

    @pytest.mark.asyncio
    async def test_encoder_failure_aborts_build(self, recording_store):
        """Failing on the 3rd of 5 utterances stores only the first two."""
        texts = ["u1", "u2", "u3", "u4", "u5"]
        encoder = FakeEncoder(
            vectors={t: [float(i + 1)] for i, t in enumerate(texts)},
            fail_on={"u3"},
        )
        route = Route(name="r", utterances=texts)

        with pytest.raises(EncodingError) as exc_info:
            await Router.build([route], encoder, recording_store)

        assert exc_info.value.text == "u3"
        assert "u3" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert recording_store.puts == ["u1", "u2"]
        assert encoder.calls == ["u1", "u2", "u3"]

    @pytest.mark.asyncio
    async def test_empty_embedding_rejected(self, recording_store):
        encoder = FakeEncoder(vectors={"hi": []})

        with pytest.raises(EncodingError, match="empty embedding"):
            await Router.build([Route("chitchat", ["hi"])], encoder, recording_store)
        assert recording_store.puts == []

    @pytest.mark.asyncio
    async def test_store_failure_raises_store_error(self, fake_encoder):
        store = RecordingStore()
        await store.close()

        with pytest.raises(StoreError) as exc_info:
            await Router.build([Route("chitchat", ["hi"])], fake_encoder, store)
        assert exc_info.value.key == "hi"

    @pytest.mark.asyncio
    async def test_store_failure_midway_aborts_build(self):
        """A write failing on the 2nd of 3 utterances stops construction there."""
        texts = ["u1", "u2", "u3"]
        encoder = FakeEncoder(vectors={t: [float(i + 1)] for i, t in enumerate(texts)})
        store = RecordingStore(fail_put_on={"u2"})

        with pytest.raises(StoreError) as exc_info:
            await Router.build([Route(name="r", utterances=texts)], encoder, store)

        assert exc_info.value.key == "u2"
        assert isinstance(exc_info.value.__cause__, StoreError)
        assert encoder.calls == ["u1", "u2"]
        assert store.puts == ["u1", "u2"]
        assert "u1" in store
        assert "u2" not in store

    @pytest.mark.asyncio
    async def test_duplicate_route_names_rejected(self, fake_encoder, recording_store):
        routes = [Route("chitchat", ["hi"]), Route("chitchat", ["hello there"])]

        with pytest.raises(RouterConfigurationError, match="duplicate route name"):
            await Router.build(routes, fake_encoder, recording_store)
        assert fake_encoder.calls == []

    @pytest.mark.asyncio
    async def test_duplicate_utterances_across_routes_rejected(
        self, fake_encoder, recording_store
    ):
        routes = [Route("chitchat", ["hi"]), Route("weather", ["hi"])]

        with pytest.raises(RouterConfigurationError, match="duplicate utterance"):
            await Router.build(routes, fake_encoder, recording_store)

    @pytest.mark.asyncio
    async def test_build_latency_recorded(self, built_router):
        assert built_router.build_latency_ms >= 0.0


class TestMatching:
    """Best-route selection over stored utterance embeddings."""

    @pytest.mark.asyncio
    async def test_match_picks_best_route(self, built_router):
        match = await built_router.match("is it raining")

        assert isinstance(match, RouteMatch)
        assert match.route_name == "weather"
        assert match.score == pytest.approx(0.8)
        assert match.latency_ms >= 0.0

    @pytest.mark.asyncio
    async def test_single_route_dot_product(self, recording_store):
        router = await Router.build(
            [Route("chitchat", ["hi"])],
            FakeEncoder(vectors={"hi": [1.0, 0.0, 0.0], "q": [0.9, 0.1, 0.0]}),
            recording_store,
            with_dot_product_similarity(1.0),
        )

        match = await router.match("q")

        assert match.route_name == "chitchat"
        assert match.score == pytest.approx(0.9)

    @pytest.mark.asyncio
    async def test_match_is_deterministic(self, built_router):
        first = await built_router.match("good evening")
        second = await built_router.match("good evening")

        assert (first.route_name, first.score) == (second.route_name, second.score)

    @pytest.mark.asyncio
    async def test_tie_keeps_first_scanned_route(self, recording_store):
        encoder = FakeEncoder(vectors={"a": [1.0, 0.0], "b": [1.0, 0.0], "q": [1.0, 0.0]})
        router = await Router.build(
            [Route("first", ["a"]), Route("second", ["b"])],
            encoder,
            recording_store,
            with_dot_product_similarity(1.0),
        )

        for _ in range(3):
            assert (await router.match("q")).route_name == "first"

    @pytest.mark.asyncio
    async def test_metrics_combine_linearly(self, recording_store):
        encoder = FakeEncoder(vectors={"a": [1.0, 0.0], "q": [1.0, 0.0]})
        router = await Router.build(
            [Route("r", ["a"])],
            encoder,
            recording_store,
            with_dot_product_similarity(1.0),
            with_euclidean_distance(-0.5),
        )

        match = await router.match("q")

        assert match.score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_custom_metric(self, recording_store):
        encoder = FakeEncoder(vectors={"a": [1.0, 2.0], "q": [3.0, 4.0]})
        router = await Router.build(
            [Route("r", ["a"])],
            encoder,
            recording_store,
            with_metric(lambda q, c: float(len(q)), 2.0),
        )

        assert (await router.match("q")).score == pytest.approx(4.0)

    @pytest.mark.asyncio
    async def test_dimension_mismatch_candidates_skipped(self, recording_store):
        """A higher-scoring candidate of the wrong length is never chosen."""
        encoder = FakeEncoder(
            vectors={"long": [9.0, 9.0, 9.0], "short": [0.5, 0.5], "q": [1.0, 1.0]}
        )
        router = await Router.build(
            [Route("long_route", ["long"]), Route("short_route", ["short"])],
            encoder,
            recording_store,
            with_dot_product_similarity(1.0),
        )

        match = await router.match("q")

        assert match.route_name == "short_route"
        assert match.score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_match_batch_preserves_order_and_errors(self, built_router):
        results = await built_router.match_batch(
            ["refund please", "something unrelated", "good evening"]
        )

        assert results[0].route_name == "billing"
        assert isinstance(results[1], NoRouteFoundError)
        assert results[2].route_name == "chitchat"


class TestMatchErrors:
    @pytest.mark.asyncio
    async def test_no_metrics_means_no_route(self, routes, fake_encoder, recording_store):
        router = await Router.build(routes, fake_encoder, recording_store)

        with pytest.raises(NoRouteFoundError):
            await router.match("good evening")

    @pytest.mark.asyncio
    async def test_non_positive_scores_mean_no_route(self, built_router):
        with pytest.raises(NoRouteFoundError) as exc_info:
            await built_router.match("something unrelated")
        assert exc_info.value.query == "something unrelated"

    @pytest.mark.asyncio
    async def test_all_dimensions_mismatched(self, built_router):
        with pytest.raises(NoRouteFoundError):
            await built_router.match("wrong dimensions")

    @pytest.mark.asyncio
    async def test_query_encoding_failure(self, built_router, fake_encoder):
        fake_encoder.fail_on.add("good evening")

        with pytest.raises(EncodingError) as exc_info:
            await built_router.match("good evening")
        assert exc_info.value.text == "good evening"

    @pytest.mark.asyncio
    async def test_empty_query_embedding(self, built_router, fake_encoder):
        fake_encoder.vectors["blank"] = []

        with pytest.raises(EncodingError):
            await built_router.match("blank")

    @pytest.mark.asyncio
    async def test_retrieval_failure(self, routes, fake_encoder):
        store = RecordingStore(fail_get_on={"do I need an umbrella"})
        router = await Router.build(
            routes, fake_encoder, store, with_dot_product_similarity(1.0)
        )

        with pytest.raises(RetrievalError) as exc_info:
            await router.match("is it raining")
        assert exc_info.value.text == "do I need an umbrella"
        assert isinstance(exc_info.value.__cause__, StoreError)


class TestTimeoutAndCancellation:
    @pytest.mark.asyncio
    async def test_timeout_raises_match_timeout(self, built_router, fake_encoder):
        fake_encoder.delay = 0.5

        with pytest.raises(MatchTimeoutError) as exc_info:
            await built_router.match("good evening", timeout=0.01)
        assert exc_info.value.timeout == 0.01

    @pytest.mark.asyncio
    async def test_generous_timeout_succeeds(self, built_router):
        match = await built_router.match("good evening", timeout=5.0)
        assert match.route_name == "chitchat"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, built_router, fake_encoder):
        fake_encoder.delay = 1.0
        task = asyncio.create_task(built_router.match("good evening"))
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_cancellation_during_store_read(self, routes, fake_encoder):
        store = RecordingStore()
        router = await Router.build(
            routes, fake_encoder, store, with_dot_product_similarity(1.0)
        )
        store.get_delay = 1.0

        task = asyncio.create_task(router.match("good evening"))
        await asyncio.sleep(0.01)
        assert fake_encoder.calls[-1] == "good evening"
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert task.cancelled()

    @pytest.mark.asyncio
    async def test_errors_carry_elapsed_time(self, built_router):
        with pytest.raises(NoRouteFoundError) as exc_info:
            await built_router.match("something unrelated")
        assert exc_info.value.latency_ms is not None
        assert exc_info.value.latency_ms >= 0.0


class TestConfigure:
    @pytest.mark.asyncio
    async def test_configure_before_match(self, routes, fake_encoder, recording_store):
        router = await Router.build(routes, fake_encoder, recording_store)
        router.configure(with_dot_product_similarity(1.0))

        assert (await router.match("refund please")).route_name == "billing"

    @pytest.mark.asyncio
    async def test_configure_after_match_rejected(self, built_router):
        await built_router.match("good evening")

        with pytest.raises(RouterConfigurationError):
            built_router.configure(with_euclidean_distance(-1.0))
        assert len(built_router.metrics) == 1


class TestRoutesInfo:
    @pytest.mark.asyncio
    async def test_routes_info(self, built_router):
        info = built_router.get_routes_info()

        assert info["num_routes"] == 3
        assert info["routes"][0] == {
            "name": "chitchat",
            "description": "",
            "num_utterances": 2,
        }
        assert info["encoder"] == "fake-encoder"
        assert info["metrics"] == [
            {"metric": "dot_product_similarity", "coefficient": 1.0}
        ]


class TestRouterSingleton:
    @pytest.mark.asyncio
    async def test_create_from_settings_uses_routes_file(self, tmp_path, fake_encoder):
        routes_file = tmp_path / "routes.json"
        routes_file.write_text(
            json.dumps([{"name": "billing", "utterances": ["I want a refund"]}])
        )
        settings = Settings(routes_file=str(routes_file), euclidean_coefficient=-0.1)
        store = RecordingStore()

        with patch.object(engine_module, "create_encoder", return_value=fake_encoder), patch.object(
            engine_module, "create_store", return_value=store
        ):
            router = await create_router_from_settings(settings)

        assert [r.name for r in router.routes] == ["billing"]
        assert [m.name for m in router.metrics] == [
            "dot_product_similarity",
            "euclidean_distance",
        ]
        assert store.puts == ["I want a refund"]

    @pytest.mark.asyncio
    async def test_failed_build_closes_backends(self):
        encoder = FakeEncoder(vectors={})
        store = RecordingStore()

        with patch.object(engine_module, "create_encoder", return_value=encoder), patch.object(
            engine_module, "create_store", return_value=store
        ):
            with pytest.raises(EncodingError):
                await create_router_from_settings(Settings())

        assert encoder.closed
        assert store.closed

    @pytest.mark.asyncio
    async def test_get_router_builds_once(self, built_router):
        with patch.object(
            engine_module,
            "create_router_from_settings",
            new_callable=AsyncMock,
            return_value=built_router,
        ) as mock_create:
            first = await get_router()
            second = await get_router()

        assert first is second is built_router
        mock_create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_router_closes_backends(self, built_router, fake_encoder, recording_store):
        with patch.object(
            engine_module,
            "create_router_from_settings",
            new_callable=AsyncMock,
            return_value=built_router,
        ):
            await get_router()

        await close_router()

        assert fake_encoder.closed
        assert recording_store.closed
        assert engine_module._router_instance is None

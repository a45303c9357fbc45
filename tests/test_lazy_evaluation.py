import logging

import pytest
from lazy_chain import Chain, Filter, Map, wrap


class TestLazyEvaluation:
    """Test that chain building defers all work to terminal operations"""

    def test_deferred_execution(self, call_log, tracked_double):
        """Test that map/filter registration never calls the callbacks"""
        chain = wrap(range(10)).map(tracked_double).filter(lambda x: x > 4)
        assert call_log == [], "Operations should not execute during definition"

        result = chain.collect()
        assert result == [6, 8, 10, 12, 14, 16, 18]
        assert call_log == list(range(10)), "Each source element should be processed exactly once"

    def test_source_views_do_not_run_operations(self, call_log, tracked_double):
        """Test that first/last/reverse only reshape the source"""
        chain = wrap([1, 2, 3, 4]).map(tracked_double).first(3).last(2).reverse()
        assert call_log == []
        assert chain.collect() == [6, 4]
        assert call_log == [3, 2]

    def test_single_pass_per_element(self):
        """Test that every step runs on an element before the next element starts"""
        trace = []

        def step(name):
            def _fn(x):
                trace.append((name, x))
                return x
            return _fn

        wrap([1, 2]).map(step("a")).map(step("b")).collect()
        assert trace == [("a", 1), ("b", 1), ("a", 2), ("b", 2)]

    def test_filter_short_circuits_later_steps(self, call_log, tracked_double):
        """Test that a filtered element never reaches later operations"""
        result = wrap([1, 2, 3, 4]).filter(lambda x: x % 2 == 0).map(tracked_double).collect()
        assert result == [4, 8]
        assert call_log == [2, 4]

    def test_multiple_consumption(self):
        """Test that chains can be consumed multiple times"""
        chain = wrap(range(5)).map(lambda x: x * 2)

        result1 = chain.collect()
        result2 = chain.collect()

        assert result1 == result2, "Multiple consumptions should yield same result"
        assert result1 == [0, 2, 4, 6, 8], f"Unexpected result: {result1}"
        assert list(chain) == result1, "Iteration should agree with collect()"

    def test_operations_recorded_in_order(self):
        """Test that the pending operations are kept in registration order"""
        double = lambda x: x * 2
        positive = lambda x: x > 0
        chain = wrap([1]).map(double).filter(positive)

        assert chain.operations == (Map(double), Filter(positive))
        assert isinstance(chain, Chain)

    def test_registration_rejects_non_callables(self):
        """Test that a non-callable step fails at registration time"""
        with pytest.raises(TypeError):
            wrap([1, 2]).map(42)
        with pytest.raises(TypeError):
            wrap([1, 2]).filter("not a predicate")

    def test_callback_errors_propagate(self):
        """Test that a failing transform aborts the terminal call unchanged"""
        def explode(x):
            if x == 3:
                raise ZeroDivisionError("boom")
            return x

        chain = wrap([1, 2, 3, 4]).map(explode)
        with pytest.raises(ZeroDivisionError, match="boom"):
            chain.collect()
        with pytest.raises(ZeroDivisionError):
            chain.count()

    def test_wrap_materializes_plain_iterables(self):
        """Test that a one-shot iterable can still be consumed repeatedly"""
        chain = wrap(x for x in [1, 2, 3]).map(lambda x: x + 1)
        assert chain.collect() == [2, 3, 4]
        assert chain.collect() == [2, 3, 4]

    def test_wrap_keeps_sequence_reference(self):
        """Test that map/filter share the wrapped sequence instead of copying it"""
        data = [1, 2, 3]
        chain = wrap(data)
        assert chain.source is data
        assert chain.map(str).filter(bool).source is data

    def test_constructor_materializes_plain_iterables(self):
        """Test that Chain() itself turns a one-shot iterable into a reusable source"""
        chain = Chain(x * 10 for x in range(3))
        assert chain.collect() == [0, 10, 20]
        assert chain.collect() == [0, 10, 20]
        assert chain.count() == 3
        assert chain.last(1).collect() == [20]

    def test_terminal_operations_log_their_own_name(self, caplog):
        """Test that each terminal call logs under its own name"""
        chain = wrap([1, 2, 3])
        with caplog.at_level(logging.DEBUG, logger="lazy_chain"):
            chain.reduce(lambda acc, x: acc + x, 0)
        messages = [record.getMessage() for record in caplog.records]
        assert messages == ["reduce over 3 source items"]

        caplog.clear()
        with caplog.at_level(logging.DEBUG, logger="lazy_chain"):
            chain.for_each(lambda x: None)
        assert [record.getMessage() for record in caplog.records] == ["for_each over 3 source items"]

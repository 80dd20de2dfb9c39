"""
Session tests: end-to-end verification of calls made through a Mock.
"""

import logging

import pytest

from expectset import (
    AmbiguousMatchError,
    EXPECT_NOTHING,
    Mock,
    MockSession,
    NoMatchError,
    PartialMatchError,
    UnmetExpectationsError,
    at_least,
    between,
    expect,
    expect_any,
    expect_n,
    in_any_order,
    in_sequence,
    run_mock,
    when,
    whenever,
)
from expectset.config import EngineConfig
from expectset.predicates import anything, gt, lt, satisfies


def _session():
    session = MockSession()
    return session, Mock(session)


# =============================================================================
# Scenarios
# =============================================================================


class TestScenarios:
    def test_single_expectation_is_consumed(self):
        """An exactly-once expectation is satisfied by one call."""
        session, mock = _session()
        session.register(expect(when("call_a").returns(1)))

        assert mock.call_a() == 1
        assert session.expected == EXPECT_NOTHING
        session.finish()

    def test_unsatisfied_expectation_reported_at_teardown(self):
        session, _ = _session()
        session.register(expect(when("call_a").returns(1)))

        with pytest.raises(UnmetExpectationsError) as excinfo:
            session.finish()
        assert "call_a()" in excinfo.value.message
        assert excinfo.value.message.startswith("Unmet expectations:\n  call_a() at test_session.py:")

    def test_wrong_argument_lists_closest_matcher(self):
        session, mock = _session()
        session.register(expect(when("call_a", arg="foo").returns(None)))

        with pytest.raises(PartialMatchError) as excinfo:
            mock.call_a(arg="bar")
        closest = excinfo.value.details["closest"]
        assert len(closest) == 1
        assert closest[0].startswith("call_a(arg='foo')")

    def test_sequence_enforces_order(self):
        session, mock = _session()
        session.register(
            in_sequence(
                expect(when("call_a").returns(None)),
                expect(when("call_b").returns(None)),
            )
        )

        with pytest.raises(NoMatchError):
            mock.call_b()

        mock.call_a()
        mock.call_b()
        session.finish()

    def test_default_used_after_specific_expectation(self):
        session, mock = _session()
        session.register(
            whenever(when("call_a").returns(0)),
            expect(when("call_a").returns(1)),
        )

        assert mock.call_a() == 1
        assert mock.call_a() == 0
        assert mock.call_a() == 0
        session.finish()


# =============================================================================
# Ordering and cardinality through a session
# =============================================================================


class TestOrdering:
    def test_optional_first_step_can_be_skipped(self):
        session, mock = _session()
        session.register(
            in_sequence(
                expect_any(when("open").returns(None)),
                expect(when("close").returns(None)),
            )
        )
        mock.close()
        # open was skipped, so it is no longer allowed
        with pytest.raises(NoMatchError):
            mock.open()
        session.finish()

    def test_at_least_once_blocks_later_steps(self):
        session, mock = _session()
        session.register(
            in_sequence(
                expect_n(at_least(1), when("write").returns(None)),
                expect(when("close").returns(None)),
            )
        )
        with pytest.raises(NoMatchError):
            mock.close()
        mock.write()
        mock.write()
        mock.close()
        session.finish()

    def test_any_order_group_inside_sequence(self):
        session, mock = _session()
        session.register(
            in_sequence(
                in_any_order(
                    expect(when("adjust_mirrors").returns(None)),
                    expect(when("fasten_seat_belt").returns(None)),
                ),
                expect(when("start_car").returns("vroom")),
            )
        )
        mock.fasten_seat_belt()
        with pytest.raises(NoMatchError):
            mock.start_car()
        mock.adjust_mirrors()
        assert mock.start_car() == "vroom"
        session.finish()

    def test_unordered_calls_may_interleave_with_sequence(self):
        session, mock = _session()
        session.register(
            in_sequence(expect(when("a").returns(1)), expect(when("b").returns(2))),
            expect(when("c").returns(3)),
        )
        assert mock.a() == 1
        assert mock.c() == 3
        assert mock.b() == 2
        session.finish()

    def test_too_few_calls_reported(self):
        session, mock = _session()
        session.register(expect_n(3, when("tick").returns(None)))
        mock.tick()
        mock.tick()
        with pytest.raises(UnmetExpectationsError) as excinfo:
            session.finish()
        assert "tick()" in excinfo.value.details["report"]

    def test_too_many_calls_rejected(self):
        session, mock = _session()
        session.register(expect_n(between(1, 2), when("tick").returns(None)))
        mock.tick()
        mock.tick()
        with pytest.raises(NoMatchError):
            mock.tick()
        session.finish()

    def test_unmet_report_shows_modifiers(self):
        session, _ = _session()
        session.register(expect_n(between(2, 4), when("tick").returns(None)))
        with pytest.raises(UnmetExpectationsError) as excinfo:
            session.finish()
        assert excinfo.value.message.endswith("(2 to 4 times)")


# =============================================================================
# Responses and state
# =============================================================================


class TestResponses:
    def test_response_may_register_more_expectations(self):
        session, mock = _session()

        def open_file(action):
            session.register(expect(when("close", action.args[0]).returns(None)))
            return "handle"

        session.register(expect(when("open", anything).responds(open_file)))

        assert mock.open("f.txt") == "handle"
        with pytest.raises(UnmetExpectationsError):
            session.finish()
        mock.close("f.txt")
        session.finish()

    def test_response_may_make_nested_calls(self):
        session, mock = _session()
        session.register(
            expect(when("outer").responds(lambda _: mock.inner() + 1)),
            expect(when("inner").returns(41)),
        )
        assert mock.outer() == 42
        session.finish()

    def test_failed_call_leaves_tree_unchanged(self):
        session, mock = _session()
        session.register(
            expect(when("a").returns(1)),
            expect(when("a").returns(2)),
        )
        before = session.expected
        with pytest.raises(AmbiguousMatchError):
            mock.a()
        assert session.expected is before

    def test_predicates_in_matchers(self):
        session, mock = _session()
        session.register(expect(when("resize", gt(0)).returns(True)))
        with pytest.raises(PartialMatchError):
            mock.resize(-1)
        assert mock.resize(10) is True

    def test_incomparable_argument_is_a_mismatch(self):
        session, mock = _session()
        session.register(expect(when("resize", lt(5)).returns(True)))
        with pytest.raises(PartialMatchError):
            mock.resize("x")
        assert mock.resize(1) is True

    def test_errors_in_custom_predicates_propagate(self):
        """A broken user predicate is an error, not a mismatch."""
        session, mock = _session()

        def broken(value):
            return value + "suffix"

        session.register(expect(when("resize", satisfies(broken)).returns(True)))
        before = session.expected
        with pytest.raises(TypeError):
            mock.resize(3)
        assert session.expected is before

    def test_history_records_matches(self):
        session, mock = _session()
        session.register(expect(when("a", 1).returns(None)))
        mock.a(1)
        [record] = session.history
        assert record.action == "a(1)"
        assert record.matched.startswith("a(1) at test_session.py:")


def test_describe_renders_current_tree():
    session, _ = _session()
    assert session.describe() == "nothing"
    session.register(whenever(when("a").returns(None)))
    assert session.describe().startswith("a() at test_session.py:")
    assert session.describe().endswith("(low priority, any number of times)")


def test_session_uses_configured_closest_count():
    session = MockSession(EngineConfig(max_closest_matches=1))
    mock = Mock(session)
    session.register(
        expect(when("f", 1).returns(None)),
        expect(when("f", 2).returns(None)),
    )
    with pytest.raises(PartialMatchError) as excinfo:
        mock.f(0)
    assert len(excinfo.value.details["closest"]) == 1


def test_dispatch_failure_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="expectset.session")
    session, mock = _session()
    with pytest.raises(NoMatchError):
        mock.anything()
    assert "NO_MATCH" in caplog.text


def test_run_mock_checks_teardown():
    with pytest.raises(UnmetExpectationsError):
        with run_mock() as session:
            session.register(expect(when("a").returns(None)))

    with run_mock() as session:
        session.register(expect(when("a").returns(5)))
        assert Mock(session).a() == 5


def test_run_mock_propagates_block_errors():
    with pytest.raises(KeyError):
        with run_mock() as session:
            session.register(expect(when("a").returns(None)))
            raise KeyError("boom")


def test_mock_dunder_attributes_are_not_calls():
    session, mock = _session()
    with pytest.raises(AttributeError):
        mock.__wrapped__
    assert repr(mock) == "<Mock mock>"

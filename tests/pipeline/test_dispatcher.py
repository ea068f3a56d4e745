import pytest
import threading

from rfi_tracker.pipeline import InlineDispatcher, QueryDispatcher, QueryTicket, create_dispatcher

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


@pytest.fixture
def dispatcher():
    d = QueryDispatcher(workers=2, poll_timeout=0.05)
    d.start()
    yield d
    d.stop()


def _drain(dispatcher, n, timeout=5.0):
    out = []
    while len(out) < n:
        completion = dispatcher.poll(timeout=timeout)
        assert completion is not None, "timed out waiting for completion"
        out.append(completion)
    return out


class TestQueryDispatcher:

    def test_submit_requires_start(self):
        with pytest.raises(RuntimeError, match="not running"):
            QueryDispatcher().submit(QueryTicket("layers", 1), lambda: None)

    def test_result_returned_with_ticket(self, dispatcher):
        ticket = dispatcher.submit(QueryTicket("layers", 1), lambda a, b: a + b, 2, 3)
        (completion,) = _drain(dispatcher, 1)

        assert completion.ticket == ticket
        assert completion.ok
        assert completion.result == 5
        assert dispatcher.pending == 0

    def test_exception_becomes_error(self, dispatcher):
        def boom():
            raise RuntimeError("archive down")

        dispatcher.submit(QueryTicket("series", 7), boom)
        (completion,) = _drain(dispatcher, 1)

        assert not completion.ok
        assert isinstance(completion.error, RuntimeError)
        assert dispatcher.is_running()

    def test_completions_can_arrive_out_of_order(self, dispatcher):
        release = threading.Event()

        def slow():
            release.wait(5)
            return "old"

        dispatcher.submit(QueryTicket("layers", 1), slow)
        dispatcher.submit(QueryTicket("layers", 2), lambda: "new")

        first = dispatcher.poll(timeout=5)
        release.set()
        second = dispatcher.poll(timeout=5)

        assert (first.ticket.seq, first.result) == (2, "new")
        assert (second.ticket.seq, second.result) == (1, "old")

    def test_pending_counts_unpolled(self, dispatcher):
        dispatcher.submit(QueryTicket("layers", 1), lambda: 1)
        assert dispatcher.pending == 1
        _drain(dispatcher, 1)
        assert dispatcher.pending == 0

    def test_poll_without_wait(self, dispatcher):
        assert dispatcher.poll() is None

    def test_stop_is_idempotent(self):
        d = QueryDispatcher(workers=1, poll_timeout=0.05)
        d.start()
        d.stop()
        d.stop()
        assert not d.is_running()


class TestInlineDispatcher:

    def test_resolves_at_submit(self):
        d = InlineDispatcher()
        d.submit(QueryTicket("layers", 1), lambda: "done")
        assert d.pending == 1
        assert d.poll().result == "done"
        assert d.poll() is None

    def test_captures_errors(self):
        d = InlineDispatcher()
        d.submit(QueryTicket("layers", 1), lambda: 1 / 0)
        assert isinstance(d.poll().error, ZeroDivisionError)


def test_create_dispatcher_from_config(make_config):
    assert isinstance(create_dispatcher(make_config(dispatch_mode="inline")), InlineDispatcher)

    threaded = create_dispatcher(make_config(dispatch_mode="threaded", workers=3))
    assert isinstance(threaded, QueryDispatcher)
    assert threaded.n_workers == 3

"""Tests for the scrape, send, unbookmark run."""

import pytest

from bookmark2vault.exceptions import RunInProgressError, TransportError
from bookmark2vault.orchestrator import Orchestrator, Phase, ProcessState
from bookmark2vault.remover import RemovalSummary
from bookmark2vault.schema import ItemResult

from conftest import FakeView, tweet_html


def bookmarks_page(*ids):
    return "<main>" + "".join(tweet_html(i, text=f"post {i}") for i in ids) + "</main>"


class FakeClient:
    def __init__(self, results=None, error=None):
        self.results = results
        self.error = error
        self.batches = []

    def submit(self, bookmarks):
        self.batches.append([b.tweet_id for b in bookmarks])
        if self.error:
            raise self.error
        if self.results is None:
            return [ItemResult(tweet_id=b.tweet_id, success=True) for b in bookmarks]
        return self.results


class FakeRemover:
    def __init__(self, fail=()):
        self.fail = set(fail)
        self.requested = []

    def remove_all(self, tweet_ids, on_result=None):
        summary = RemovalSummary()
        for tweet_id in tweet_ids:
            self.requested.append(tweet_id)
            ok = tweet_id not in self.fail
            (summary.succeeded if ok else summary.failed).append(tweet_id)
            on_result(tweet_id, ok)
        return summary


def orchestrator_for(ids, client=None, remover=None):
    view = FakeView(pages=[(bookmarks_page(*ids), 1000)])
    return Orchestrator(view, client or FakeClient(), remover or FakeRemover())


class TestProcessState:
    def test_reset(self):
        state = ProcessState(phase=Phase.ERROR, total=3, error="x", is_processing=True)
        state.reset()
        assert state == ProcessState()

    def test_snapshot_uses_plain_phase(self):
        assert ProcessState().snapshot()["phase"] == "idle"


class TestOrchestrator:
    def test_happy_path_without_removal(self):
        remover = FakeRemover()
        orchestrator = orchestrator_for(["101", "102"], remover=remover)

        state = orchestrator.run()

        assert state["phase"] == "complete"
        assert state["total"] == 2
        assert state["processed"] == 2
        assert state["succeeded"] == 2
        assert state["is_processing"] is False
        assert remover.requested == []

    def test_removal_only_for_saved_bookmarks(self):
        """Test that a failed save is never unbookmarked."""
        client = FakeClient(results=[
            ItemResult(tweet_id="101", success=True, path="Bookmarks/a.md"),
            ItemResult(tweet_id="102", success=False, error="boom"),
            ItemResult(tweet_id="103", success=True, path="Bookmarks/c.md"),
        ])
        remover = FakeRemover()
        orchestrator = orchestrator_for(["101", "102", "103"], client=client, remover=remover)

        state = orchestrator.run(remove=True)

        assert remover.requested == ["101", "103"]
        assert state["succeeded"] == 2
        assert state["failed"] == 1
        assert state["removal_succeeded"] == 2
        assert state["phase"] == "complete"

    def test_removal_ignores_ids_not_in_batch(self):
        client = FakeClient(results=[
            ItemResult(tweet_id="101", success=True),
            ItemResult(tweet_id="999", success=True),
        ])
        remover = FakeRemover()
        state = orchestrator_for(["101"], client=client, remover=remover).run(remove=True)
        assert remover.requested == ["101"]
        assert state["processed"] == 1
        assert state["succeeded"] == 1
        assert state["failed"] == 0

    def test_repeated_result_counted_once(self):
        client = FakeClient(results=[
            ItemResult(tweet_id="101", success=True),
            ItemResult(tweet_id="101", success=True),
            ItemResult(tweet_id="102", success=True),
        ])
        remover = FakeRemover()
        state = orchestrator_for(["101", "102"], client=client, remover=remover).run(remove=True)

        assert remover.requested == ["101", "102"]
        assert state["processed"] == state["total"] == 2
        assert state["succeeded"] == 2

    def test_removal_failures_counted(self):
        remover = FakeRemover(fail={"102"})
        state = orchestrator_for(["101", "102"], remover=remover).run(remove=True)
        assert state["removal_succeeded"] == 1
        assert state["removal_failed"] == 1
        assert state["phase"] == "complete"

    def test_no_removal_when_nothing_saved(self):
        client = FakeClient(results=[ItemResult(tweet_id="101", success=False)])
        remover = FakeRemover()
        state = orchestrator_for(["101"], client=client, remover=remover).run(remove=True)
        assert remover.requested == []
        assert state["phase"] == "complete"

    def test_transport_failure_aborts_run(self):
        remover = FakeRemover()
        client = FakeClient(error=TransportError("Could not reach server"))
        orchestrator = orchestrator_for(["101"], client=client, remover=remover)

        state = orchestrator.run(remove=True)

        assert state["phase"] == "error"
        assert state["error"] == "Could not reach server"
        assert state["is_processing"] is False
        assert remover.requested == []

    def test_scrape_failure_is_error(self):
        class BrokenView(FakeView):
            def content(self):
                raise TransportError("page closed")

        orchestrator = Orchestrator(BrokenView(), FakeClient(), FakeRemover())
        state = orchestrator.run()
        assert state["phase"] == "error"
        assert state["error"] == "page closed"

    def test_empty_page_completes_without_sending(self):
        client = FakeClient()
        state = orchestrator_for([], client=client).run()
        assert state["phase"] == "complete"
        assert state["total"] == 0
        assert client.batches == []

    def test_scrape_all_pages_through(self):
        view = FakeView(pages=[
            (bookmarks_page("101"), 1000),
            (bookmarks_page("101", "102"), 2000),
        ])
        client = FakeClient()
        state = Orchestrator(view, client, FakeRemover()).run(scrape_everything=True)
        assert client.batches == [["101", "102"]]
        assert state["total"] == 2

    def test_broadcasts_phases_in_order(self):
        orchestrator = orchestrator_for(["101"])
        phases = []
        orchestrator.subscribe(lambda s: phases.append(s["phase"]))

        orchestrator.run(remove=True)

        seen = [p for i, p in enumerate(phases) if i == 0 or phases[i - 1] != p]
        assert seen == ["scraping", "sending", "unbookmarking", "complete"]

    def test_failing_observer_is_ignored(self):
        orchestrator = orchestrator_for(["101"])

        def broken(state):
            raise RuntimeError("popup closed")

        orchestrator.subscribe(broken)
        assert orchestrator.run()["phase"] == "complete"

    def test_concurrent_start_rejected(self):
        """Test that a second run while one is active is refused outright."""
        orchestrator = orchestrator_for(["101"])
        rejected = []

        def start_again(state):
            if state["phase"] == "scraping" and not rejected:
                with pytest.raises(RunInProgressError):
                    orchestrator.run()
                rejected.append(True)

        orchestrator.subscribe(start_again)
        state = orchestrator.run()

        assert rejected == [True]
        assert state["phase"] == "complete"
        assert state["total"] == 1

    def test_runs_are_restartable(self):
        orchestrator = orchestrator_for(["101"])
        orchestrator.run()
        state = orchestrator.run()
        assert state["phase"] == "complete"
        assert state["succeeded"] == 1

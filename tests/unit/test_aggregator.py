"""Tests for the Match Aggregator."""

from __future__ import annotations

from reviewdesk.aggregator import aggregate
from reviewdesk.models import MatchHit, QueueEntry, ReviewStatus, StatusRecord


def _hit(artifact_id: str, line: int, column: int = 1) -> MatchHit:
    return MatchHit(artifact_id=artifact_id, line=line, column=column, preview="")


def _statuses(**by_id: ReviewStatus) -> dict[str, StatusRecord]:
    return {
        artifact_id.replace("_", "."): StatusRecord(artifact_id=artifact_id.replace("_", "."), status=status)
        for artifact_id, status in by_id.items()
    }


class TestAggregate:
    def test_groups_by_artifact_in_first_occurrence_order(self):
        hits = [_hit("b.py", 4), _hit("a.py", 2), _hit("b.py", 9), _hit("a.py", 1), _hit("c.py", 5)]
        queue = aggregate(hits, {}, query_active=True)
        assert [e.artifact_id for e in queue] == ["b.py", "a.py", "c.py"]
        assert [e.match_count for e in queue] == [2, 2, 1]

    def test_first_match_line_is_from_first_hit(self):
        # Not the minimum line: the first hit in sequence order
        queue = aggregate([_hit("a.py", 8), _hit("a.py", 3)], {}, query_active=True)
        assert queue[0].first_match_line == 8

    def test_match_counts_sum_to_hits(self):
        hits = [_hit("a.py", n) for n in range(1, 6)] + [_hit("b.py", 2)]
        queue = aggregate(hits, {}, query_active=True)
        assert sum(e.match_count for e in queue) == len(hits)
        assert len({e.artifact_id for e in queue}) == len(queue)

    def test_statuses_are_attached(self):
        statuses = _statuses(a_py=ReviewStatus.DONE)
        queue = aggregate([_hit("a.py", 1), _hit("b.py", 1)], statuses, query_active=True)
        assert queue[0].status is ReviewStatus.DONE
        assert queue[1].status is ReviewStatus.TODO

    def test_status_only_artifacts_are_not_added_to_search_results(self):
        statuses = _statuses(a_py=ReviewStatus.DONE, z_py=ReviewStatus.IN_PROGRESS)
        queue = aggregate([_hit("a.py", 1)], statuses, query_active=True)
        assert [e.artifact_id for e in queue] == ["a.py"]

    def test_active_query_without_hits_is_empty(self):
        statuses = _statuses(a_py=ReviewStatus.DONE)
        assert aggregate([], statuses, query_active=True) == []

    def test_fallback_lists_every_tracked_artifact(self):
        statuses = _statuses(x_py=ReviewStatus.DONE, y_py=ReviewStatus.TODO)
        queue = aggregate([], statuses, query_active=False)
        assert queue == [
            QueueEntry(artifact_id="x.py", match_count=0, first_match_line=1, status=ReviewStatus.DONE),
            QueueEntry(artifact_id="y.py", match_count=0, first_match_line=1, status=ReviewStatus.TODO),
        ]

    def test_fallback_keys_equal_status_keys(self):
        statuses = _statuses(
            a_py=ReviewStatus.TODO, b_py=ReviewStatus.IN_PROGRESS, c_py=ReviewStatus.DONE,
        )
        queue = aggregate([], statuses, query_active=False)
        assert [e.artifact_id for e in queue] == list(statuses)

    def test_nothing_at_all(self):
        assert aggregate([], {}, query_active=False) == []

    def test_hits_win_over_fallback_even_without_query(self):
        statuses = _statuses(x_py=ReviewStatus.DONE)
        queue = aggregate([_hit("a.py", 2)], statuses, query_active=False)
        assert [e.artifact_id for e in queue] == ["a.py"]

    def test_accepts_any_iterable(self):
        queue = aggregate(iter([_hit("a.py", 2), _hit("a.py", 3)]), {}, query_active=True)
        assert queue == [QueueEntry(artifact_id="a.py", match_count=2, first_match_line=2)]

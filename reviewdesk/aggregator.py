"""Match Aggregator -- turns raw search hits into the review work queue."""

from __future__ import annotations

from typing import Iterable, Mapping

from reviewdesk.models import MatchHit, QueueEntry, ReviewStatus, StatusRecord


def aggregate(
    hits: Iterable[MatchHit],
    statuses: Mapping[str, StatusRecord],
    query_active: bool,
) -> list[QueueEntry]:
    """Build one queue entry per artifact.

    Entries appear in first-occurrence order of the hit sequence.  With no
    hits and no active query the queue falls back to every artifact in the
    status mapping (zero matches, line 1, store order), so previously triaged
    work stays reachable without a search.
    """
    counts: dict[str, int] = {}
    first_lines: dict[str, int] = {}

    for hit in hits:
        if hit.artifact_id not in counts:
            counts[hit.artifact_id] = 0
            first_lines[hit.artifact_id] = hit.line
        counts[hit.artifact_id] += 1

    if counts:
        return [
            QueueEntry(
                artifact_id=artifact_id,
                match_count=count,
                first_match_line=first_lines[artifact_id],
                status=_status(statuses, artifact_id),
            )
            for artifact_id, count in counts.items()
        ]

    if query_active:
        return []

    return [
        QueueEntry(artifact_id=artifact_id, match_count=0, first_match_line=1, status=record.status)
        for artifact_id, record in statuses.items()
    ]


def _status(statuses: Mapping[str, StatusRecord], artifact_id: str) -> ReviewStatus:
    record = statuses.get(artifact_id)
    return record.status if record else ReviewStatus.TODO

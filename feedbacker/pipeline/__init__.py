"""Ingestion pipeline for voice feedback submissions.

Components:
- IngestionPipeline: Stage orchestration with guaranteed temp cleanup
- Submission / Accepted / Rejected / RejectReason: Inputs and outcomes
- merge: Escalation and tag merging into the final annotation
"""

from feedbacker.pipeline.merge import Annotation, merge
from feedbacker.pipeline.outcomes import (
    Accepted,
    Outcome,
    Rejected,
    RejectReason,
    Submission,
)
from feedbacker.pipeline.service import IngestionPipeline

__all__ = [
    "Accepted",
    "Annotation",
    "IngestionPipeline",
    "Outcome",
    "RejectReason",
    "Rejected",
    "Submission",
    "merge",
]

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

# outcome recorded when processing a loan raised
FAILED = "failed"


@dataclass
class JobRunReport:
    """Per-outcome tally of one scheduler run."""

    job: str
    started_at: datetime
    mutating_outcomes: frozenset[str]
    outcomes: Counter = field(default_factory=Counter)
    failed_loan_ids: list[int] = field(default_factory=list)

    def record(self, loan_id: int, outcome: str) -> None:
        self.outcomes[outcome] += 1
        if outcome == FAILED:
            self.failed_loan_ids.append(loan_id)

    @property
    def processed(self) -> int:
        return sum(self.outcomes.values())

    @property
    def updated(self) -> int:
        return sum(n for o, n in self.outcomes.items() if o in self.mutating_outcomes)

    @property
    def failed(self) -> int:
        return self.outcomes[FAILED]

    @property
    def skipped(self) -> int:
        return self.processed - self.updated - self.failed

    def to_dict(self) -> dict:
        return {
            "job": self.job,
            "started_at": self.started_at,
            "processed": self.processed,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
            "outcomes": dict(self.outcomes),
        }

from pydantic import BaseModel
from datetime import datetime


class JobRunOut(BaseModel):
    job: str
    started_at: datetime
    processed: int
    updated: int
    skipped: int
    failed: int
    outcomes: dict[str, int]

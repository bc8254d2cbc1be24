from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Optional, List


class SlabIn(BaseModel):
    start_day: int = Field(ge=0)
    end_day: int = Field(ge=0)
    interest_rate: float = Field(gt=0)


class SchemeCreate(BaseModel):
    scheme_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    created_by: Optional[str] = None
    slabs: List[SlabIn] = Field(min_length=1)

    @model_validator(mode="after")
    def slabs_contiguous(self):
        ordered = sorted(self.slabs, key=lambda s: s.start_day)
        for slab in ordered:
            if slab.end_day < slab.start_day:
                raise ValueError(f"slab {slab.start_day}-{slab.end_day}: end_day before start_day")
        for prev, nxt in zip(ordered, ordered[1:]):
            if nxt.start_day != prev.end_day + 1:
                raise ValueError(
                    f"slabs must be contiguous and non-overlapping: "
                    f"{prev.start_day}-{prev.end_day} then {nxt.start_day}-{nxt.end_day}"
                )
        self.slabs = ordered
        return self


class SchemeUpdate(SchemeCreate):
    pass


class SlabOut(BaseModel):
    slab_id: int
    start_day: int
    end_day: int
    interest_rate: float

    class Config:
        from_attributes = True


class SchemeOut(BaseModel):
    scheme_id: int
    scheme_name: str
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_on: Optional[datetime] = None
    slabs: List[SlabOut] = []

    class Config:
        from_attributes = True

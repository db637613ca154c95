from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField


class FeedbackBase(BaseModel):
    rating: int = PydanticField(..., ge=1, le=5)
    comment: Optional[str] = None
    reviewer_name: Optional[str] = PydanticField(None, max_length=120)


class FeedbackCreate(FeedbackBase):
    pass


class FeedbackUpdate(FeedbackBase):
    pass


class FeedbackResponse(FeedbackBase):
    id: int
    business_id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FeedbackMeta(BaseModel):
    count: int
    avg_rating: float


class FeedbackList(BaseModel):
    feedback: List[FeedbackResponse]
    meta: FeedbackMeta

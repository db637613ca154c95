from fastapi import APIRouter, status
from sqlalchemy import select

from bizdir.api.v1.endpoints.businesses import get_business_or_404
from bizdir.core.dependencies import DBDependency
from bizdir.core.exceptions.errors import NotFoundError
from bizdir.core.responses import send_success
from bizdir.db.models.feedback import Feedback
from bizdir.db.schemas.feedback import (
    FeedbackCreate,
    FeedbackList,
    FeedbackMeta,
    FeedbackResponse,
    FeedbackUpdate,
)

router = APIRouter(tags=["feedback"])


async def get_feedback_or_404(db, feedback_id: int) -> Feedback:
    feedback = await db.get(Feedback, feedback_id)
    if not feedback:
        raise NotFoundError("Feedback not found")
    return feedback


@router.post("/businesses/{business_id}/feedback", status_code=status.HTTP_201_CREATED)
async def create_feedback(business_id: int, feedback_data: FeedbackCreate, db: DBDependency):
    await get_business_or_404(db, business_id)
    feedback = Feedback(business_id=business_id, **feedback_data.model_dump())
    db.add(feedback)
    await db.commit()
    await db.refresh(feedback)
    return send_success(
        message="Feedback created",
        data=FeedbackResponse.model_validate(feedback),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/businesses/{business_id}/feedback")
async def list_feedback(business_id: int, db: DBDependency):
    await get_business_or_404(db, business_id)
    result = await db.execute(
        select(Feedback)
        .where(Feedback.business_id == business_id)
        .order_by(Feedback.created_at.desc(), Feedback.id.desc())
    )
    feedback = [FeedbackResponse.model_validate(f) for f in result.scalars().all()]
    avg_rating = sum(f.rating for f in feedback) / len(feedback) if feedback else 0
    return send_success(
        data=FeedbackList(
            feedback=feedback,
            meta=FeedbackMeta(count=len(feedback), avg_rating=round(avg_rating, 1)),
        )
    )


@router.put("/feedback/{feedback_id}")
async def update_feedback(feedback_id: int, feedback_data: FeedbackUpdate, db: DBDependency):
    feedback = await get_feedback_or_404(db, feedback_id)
    for field, value in feedback_data.model_dump().items():
        setattr(feedback, field, value)
    await db.commit()
    await db.refresh(feedback)
    return send_success(
        message="Feedback updated", data=FeedbackResponse.model_validate(feedback)
    )


@router.delete("/feedback/{feedback_id}")
async def delete_feedback(feedback_id: int, db: DBDependency):
    feedback = await get_feedback_or_404(db, feedback_id)
    await db.delete(feedback)
    await db.commit()
    return send_success(message="Feedback deleted successfully")

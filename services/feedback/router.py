"""
services/feedback/router.py
Public app feedback: anyone may submit or read it.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from shared.models.models import Feedback
from shared.schemas.schemas import FeedbackCreateRequest, FeedbackResponse

router = APIRouter(prefix="/feedback", tags=["Feedback"])


@router.post("", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
async def submit_feedback(data: FeedbackCreateRequest, db: AsyncSession = Depends(get_db)):
    feedback = Feedback(name=data.name.strip(), comment=data.comment.strip(), stars=data.stars)
    db.add(feedback)
    await db.commit()
    return FeedbackResponse.model_validate(feedback)


@router.get("", response_model=list[FeedbackResponse])
async def list_feedback(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Feedback).order_by(Feedback.created_at.desc()))
    return [FeedbackResponse.model_validate(f) for f in result.scalars()]

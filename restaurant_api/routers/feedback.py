"""
Feedback Routes

Route prefix: /api/feedback
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_api.database import get_db
from restaurant_api.schemas import ErrorResponse, FeedbackCreate, FeedbackResponse
from restaurant_api.services.catalog import FeedbackService

router = APIRouter(prefix="/api/feedback", tags=["Feedback"])


@router.post(
    "",
    response_model=FeedbackResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def submit_feedback(
    data: FeedbackCreate,
    db: AsyncSession = Depends(get_db),
) -> FeedbackResponse:
    feedback = await FeedbackService(db).submit(data)
    return FeedbackResponse.model_validate(feedback)


@router.get("", response_model=list[FeedbackResponse])
async def list_feedback(db: AsyncSession = Depends(get_db)) -> list[FeedbackResponse]:
    """All feedback, newest first."""
    return [FeedbackResponse.model_validate(f) for f in await FeedbackService(db).list_all()]

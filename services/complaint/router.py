"""
services/complaint/router.py
Customer complaints and the provider dashboard that triages them.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from config.database import get_db
from shared.middleware.auth import acts_as_customer, acts_as_provider
from shared.models.models import Complaint, ComplaintStatus, Customer, Provider
from shared.schemas.schemas import ComplaintCreateRequest, ComplaintResponse, ComplaintStatusRequest
from shared.utils.errors import NotFound

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/complaints", tags=["Complaints"])


async def _get_complaint_or_404(complaint_id: UUID, db: AsyncSession) -> Complaint:
    complaint = await db.scalar(
        select(Complaint)
        .options(selectinload(Complaint.customer))
        .where(Complaint.id == complaint_id)
        .execution_options(populate_existing=True)
    )
    if not complaint:
        raise NotFound("Complaint not found")
    return complaint


@router.post("/create", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    data: ComplaintCreateRequest,
    current_customer: Customer = Depends(acts_as_customer),
    db: AsyncSession = Depends(get_db),
):
    complaint = Complaint(
        customer_id=current_customer.id,
        title=data.title.strip(),
        description=data.description.strip(),
        service_type=data.service_type,
        date_of_service=data.date_of_service,
        status=ComplaintStatus.PENDING,
    )
    db.add(complaint)
    await db.commit()
    logger.info("Complaint %s filed by customer %s", complaint.id, current_customer.id)
    return ComplaintResponse.model_validate(await _get_complaint_or_404(complaint.id, db))


@router.get("/provider", response_model=list[ComplaintResponse])
async def list_complaints(
    current_provider: Provider = Depends(acts_as_provider),
    db: AsyncSession = Depends(get_db),
):
    """Every complaint, newest first, with the filing customer's name and email."""
    result = await db.execute(
        select(Complaint)
        .options(selectinload(Complaint.customer))
        .order_by(Complaint.created_at.desc())
    )
    return [ComplaintResponse.model_validate(c) for c in result.scalars()]


@router.put("/{complaint_id}/status", response_model=ComplaintResponse)
async def update_complaint_status(
    complaint_id: UUID,
    data: ComplaintStatusRequest,
    current_provider: Provider = Depends(acts_as_provider),
    db: AsyncSession = Depends(get_db),
):
    complaint = await _get_complaint_or_404(complaint_id, db)
    complaint.status = ComplaintStatus(data.status)
    await db.commit()
    logger.info("Complaint %s set to %s by provider %s", complaint.id, data.status, current_provider.id)
    return ComplaintResponse.model_validate(complaint)

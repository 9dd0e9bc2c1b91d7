"""Admin partner company endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db import get_db
from src.models import Company

router = APIRouter(prefix="/companies")


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    organisation_number: Optional[str] = Field(None, max_length=20)
    contact_email: Optional[str] = Field(None, max_length=255)
    contact_phone: Optional[str] = Field(None, max_length=50)


class CompanyResponse(BaseModel):
    id: int
    name: str
    organisation_number: Optional[str]
    contact_email: Optional[str]
    contact_phone: Optional[str]
    active: bool

    model_config = {"from_attributes": True}


@router.get("", response_model=List[CompanyResponse])
async def list_companies(
    db: AsyncSession = Depends(get_db),
    include_inactive: bool = False,
):
    """List partner companies."""
    query = select(Company).order_by(Company.name)
    if not include_inactive:
        query = query.where(Company.active.is_(True))
    result = await db.execute(query)
    return result.scalars().all()


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    data: CompanyCreate,
    db: AsyncSession = Depends(get_db),
):
    """Register a partner company."""
    existing = await db.execute(select(Company).where(Company.name == data.name))
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Company already exists",
        )

    company = Company(**data.model_dump(), active=True)
    db.add(company)
    await db.commit()
    await db.refresh(company)
    return company

"""
CRUD operations for companies (tenants).
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from app.models.company import Company


def create(db: Session, name: str) -> Company:
    company = Company(name=name)
    db.add(company)
    db.flush()
    return company


def get(db: Session, company_id: UUID) -> Optional[Company]:
    return db.query(Company).filter(Company.id == company_id).first()


def get_active(db: Session) -> List[Company]:
    return db.query(Company).filter(Company.is_active.is_(True)).order_by(Company.created_at.asc()).all()

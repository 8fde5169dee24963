from fastapi import Depends
from sqlalchemy.orm import Session
from billing.database import get_db
from billing.repositories.sql_repository import SqlBillingRepository


def get_repository(db: Session = Depends(get_db)) -> SqlBillingRepository:
    return SqlBillingRepository(db)

from typing import List
from sqlalchemy.orm import Session

from ..models.property import Property


class SqlPropertyDirectory:
    def __init__(self, db: Session):
        self.db = db

    def list_active(self) -> List[Property]:
        """Active properties, oldest first so the default property is stable"""
        return self.db.query(Property).filter(
            Property.is_active == True
        ).order_by(Property.created_at, Property.name).all()

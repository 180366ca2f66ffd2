"""Singleton settings rows (countdown, gallery-enabled flag).

Each of these tables holds at most one logical record. ``SingletonRecord``
owns the fixed key so callers only ever ``get`` or ``upsert``; an upsert
replaces every column, falling back to the declared defaults for anything
the caller leaves out.
"""

from typing import Any, Dict, Optional, Type

from sqlalchemy.orm import Session

SINGLETON_KEY = 1


class SingletonRecord:
    def __init__(self, model: Type, defaults: Dict[str, Any]):
        self.model = model
        self.defaults = dict(defaults)

    def get(self, db: Session) -> Optional[Any]:
        return db.get(self.model, SINGLETON_KEY)

    def values(self, db: Session) -> Dict[str, Any]:
        """Current column values, or the defaults if the row was never written."""
        row = self.get(db)
        if row is None:
            return dict(self.defaults)
        return {col: getattr(row, col) for col in self.defaults}

    def upsert(self, db: Session, values: Dict[str, Any]) -> Any:
        unknown = set(values) - set(self.defaults)
        if unknown:
            raise ValueError(f"Unknown {self.model.__tablename__} fields: {sorted(unknown)}")
        full = {col: values.get(col, default) for col, default in self.defaults.items()}
        row = self.get(db)
        if row is None:
            row = self.model(id=SINGLETON_KEY, **full)
            db.add(row)
        else:
            for col, value in full.items():
                setattr(row, col, value)
        db.commit()
        db.refresh(row)
        return row

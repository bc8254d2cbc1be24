import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gold_finance.utils.database import get_db
from gold_finance.models.scheme_model import Scheme, SchemeSlab
from gold_finance.schemas.scheme_schema import SchemeCreate, SchemeUpdate, SchemeOut

router = APIRouter(prefix="/schemes", tags=["Schemes"])

logger = logging.getLogger(__name__)


def _slab_rows(payload: SchemeCreate) -> list[SchemeSlab]:
    return [
        SchemeSlab(start_day=s.start_day, end_day=s.end_day, interest_rate=Decimal(str(s.interest_rate)))
        for s in payload.slabs
    ]


@router.get("", response_model=list[SchemeOut])
def list_schemes(db: Session = Depends(get_db)):
    return db.query(Scheme).order_by(Scheme.scheme_name.asc()).all()


@router.post("", response_model=SchemeOut, status_code=status.HTTP_201_CREATED)
def create_scheme(payload: SchemeCreate, db: Session = Depends(get_db)):
    name = payload.scheme_name.strip()
    exists = db.query(Scheme).filter(Scheme.scheme_name == name).first()
    if exists:
        raise HTTPException(409, "Scheme name already exists")

    scheme = Scheme(
        scheme_name=name,
        description=payload.description,
        created_by=payload.created_by,
        updated_by=payload.created_by,
        slabs=_slab_rows(payload),
    )
    db.add(scheme)
    db.commit()
    db.refresh(scheme)

    logger.info("[SCHEME] Created scheme #%s '%s' with %d slab(s).", scheme.scheme_id, name, len(scheme.slabs))
    return scheme


@router.get("/{scheme_id}", response_model=SchemeOut)
def get_scheme(scheme_id: int, db: Session = Depends(get_db)):
    scheme = db.query(Scheme).filter(Scheme.scheme_id == scheme_id).first()
    if not scheme:
        raise HTTPException(404, "Scheme not found")
    return scheme


@router.put("/{scheme_id}", response_model=SchemeOut)
def update_scheme(scheme_id: int, payload: SchemeUpdate, db: Session = Depends(get_db)):
    scheme = db.query(Scheme).filter(Scheme.scheme_id == scheme_id).first()
    if not scheme:
        raise HTTPException(404, "Scheme not found")

    name = payload.scheme_name.strip()
    clash = (
        db.query(Scheme)
        .filter(Scheme.scheme_name == name, Scheme.scheme_id != scheme_id)
        .first()
    )
    if clash:
        raise HTTPException(409, "Scheme name already exists")

    try:
        scheme.scheme_name = name
        scheme.description = payload.description
        scheme.updated_by = payload.created_by
        # replace the whole slab table
        scheme.slabs.clear()
        db.flush()
        scheme.slabs.extend(_slab_rows(payload))
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(scheme)
    logger.info("[SCHEME] Updated scheme #%s; now %d slab(s).", scheme_id, len(scheme.slabs))
    return scheme

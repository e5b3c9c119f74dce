from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from schemas.packing_slip import (
    PackingSlip, PackingSlipCreate, PackingSlipUpdate,
    AllocationPreview, AllocationPreviewRequest
)
from crud import packing_slip
from crud.errors import (
    FulfillmentError, ItemNotFound, SlipNotFound,
    ValidationError, InsufficientStock, SlipCompleted
)

router = APIRouter()

ERROR_STATUS = {
    ItemNotFound: 404,
    SlipNotFound: 404,
    ValidationError: 400,
    InsufficientStock: 409,
    SlipCompleted: 409,
}

def to_http_error(error: FulfillmentError) -> HTTPException:
    return HTTPException(status_code=ERROR_STATUS.get(type(error), 400), detail=error.message)

@router.get("/", response_model=List[PackingSlip])
def list_packing_slips(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return packing_slip.get_packing_slips(db, skip, limit)

@router.post("/", response_model=PackingSlip)
def create_packing_slip(slip: PackingSlipCreate, db: Session = Depends(get_db)):
    try:
        return packing_slip.create_packing_slip(db, slip)
    except FulfillmentError as e:
        raise to_http_error(e)

@router.post("/preview", response_model=AllocationPreview)
def preview_packing_slip(request: AllocationPreviewRequest, db: Session = Depends(get_db)):
    try:
        return packing_slip.preview_allocation(db, request.items)
    except FulfillmentError as e:
        raise to_http_error(e)

@router.get("/{slip_id}", response_model=PackingSlip)
def get_packing_slip(slip_id: int, db: Session = Depends(get_db)):
    db_slip = packing_slip.get_packing_slip(db, slip_id)
    if not db_slip:
        raise HTTPException(status_code=404, detail="Packing slip not found")
    return db_slip

@router.put("/{slip_id}", response_model=PackingSlip)
def update_packing_slip(slip_id: int, slip_update: PackingSlipUpdate, db: Session = Depends(get_db)):
    try:
        return packing_slip.update_packing_slip(db, slip_id, slip_update)
    except FulfillmentError as e:
        raise to_http_error(e)

@router.post("/{slip_id}/complete", response_model=PackingSlip)
def complete_packing_slip(slip_id: int, db: Session = Depends(get_db)):
    try:
        return packing_slip.complete_packing_slip(db, slip_id)
    except FulfillmentError as e:
        raise to_http_error(e)

@router.delete("/{slip_id}")
def cancel_packing_slip(slip_id: int, db: Session = Depends(get_db)):
    try:
        packing_slip.cancel_packing_slip(db, slip_id)
    except FulfillmentError as e:
        raise to_http_error(e)
    return {"message": "Packing slip cancelled successfully"}

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from database import get_db
from deps import RequireAction
from errors import ValidationFailed
from payroll import estimate_payroll
from permissions import Action
from responses import envelope

router = APIRouter(prefix="/api/payroll", tags=["payroll"])


@router.get("")
async def get_payroll_estimate(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    admin=Depends(RequireAction(Action.MANAGE_PAYROLL)),
    db=Depends(get_db),
):
    if start_date and end_date and end_date < start_date:
        raise ValidationFailed.field("end_date", "End date must not be before the start date")
    return envelope(estimate_payroll(db, start_date, end_date), "Payroll estimate calculated")

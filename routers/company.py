from fastapi import APIRouter, Depends

from database import get_db
from deps import RequireAction, get_current_user
from models import PolicyUpdate
from permissions import Action
from policy import get_policy, reset_policy, update_policy
from responses import envelope

router = APIRouter(prefix="/api/settings", tags=["settings"])

get_settings_admin = RequireAction(Action.MANAGE_SETTINGS)


@router.get("")
async def get_company_settings(user=Depends(get_current_user), db=Depends(get_db)):
    return envelope(get_policy(db), "Settings retrieved successfully")


@router.put("")
async def put_company_settings(payload: PolicyUpdate, admin=Depends(get_settings_admin), db=Depends(get_db)):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    return envelope(update_policy(db, changes), "Settings updated successfully")


@router.post("/reset")
async def post_reset_settings(admin=Depends(get_settings_admin), db=Depends(get_db)):
    return envelope(reset_policy(db), "Settings reset to defaults")

from fastapi import APIRouter, Depends

from database import get_db
from deps import RequireAction, get_current_user
from errors import NotFound
from models import LocationCreate
from permissions import Action
from responses import envelope

router = APIRouter(prefix="/api/locations", tags=["locations"])


@router.get("")
async def get_locations(user=Depends(get_current_user), db=Depends(get_db)):
    return envelope(db.locations.find(sort="name"), "Locations retrieved successfully")


@router.get("/{location_id}")
async def get_location(location_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    location = db.locations.get(location_id)
    if not location:
        raise NotFound("Location not found")
    return envelope(location, "Location retrieved successfully")


@router.post("", status_code=201)
async def post_location(
    payload: LocationCreate,
    admin=Depends(RequireAction(Action.MANAGE_LOCATIONS)),
    db=Depends(get_db),
):
    location = db.locations.insert_one(payload.model_dump())
    return envelope(location, "Location created successfully")

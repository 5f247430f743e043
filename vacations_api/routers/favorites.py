from fastapi import APIRouter, Depends, HTTPException

from vacations_api.routers.deps import get_current_user
from vacations_api.services.favorite_service import (
    AlreadyFavoriteError,
    FavoriteNotFoundError,
    FavoriteService,
    InvalidFavoriteError,
    TripNotFoundError,
)

router = APIRouter(prefix="/api/favorites", tags=["favorites"])
favorite_service = FavoriteService()


@router.post("", status_code=201)
def add_favorite(payload: dict, user: dict = Depends(get_current_user)):
    try:
        return favorite_service.add(user["id"], payload.get("tripId"))
    except InvalidFavoriteError as exc:
        raise HTTPException(400, str(exc))
    except TripNotFoundError:
        raise HTTPException(404, "Trip not found")
    except AlreadyFavoriteError as exc:
        raise HTTPException(409, str(exc))


@router.get("")
def list_favorites(user: dict = Depends(get_current_user)):
    return favorite_service.list_for(user["id"])


@router.delete("/{favorite_id}")
def remove_favorite(favorite_id: str, user: dict = Depends(get_current_user)):
    try:
        favorite_service.remove(user["id"], favorite_id)
    except FavoriteNotFoundError:
        raise HTTPException(404, "Favorite not found")
    return {"success": True}

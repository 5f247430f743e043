"""Saved trips per user."""
from __future__ import annotations

from dataclasses import dataclass

from vacations_api.core.utils import new_id, now_iso
from vacations_api.repositories.json_storage import JsonStore, get_store
from vacations_api.services.activity_service import track_user_action


class FavoriteError(Exception):
    pass


class InvalidFavoriteError(FavoriteError):
    pass


class FavoriteNotFoundError(FavoriteError):
    pass


class TripNotFoundError(FavoriteError):
    pass


class AlreadyFavoriteError(FavoriteError):
    pass


@dataclass
class FavoriteService:
    @property
    def store(self) -> JsonStore:
        return get_store()

    def add(self, user_id: str, trip_id: str | None) -> dict:
        if not trip_id:
            raise InvalidFavoriteError("Trip ID is required")
        trip = self.store.get("trips").find({"id": trip_id}).value()
        if not trip:
            raise TripNotFoundError("Trip not found")
        favorites = self.store.get("favorites")
        if favorites.find({"userId": user_id, "tripId": trip_id}).value():
            raise AlreadyFavoriteError("Trip is already in favorites")
        favorite = {"id": new_id(), "userId": user_id, "tripId": trip_id, "createdAt": now_iso()}
        favorites.push(favorite).write()
        track_user_action(user_id, "add_favorite", f"Saved {trip.get('destination')}", {"tripId": trip_id})
        return favorite

    def list_for(self, user_id: str) -> list[dict]:
        """Favorites joined with their trip; favorites whose trip is gone are skipped."""
        trips = self.store.get("trips")
        result = []
        for favorite in self.store.get("favorites").filter({"userId": user_id}).value():
            trip = trips.find({"id": favorite.get("tripId")}).value()
            if trip:
                result.append({"favoriteId": favorite["id"], "createdAt": favorite.get("createdAt"), "trip": trip})
        return result

    def remove(self, user_id: str, favorite_id: str) -> None:
        favorites = self.store.get("favorites")
        favorite = favorites.find({"id": favorite_id, "userId": user_id}).value()
        if not favorite:
            raise FavoriteNotFoundError("Favorite not found")
        favorites.remove({"id": favorite_id}).write()
        track_user_action(user_id, "remove_favorite", "Removed a saved trip", {"tripId": favorite.get("tripId")})

import logging

from .api import BurrowApi
from .schemas import Property
from .state import Slice

logger = logging.getLogger(__name__)


class FavoritesSlice(Slice):
    """Saved properties. Membership changes only after the server confirms."""

    name = "favorites"

    def __init__(self, api: BurrowApi):
        super().__init__()
        self.api = api
        self.favorites: list[Property] = []
        self.favorite_ids: list[str] = []

    def fetch(self) -> bool:
        def apply(data):
            self.favorites = [Property.model_validate(p) for p in (data or {}).get("favorites", [])]
            self.favorite_ids = [p.id for p in self.favorites]
        return self.run("fetchFavorites", self.api.list_favorites, apply)

    def add(self, property_id: str) -> bool:
        def apply(data):
            prop = Property.model_validate(data["property"])
            if prop.id not in self.favorite_ids:
                self.favorites.append(prop)
                self.favorite_ids.append(prop.id)
        return self.run("addToFavorites", lambda: self.api.add_favorite(property_id), apply)

    def remove(self, property_id: str) -> bool:
        def apply(_):
            self.favorites = [p for p in self.favorites if p.id != property_id]
            self.favorite_ids = [i for i in self.favorite_ids if i != property_id]
        return self.run("removeFromFavorites", lambda: self.api.remove_favorite(property_id), apply)

    def toggle(self, property_id: str) -> bool:
        logger.debug("Toggling favorite %s (currently %s)", property_id, self.is_favorited(property_id))
        if self.is_favorited(property_id):
            return self.remove(property_id)
        return self.add(property_id)

    def is_favorited(self, property_id: str) -> bool:
        return property_id in self.favorite_ids

    def reset(self) -> None:
        super().reset()
        self.favorites = []
        self.favorite_ids = []

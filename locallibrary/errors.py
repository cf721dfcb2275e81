class CatalogError(Exception):
    """Base class for store-level conflicts the handlers resolve themselves"""


class DuplicateGenreName(CatalogError):
    """Raised when a genre insert or rename collides with an existing name"""

    def __init__(self, existing):
        self.existing = existing
        name = getattr(existing, 'name', None)
        super().__init__(f'Genre "{name}" already exists')


class GenreInUse(CatalogError):
    """Raised when the store refuses to delete a genre that books still reference"""

    def __init__(self, genre_id):
        self.genre_id = genre_id
        super().__init__(f'Genre {genre_id} is still referenced by books')

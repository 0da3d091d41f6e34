from glacier.db.models.film import Film
from glacier.db.models.export import Export
from glacier.db.models.thumbnail import Thumbnail

__all__ = ["Film", "Export", "Thumbnail"]

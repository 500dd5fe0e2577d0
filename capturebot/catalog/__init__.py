"""Site Catalog: provider/source configuration records."""
from .models import Action, Provider, Source
from .catalog import SiteCatalog

__all__ = (
    "Action",
    "Provider",
    "Source",
    "SiteCatalog",
)

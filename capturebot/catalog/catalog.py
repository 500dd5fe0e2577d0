"""
SiteCatalog: resolves provider and source ids to their configuration records.

The catalog is an in-memory index that can be built from Python objects
(which allows callable URL builders) or loaded from a YAML/JSON document
shaped as::

    providers:
      <provider_id>: {name: ..., defaultSource: ..., params: {...}, login: [...]}
    sources:
      <source_id>: {start: ..., loggedIn: ..., defaultParams: {...}, search: [...]}
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiofiles
import yaml
from pydantic import ValidationError

from ..exceptions import CatalogError
from .models import Provider, Source


class SiteCatalog:
    """Read-only lookup of ``Provider`` and ``Source`` records.

    Args:
        providers: Provider records keyed by provider id.
        sources: Source records keyed by source id.
    """

    def __init__(
        self,
        providers: Optional[Dict[str, Provider]] = None,
        sources: Optional[Dict[str, Source]] = None,
    ) -> None:
        self._providers: Dict[str, Provider] = dict(providers or {})
        self._sources: Dict[str, Source] = dict(sources or {})
        self.logger = logging.getLogger(__name__)

    def provider(self, provider_id: str) -> Provider:
        """Return the provider registered as ``provider_id``.

        Raises:
            CatalogError: If the id is unknown.
        """
        try:
            return self._providers[provider_id]
        except KeyError:
            raise CatalogError(
                f"Unknown provider: {provider_id!r}",
                provider=provider_id
            ) from None

    def source(self, source_id: str) -> Source:
        """Return the source registered as ``source_id``.

        Raises:
            CatalogError: If the id is unknown.
        """
        try:
            return self._sources[source_id]
        except KeyError:
            raise CatalogError(
                f"Unknown source: {source_id!r}",
                source=source_id
            ) from None

    def register_provider(self, provider_id: str, provider: Union[Provider, Dict[str, Any]]) -> Provider:
        if isinstance(provider, dict):
            provider = self._validate(Provider, provider_id, provider)
        self._providers[provider_id] = provider
        self.logger.debug("Registered provider %s", provider_id)
        return provider

    def register_source(self, source_id: str, source: Union[Source, Dict[str, Any]]) -> Source:
        if isinstance(source, dict):
            source = self._validate(Source, source_id, source)
        self._sources[source_id] = source
        self.logger.debug("Registered source %s", source_id)
        return source

    def list_providers(self) -> List[str]:
        return sorted(self._providers)

    def list_sources(self) -> List[str]:
        return sorted(self._sources)

    @staticmethod
    def _validate(model: Any, entry_id: str, data: Dict[str, Any]) -> Any:
        data = dict(data)
        data.setdefault("name", entry_id)
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise CatalogError(
                f"Invalid {model.__name__.lower()} {entry_id!r}: {exc}"
            ) from exc

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SiteCatalog:
        """Build a catalog from a ``{providers: ..., sources: ...}`` mapping."""
        if not isinstance(data, dict):
            raise CatalogError("Catalog document must be a mapping")
        catalog = cls()
        for source_id, entry in (data.get("sources") or {}).items():
            catalog.register_source(source_id, entry)
        for provider_id, entry in (data.get("providers") or {}).items():
            catalog.register_provider(provider_id, entry)
        return catalog

    @classmethod
    async def load(cls, path: Union[str, Path]) -> SiteCatalog:
        """Load a catalog from a YAML or JSON file.

        Args:
            path: Catalog file; ``.json`` files are parsed as JSON,
                everything else as YAML.

        Raises:
            CatalogError: If the file is missing or cannot be parsed.
        """
        path = Path(path)
        if not path.exists():
            raise CatalogError(f"Catalog file not found: {path}")
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            raw = await f.read()
        try:
            if path.suffix == ".json":
                data = json.loads(raw)
            else:
                data = yaml.safe_load(raw)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise CatalogError(f"Unable to parse catalog {path}: {exc}") from exc
        catalog = cls.from_dict(data or {})
        catalog.logger.info(
            "Loaded %d providers and %d sources from %s",
            len(catalog._providers),
            len(catalog._sources),
            path,
        )
        return catalog

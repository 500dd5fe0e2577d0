"""
Parameter layering for a run.

Two derived mappings feed a run: the *effective parameters* used by URL
construction, and the *user data* handed to the Action Executor (library
name, credentials and other provider options).
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..catalog.models import Provider


def merge_params(
    source_defaults: Optional[Mapping[str, Any]],
    provider_params: Optional[Mapping[str, Any]],
    call_params: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """Shallow-merge the three parameter layers of a run.

    Later layers win on key collision; ``None`` layers are skipped and no
    input mapping is mutated.

    Args:
        source_defaults: ``Source.default_params``.
        provider_params: ``Provider.params[source_id]``.
        call_params: Parameters supplied for this call.

    Returns:
        A new dictionary with the effective parameters.
    """
    merged: Dict[str, Any] = {}
    for layer in (source_defaults, provider_params, call_params):
        if layer:
            merged.update(layer)
    return merged


def build_user_data(
    provider_id: str,
    provider: Provider,
    options: Optional[Mapping[str, Any]] = None,
) -> Mapping[str, Any]:
    """Build the read-only user data of a run.

    Starts from ``{"bibName": provider.bib_name or provider.name}``, layers
    the caller's provider options on top and finally applies every option
    namespaced as ``"<provider_id>.<key>"`` onto ``<key>``.
    """
    data: Dict[str, Any] = {"bibName": provider.bib_name or provider.name}
    data.update(options or {})
    prefix = f"{provider_id}."
    for key, value in list(data.items()):
        if key.startswith(prefix) and value is not None:
            data[key[len(prefix):]] = value
    return MappingProxyType(data)

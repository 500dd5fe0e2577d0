"""URL construction for run start pages and navigating actions.

Templates carry ``{placeholder}`` markers. Article metadata is substituted
without a namespace (``{doi}``), effective parameters under the ``source``
namespace (``{source.query}``). Callable URLs bypass templating entirely.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Mapping, Optional
from urllib.parse import quote


_PLACEHOLDER = re.compile(r"\{([A-Za-z0-9_.\-]+)\}")
# punctuation kept unescaped inside a URL component
_COMPONENT_SAFE = "-_.!~*'()"


def encode_component(value: Any) -> str:
    """Percent-encode a value for use inside a URL component."""
    return quote(str(value), safe=_COMPONENT_SAFE)


def interpolate(
    template: str,
    values: Optional[Mapping[str, Any]],
    namespace: str = "",
    encoder: Optional[Callable[[Any], str]] = None,
) -> str:
    """Replace ``{key}`` (or ``{namespace.key}``) markers from ``values``.

    Markers whose key is missing from ``values`` (or belongs to another
    namespace) are left untouched so a later pass can resolve them.

    Args:
        template: Text containing placeholders.
        values: Substitution values.
        namespace: Prefix the placeholders must carry, ``""`` for none.
        encoder: Applied to every substituted value.
    """
    if not values:
        return template
    prefix = f"{namespace}." if namespace else ""

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if prefix:
            if not name.startswith(prefix):
                return match.group(0)
            name = name[len(prefix):]
        if name not in values or values[name] is None:
            return match.group(0)
        value = values[name]
        return encoder(value) if encoder else str(value)

    return _PLACEHOLDER.sub(_replace, template)


def make_url(
    url: Any,
    article_info: Optional[Mapping[str, Any]],
    params: Optional[Mapping[str, Any]],
) -> str:
    """Build a concrete URL from a template or a URL builder.

    Article placeholders are resolved first, then ``source.*`` parameter
    placeholders; both passes percent-encode the substituted values. A
    callable ``url`` is invoked as ``url(article_info, params)`` and its
    return value used verbatim.
    """
    if callable(url):
        return url(article_info, params)
    url = interpolate(url, article_info, "", encode_component)
    return interpolate(url, params, "source", encode_component)

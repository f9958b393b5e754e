"""Result Merger: reshape settled sub-call results into UI-ready records.

Grounding chunks arrive as SDK objects (or plain dicts from stubs) in two
shapes, ``web`` and ``maps``. ``classify_chunk`` turns each into a
``WebCitation`` / ``MapCitation`` before anything is merged.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, TypeVar
from urllib.parse import quote, urlparse

from .models.creative import (
    AggregateResult,
    DirectLink,
    FoundClip,
    MapCitation,
    StructuredAnalysis,
    WebCitation,
    new_id,
)

NO_SUMMARY = "No summary available."
MAX_FOUND_CLIPS = 4
CLIP_TITLE_LIMIT = 40

# (platform, url template, access type); {q} is the URL-encoded query.
QUICK_SEARCH_TEMPLATES: tuple[tuple[str, str, str], ...] = (
    ("Pexels", "https://www.pexels.com/search/videos/{q}/", "free"),
    ("Pixabay", "https://pixabay.com/videos/search/{q}/", "free"),
    ("YouTube", "https://www.youtube.com/results?search_query={q}+cinematic+b-roll", "social"),
    ("Pond5", "https://www.pond5.com/stock-footage/{q}", "paid"),
)

C = TypeVar("C", WebCitation, MapCitation)


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _resolvable(uri: str | None) -> bool:
    if not uri:
        return False
    parsed = urlparse(uri)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def classify_chunk(chunk: Any) -> WebCitation | MapCitation | None:
    """Classify a grounding chunk; None when it has no resolvable URI."""
    maps = _field(chunk, "maps")
    if maps is not None and _resolvable(_field(maps, "uri")):
        return MapCitation(
            title=_field(maps, "title") or "",
            uri=_field(maps, "uri"),
            place_id=_field(maps, "place_id"),
        )
    web = _field(chunk, "web")
    if web is not None and _resolvable(_field(web, "uri")):
        return WebCitation(title=_field(web, "title") or "", uri=_field(web, "uri"))
    return None


def dedupe_by_uri(items: Iterable[C]) -> list[C]:
    """Drop repeated URIs, keeping first-seen order."""
    seen: set[str] = set()
    unique = []
    for item in items:
        if item.uri in seen:
            continue
        seen.add(item.uri)
        unique.append(item)
    return unique


def extract_citations(chunks: Iterable[Any]) -> list[WebCitation]:
    """Web citations from search grounding, deduplicated by URI."""
    return dedupe_by_uri(c for c in map(classify_chunk, chunks) if isinstance(c, WebCitation))


def extract_map_citations(chunks: Iterable[Any]) -> list[MapCitation]:
    """Map results from Maps grounding, deduplicated by URI.

    Web chunks that point at google.com/maps are promoted to map citations.
    """
    found: list[MapCitation] = []
    for citation in map(classify_chunk, chunks):
        if isinstance(citation, MapCitation):
            found.append(citation)
        elif isinstance(citation, WebCitation) and "google.com/maps" in citation.uri:
            found.append(MapCitation(title=citation.title, uri=citation.uri))
    return dedupe_by_uri(found)


def clean_clip_title(title: str) -> str:
    """Strip site suffixes (`` | Pexels``, `` - YouTube``) and truncate."""
    title = title.split(" | ", 1)[0]
    title = title.split(" - ", 1)[0]
    return title[:CLIP_TITLE_LIMIT]


def domain_of(uri: str) -> str:
    host = urlparse(uri).hostname or ""
    return host.removeprefix("www.")


def build_found_clips(
    citations: Sequence[WebCitation], thumbnails: Sequence[str]
) -> list[FoundClip]:
    """Pair the first citations with thumbnails, cycling images by index."""
    clips = []
    for index, citation in enumerate(dedupe_by_uri(citations)[:MAX_FOUND_CLIPS]):
        clips.append(
            FoundClip(
                title=clean_clip_title(citation.title),
                url=citation.uri,
                domain=domain_of(citation.uri),
                thumbnail=thumbnails[index % len(thumbnails)] if thumbnails else None,
            )
        )
    return clips


def quick_search_links(query: str) -> list[DirectLink]:
    """Deterministic deep links into footage platforms."""
    q = quote(query, safe="!~*'()")
    return [
        DirectLink(platform=platform, url=template.format(q=q), type=kind)
        for platform, template, kind in QUICK_SEARCH_TEMPLATES
    ]


def merge_aggregate(
    query: str,
    summary: str | None,
    chunks: Iterable[Any],
    analysis: StructuredAnalysis | None,
    thumbnails: Sequence[str],
) -> AggregateResult:
    """Assemble one search result from the settled fan-out slots.

    Args:
        query: The user's query text.
        summary: Grounded-search text; empty/None becomes ``NO_SUMMARY``.
        chunks: Raw grounding chunks from the search response.
        analysis: Parsed structured analysis, or None when degraded.
        thumbnails: Data URIs of the generated variation images.
    """
    sources = extract_citations(chunks)
    structured = analysis.model_dump() if analysis is not None else {}
    return AggregateResult(
        id=new_id(),
        query=query,
        summary=summary or NO_SUMMARY,
        sources=sources,
        found_clips=build_found_clips(sources, thumbnails),
        direct_links=quick_search_links(query),
        generated_preview_url=thumbnails[0] if thumbnails else None,
        variations=list(thumbnails),
        **structured,
    )

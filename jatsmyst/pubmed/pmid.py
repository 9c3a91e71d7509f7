# jatsmyst — JATS to MyST conversion for biomedical literature
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.


"""PubMed ID -> DOI lookup backed by the NCBI ID converter.

The converter is only a network collaborator: conversion itself consumes
a plain ``dict`` cache.  :func:`build_pmid_lookup` fills that cache from
disk first and queries NCBI only for ids it has never seen.

Usage::

    from jatsmyst.pubmed import PMIDResolver, build_pmid_lookup

    cache = build_pmid_lookup(jats.references, Path("."), PMIDResolver(email="me@x.org"))
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from urllib.parse import urlparse

import httpx

from jatsmyst.errors import PMIDLookupError
from jatsmyst.tree import GenericNode, to_text, walk

logger = logging.getLogger(__name__)

IDCONV_URL = "https://www.ncbi.nlm.nih.gov/pmc/utils/idconv/v1.0/"
ESUMMARY_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esummary.fcgi"
TOOL_NAME = "jatsmyst"
BATCH_SIZE = 200
TIMEOUT = 30.0

CACHE_FILENAME = "jats-pmid-doi.json"


def normalize_pmid(value: str) -> str:
    """Reduce a PubMed URL (``https://pubmed.ncbi.nlm.nih.gov/123/``) to its id."""
    value = value.strip()
    if value.startswith(("https://", "http://")):
        pmid = urlparse(value).path.strip("/")
        logger.debug("Extract %s to %s", value, pmid)
        return pmid
    return value


def pmids_from_references(references: Iterable[GenericNode]) -> list[str]:
    """Normalised PMIDs referenced by ``pub-id``/``ext-link`` of type pmid."""
    pmids: list[str] = []
    for ref in references:
        for node, _ in walk(ref):
            if node is ref:
                continue
            if node.get("pub-id-type") == "pmid" or (
                node.get("type") == "ext-link" and node.get("ext-link-type") == "pmid"
            ):
                pmid = normalize_pmid(to_text(node))
                if pmid and pmid not in pmids:
                    pmids.append(pmid)
                break
    return pmids


# ---------------------------------------------------------------------------
# Disk cache
# ---------------------------------------------------------------------------


def cache_folder(directory: Path) -> Path:
    return Path(directory) / "_build" / "cache"


def pmid_cache_file(directory: Path) -> Path:
    return cache_folder(directory) / CACHE_FILENAME


def load_pmid_cache(directory: Path) -> dict[str, str | None]:
    path = pmid_cache_file(directory)
    if not path.is_file():
        return {}
    return json.loads(path.read_text(encoding="utf-8"))


def save_pmid_cache(cache: dict[str, str | None], directory: Path) -> Path:
    path = pmid_cache_file(directory)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cache, indent=2), encoding="utf-8")
    logger.info("Saved %d PMID lookups to %s", len(cache), path)
    return path


# ---------------------------------------------------------------------------
# Network resolver
# ---------------------------------------------------------------------------


class PMIDResolver:
    """Resolve PubMed IDs to DOIs through NCBI (idconv, then esummary).

    Args:
        email: Contact address sent with each request, as NCBI asks.
        timeout: Per-request timeout in seconds.
    """

    def __init__(self, email: str | None = None, timeout: float = TIMEOUT) -> None:
        self.email = email
        self.timeout = timeout

    def _http_get(self, url: str, **kwargs: object) -> httpx.Response:
        """HTTP GET with timeout. Separated for testability."""
        with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
            return client.get(url, **kwargs)

    def _params(self, **params: str) -> dict[str, str]:
        params = {"tool": TOOL_NAME, "format": "json", **params}
        if self.email:
            params["email"] = self.email
        return params

    def fetch_json(self, url: str, **params: str) -> dict:
        """GET *url* and decode the JSON body.

        Raises :class:`PMIDLookupError` on HTTP errors or undecodable bodies.
        """
        try:
            resp = self._http_get(url, params=self._params(**params))
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PMIDLookupError(f"PubMed ID lookup failed for {url}: {exc}") from exc

    def _idconv(self, pmids: list[str]) -> dict[str, str]:
        data = self.fetch_json(IDCONV_URL, ids=",".join(pmids))
        return {
            str(record["pmid"]): record["doi"]
            for record in data.get("records", [])
            if record.get("pmid") and record.get("doi")
        }

    def _esummary(self, pmids: list[str]) -> dict[str, str | None]:
        data = self.fetch_json(ESUMMARY_URL, db="pubmed", id=",".join(pmids))
        found: dict[str, str | None] = {}
        for pmid, record in (data.get("result") or {}).items():
            if pmid == "uids":
                continue
            doi = next(
                (a.get("value") for a in record.get("articleids", []) if a.get("idtype") == "doi"),
                None,
            )
            found[pmid] = doi or None
        return found

    def resolve(self, pmids: Iterable[str]) -> dict[str, str | None]:
        """Return a PMID -> DOI lookup; unresolved ids map to ``None``.

        Failed requests are logged and skipped, so the result may be partial.
        """
        unique = list(dict.fromkeys(normalize_pmid(p) for p in pmids if p))
        lookup: dict[str, str | None] = {}
        for start in range(0, len(unique), BATCH_SIZE):
            batch = unique[start:start + BATCH_SIZE]
            try:
                lookup.update(self._idconv(batch))
            except PMIDLookupError:
                logger.debug("idconv failed for %d PMIDs", len(batch), exc_info=True)
            missing = [pmid for pmid in batch if not lookup.get(pmid)]
            if not missing:
                continue
            try:
                lookup.update(self._esummary(missing))
            except PMIDLookupError:
                logger.debug("esummary failed for %d PMIDs", len(missing), exc_info=True)
                continue
            for pmid in missing:
                lookup.setdefault(pmid, None)
        resolved = sum(1 for doi in lookup.values() if doi)
        logger.info("Resolved %d/%d PMIDs to DOIs", resolved, len(unique))
        return lookup


def build_pmid_lookup(
    references: Iterable[GenericNode],
    directory: Path,
    resolver: PMIDResolver | None = None,
) -> dict[str, str | None]:
    """Load the cached lookup for *directory* and fill in unseen PMIDs.

    Without a *resolver* only the disk cache is used.
    """
    cache = load_pmid_cache(directory)
    to_fetch = [pmid for pmid in pmids_from_references(references) if pmid not in cache]
    if to_fetch and resolver is not None:
        cache.update(resolver.resolve(to_fetch))
        save_pmid_cache(cache, directory)
    return cache

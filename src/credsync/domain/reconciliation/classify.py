"""Provenance classification across the ledger and database stores.

Some gateway endpoints compute provenance server-side with context the client
cannot reconstruct, so an explicit tag always wins. The presence heuristic is
only a fallback for feeds that omit the tag.
"""

from __future__ import annotations

import logging

from credsync.domain.model import Source

log = logging.getLogger(__name__)


def classify(has_ledger_payload: bool, has_db_payload: bool) -> Source:
    """Classify an entity from which stores returned a payload for it.

    Raises ``ValueError`` when neither store knows the entity.
    """

    if has_ledger_payload and has_db_payload:
        return Source.MERGED
    if has_ledger_payload:
        return Source.CHAIN_ONLY
    if has_db_payload:
        return Source.DB_ONLY
    raise ValueError("Entity is absent from both stores")


def parse_source(tag: object) -> Source | None:
    """Return the ``Source`` named by ``tag`` or ``None`` for absent/unknown tags."""

    if not isinstance(tag, str) or not tag:
        return None
    try:
        return Source(tag.strip().lower())
    except ValueError:
        log.debug("Ignoring unrecognised provenance tag %r", tag)
        return None


def resolve_source(
    tag: object,
    *,
    has_ledger_payload: bool,
    has_db_payload: bool,
) -> Source:
    """Explicit provenance tag first, presence heuristic second."""

    explicit = parse_source(tag)
    if explicit is not None:
        return explicit
    return classify(has_ledger_payload, has_db_payload)

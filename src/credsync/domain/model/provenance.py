"""Split-store provenance shared by every reconciled entity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .enums import Source


@dataclass(frozen=True, slots=True, kw_only=True)
class Provenanced[L, C]:
    """An entity assembled from an optional ledger payload and an optional database payload.

    ``source`` records which stores contributed. Translators keep the payloads
    consistent with it: a ``chain_only`` entity has no ``content`` and a
    ``db_only`` entity has no ``ledger``.
    """

    source: Source
    ledger: L | None = None
    content: C | None = None

    @property
    def has_ledger(self) -> bool:
        return self.ledger is not None

    @property
    def has_content(self) -> bool:
        return self.content is not None

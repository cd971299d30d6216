"""Tagged-variant parsing of gateway response envelopes.

Gateway endpoints answer with one of a few shapes depending on API version:
a bare JSON array, ``{"data": [...], "warning": ...}``, ``{"data": {...}}``
or a bare object. Each matcher below recognises exactly one shape and returns
a typed variant or ``None``; ``parse_envelope`` tries them in order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import cast

from pydantic import BaseModel, ValidationError

log = logging.getLogger(__name__)

type JsonMapping = Mapping[str, object]


@dataclass(frozen=True, slots=True)
class BareList:
    items: Sequence[object]


@dataclass(frozen=True, slots=True)
class WrappedList:
    items: Sequence[object]
    warning: str | None = None


@dataclass(frozen=True, slots=True)
class WrappedItem:
    item: JsonMapping | None
    warning: str | None = None


@dataclass(frozen=True, slots=True)
class BareItem:
    item: JsonMapping


type Envelope = BareList | WrappedList | WrappedItem | BareItem
type EnvelopeMatcher = Callable[[object], Envelope | None]


def _warning_of(mapping: JsonMapping) -> str | None:
    warning = mapping.get("warning")
    return warning if isinstance(warning, str) and warning else None


def match_bare_list(payload: object) -> BareList | None:
    if isinstance(payload, list):
        return BareList(items=cast(list[object], payload))
    return None


def match_wrapped_list(payload: object) -> WrappedList | None:
    if isinstance(payload, Mapping) and "data" in payload:
        mapping = cast(JsonMapping, payload)
        data = mapping["data"]
        if isinstance(data, list):
            return WrappedList(items=cast(list[object], data), warning=_warning_of(mapping))
    return None


def match_wrapped_item(payload: object) -> WrappedItem | None:
    if isinstance(payload, Mapping) and "data" in payload:
        mapping = cast(JsonMapping, payload)
        data = mapping["data"]
        if data is None or isinstance(data, Mapping):
            return WrappedItem(item=cast("JsonMapping | None", data), warning=_warning_of(mapping))
    return None


def match_bare_item(payload: object) -> BareItem | None:
    if isinstance(payload, Mapping) and "data" not in payload:
        return BareItem(item=cast(JsonMapping, payload))
    return None


MATCHERS: tuple[EnvelopeMatcher, ...] = (
    match_bare_list,
    match_wrapped_list,
    match_wrapped_item,
    match_bare_item,
)


def parse_envelope(payload: object) -> Envelope | None:
    """Return the first matching envelope variant, or ``None`` for unknown shapes."""

    for matcher in MATCHERS:
        envelope = matcher(payload)
        if envelope is not None:
            return envelope
    return None


def _log_warning(context: str, envelope: Envelope) -> None:
    warning = getattr(envelope, "warning", None)
    if warning:
        log.warning("Gateway returned partial data for %s: %s", context, warning)


def unwrap_list(payload: object, *, context: str) -> list[object]:
    """Extract the item list from a list-endpoint response; unknown shapes yield ``[]``."""

    envelope = parse_envelope(payload)
    if envelope is not None:
        _log_warning(context, envelope)
    if isinstance(envelope, BareList | WrappedList):
        return list(envelope.items)
    if isinstance(envelope, WrappedItem):
        return [] if envelope.item is None else [envelope.item]
    log.warning("Unexpected response shape for %s: %r", context, type(payload).__name__)
    return []


def unwrap_item(payload: object, *, context: str) -> JsonMapping | None:
    """Extract the single entity from a detail-endpoint response; unknown shapes yield ``None``."""

    envelope = parse_envelope(payload)
    if envelope is not None:
        _log_warning(context, envelope)
    if isinstance(envelope, WrappedItem):
        return envelope.item
    if isinstance(envelope, BareItem):
        return envelope.item
    log.warning("Unexpected response shape for %s: %r", context, type(payload).__name__)
    return None


def validate_items[M: BaseModel](
    model: type[M], items: Iterable[object], *, context: str
) -> list[M]:
    """Validate each raw item against ``model``, skipping the ones that do not fit."""

    validated: list[M] = []
    for index, item in enumerate(items):
        try:
            validated.append(model.model_validate(item))
        except ValidationError as exc:
            log.warning(
                "Skipping %s item %d that does not match %s: %s",
                context,
                index,
                model.__name__,
                exc.errors(include_url=False),
            )
    return validated


def validate_item[M: BaseModel](model: type[M], item: object, *, context: str) -> M | None:
    if item is None:
        return None
    items = validate_items(model, [item], context=context)
    return items[0] if items else None

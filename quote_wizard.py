from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from camera_catalog import DEFAULT_CATALOG, Catalog
from pricing_engine import (
    QuotationBreakdown,
    QuoteConfiguration,
    QuoteConfigurationError,
    apply_field_update,
    compute_quote,
)


@dataclass(frozen=True)
class StepDefinition:
    index: int
    key: str
    label: str
    validate: Callable[[QuoteConfiguration], bool]


def _counts_valid(c: QuoteConfiguration) -> bool:
    return c.interior_count > 0 or c.exterior_count > 0


def _recording_valid(c: QuoteConfiguration) -> bool:
    if not c.has_dvr:
        return False
    if c.has_dvr == "no":
        return bool(c.storage)
    return True


def _monitor_valid(c: QuoteConfiguration) -> bool:
    if not c.needs_monitor:
        return False
    if c.needs_monitor == "yes":
        return bool(c.monitor_size)
    return True


def _installation_valid(c: QuoteConfiguration) -> bool:
    if not c.installation_service:
        return False
    if c.installation_service in DEFAULT_CATALOG.cabling_service_ids:
        return c.cable_length > 0
    return True


def _always(c: QuoteConfiguration) -> bool:
    return True


_STEP_TABLE: Tuple[Tuple[str, str, Callable[[QuoteConfiguration], bool]], ...] = (
    ("counts", "Ubicación y cantidad", _counts_valid),
    ("night_vision", "Visión nocturna", lambda c: bool(c.night_vision_type)),
    ("technology", "Tecnología", lambda c: bool(c.technology_type)),
    ("physical_type", "Tipo de cámara", lambda c: bool(c.physical_types)),
    ("resolution", "Resolución", lambda c: bool(c.resolution)),
    ("recording", "Grabación", _recording_valid),
    ("remote_access", "Acceso remoto", lambda c: bool(c.remote_access)),
    ("monitor", "Monitor", _monitor_valid),
    ("installation", "Instalación", _installation_valid),
    ("location", "Ubicación", _always),
    ("results", "Resultado", _always),
)

WIZARD_STEPS: Tuple[StepDefinition, ...] = tuple(
    StepDefinition(index=i, key=key, label=label, validate=validate)
    for i, (key, label, validate) in enumerate(_STEP_TABLE, start=1)
)

STEP_COUNT = len(WIZARD_STEPS)


def step_definition(step_index: int) -> StepDefinition:
    if not 1 <= step_index <= STEP_COUNT:
        raise IndexError(f"step index out of range: {step_index}")
    return WIZARD_STEPS[step_index - 1]


def is_step_valid(step_index: int, config: QuoteConfiguration) -> bool:
    return step_definition(step_index).validate(config)


class WizardSession:
    """
    One visitor's walk through the quotation steps.

    Owns its configuration exclusively. Navigation methods return False when a move is
    refused; they never raise for that.
    """

    def __init__(self, catalog: Catalog = DEFAULT_CATALOG) -> None:
        self.catalog = catalog
        self.reset()

    def reset(self) -> None:
        self.configuration = QuoteConfiguration()
        self.current = 1
        self.furthest_visited = 1
        self.quotation_result: Optional[QuotationBreakdown] = None
        self.finished = False

    @property
    def step(self) -> StepDefinition:
        return step_definition(self.current)

    @property
    def is_last_step(self) -> bool:
        return self.current == STEP_COUNT

    def is_current_step_valid(self) -> bool:
        return is_step_valid(self.current, self.configuration)

    def set_field(self, name: str, value: object) -> None:
        self.configuration = apply_field_update(self.configuration, name, value)

    def adjust_count(self, name: str, delta: int) -> None:
        if name not in {"interior_count", "exterior_count"}:
            raise QuoteConfigurationError(f"{name!r} is not a count field")
        self.set_field(name, max(0, getattr(self.configuration, name) + int(delta)))

    def advance(self) -> bool:
        if not self.is_current_step_valid():
            return False
        if self.is_last_step:
            # "Finish": re-run the reduction on the final answers.
            self._refresh_quote()
            self.finished = True
            return True
        self.current += 1
        self.furthest_visited = max(self.furthest_visited, self.current)
        if self.current == STEP_COUNT:
            self._refresh_quote()
        return True

    def retreat(self) -> bool:
        if self.current <= 1:
            return False
        self.current -= 1
        return True

    def jump_to(self, step_index: int) -> bool:
        if not 1 <= step_index <= STEP_COUNT:
            return False
        if step_index == self.current + 1 and step_index > self.furthest_visited:
            return self.advance()
        if step_index > self.furthest_visited:
            return False
        self.current = step_index
        if self.current == STEP_COUNT:
            self._refresh_quote()
        return True

    def can_jump_to(self, step_index: int) -> bool:
        if not 1 <= step_index <= STEP_COUNT:
            return False
        if step_index <= self.furthest_visited:
            return True
        return step_index == self.current + 1 and self.is_current_step_valid()

    def _refresh_quote(self) -> None:
        self.quotation_result = compute_quote(self.configuration, self.catalog)

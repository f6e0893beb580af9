from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import FrozenSet, List, Tuple, Union

from camera_catalog import (
    PHYSICAL_TYPE_WIFI,
    Catalog,
    find_entry,
    price_of,
)


class QuoteConfigurationError(ValueError):
    pass


Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class QuoteConfiguration:
    interior_count: int = 0
    exterior_count: int = 0
    night_vision_type: str = ""
    technology_type: str = ""
    physical_types: FrozenSet[str] = field(default_factory=frozenset)
    resolution: str = ""
    has_dvr: str = ""
    storage: str = ""
    remote_access: str = ""
    needs_monitor: str = ""
    monitor_size: str = ""
    installation_service: str = ""
    # Metres; only used when the installation service includes cabling.
    cable_length: Decimal = Decimal("10")
    location: str = ""

    @property
    def total_cameras(self) -> int:
        return self.interior_count + self.exterior_count


@dataclass(frozen=True)
class LineItem:
    label: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class QuotationBreakdown:
    subtotal: Decimal
    total: Decimal
    line_items: Tuple[LineItem, ...]


_COUNT_FIELDS = frozenset({"interior_count", "exterior_count"})
_CHOICE_FIELDS = frozenset(
    {
        "night_vision_type",
        "technology_type",
        "resolution",
        "has_dvr",
        "storage",
        "remote_access",
        "needs_monitor",
        "monitor_size",
        "installation_service",
    }
)
_CONFIG_FIELDS = frozenset(f.name for f in fields(QuoteConfiguration))


def _to_decimal(value: Number) -> Decimal:
    return Decimal(str(value))


def _round_currency(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _validate_count(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise QuoteConfigurationError(f"{name} must be a non-negative integer (got {value!r})")
    return value


def _validate_cable_length(value: object) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise QuoteConfigurationError(f"cable_length must be a number (got {value!r})")
    length = _to_decimal(value)
    if not length.is_finite() or length <= 0:
        raise QuoteConfigurationError(f"cable_length must be positive (got {value!r})")
    return length


def toggle_physical_type(current: FrozenSet[str], type_id: str) -> FrozenSet[str]:
    """
    Select or deselect one camera form factor.

    WiFi cameras are mutually exclusive with every other form factor: picking WiFi clears the
    rest, and picking anything else drops WiFi.
    """
    if type_id in current:
        return current - {type_id}
    if type_id == PHYSICAL_TYPE_WIFI:
        return frozenset({PHYSICAL_TYPE_WIFI})
    return (current - {PHYSICAL_TYPE_WIFI}) | {type_id}


def apply_field_update(config: QuoteConfiguration, name: str, value: object) -> QuoteConfiguration:
    """
    Return a copy of `config` with one field changed.

    This is the only way a wizard session changes its configuration, so shape checks and the
    WiFi exclusivity rule live here. Catalog ids are not checked against the tables: an unknown
    id is stored as-is and later prices at zero.

    `physical_types` takes a single id and toggles it.
    """
    if name not in _CONFIG_FIELDS:
        raise QuoteConfigurationError(f"Unknown configuration field: {name!r}")

    if name in _COUNT_FIELDS:
        return replace(config, **{name: _validate_count(name, value)})

    if name in _CHOICE_FIELDS:
        if not isinstance(value, str):
            raise QuoteConfigurationError(f"{name} must be a string id (got {value!r})")
        return replace(config, **{name: value.strip()})

    if name == "physical_types":
        if not isinstance(value, str) or not value.strip():
            raise QuoteConfigurationError(f"physical_types updates take one type id (got {value!r})")
        return replace(config, physical_types=toggle_physical_type(config.physical_types, value.strip()))

    if name == "cable_length":
        return replace(config, cable_length=_validate_cable_length(value))

    if name == "location":
        if not isinstance(value, str):
            raise QuoteConfigurationError(f"location must be a string (got {value!r})")
        return replace(config, location=value)

    raise QuoteConfigurationError(f"Field {name!r} cannot be updated")


def base_camera_price(config: QuoteConfiguration, catalog: Catalog) -> Decimal:
    """
    Per-camera price before resolution and placement.

    The surcharge for camera form factors is the average over the selected types (one fleet,
    one averaged surcharge), not a per-type split of the camera count.
    """
    price = _to_decimal(catalog.base_camera_price)
    price += price_of(catalog.night_vision_types, config.night_vision_type)
    price += price_of(catalog.technology_types, config.technology_type)
    if config.physical_types:
        surcharges = [price_of(catalog.physical_types, t) for t in sorted(config.physical_types)]
        price += _round_currency(_to_decimal(sum(surcharges)) / len(surcharges))
    return _round_currency(price)


def compute_quote(config: QuoteConfiguration, catalog: Catalog) -> QuotationBreakdown:
    """
    Reduce a configuration to an itemized estimate.

    Pure and deterministic. Unset or unknown ids contribute nothing; they never raise.
    """
    line_items: List[LineItem] = []

    def _add(label: str, quantity: Number, unit_price: Number) -> None:
        qty = _to_decimal(quantity)
        unit = _round_currency(_to_decimal(unit_price))
        line_total = _round_currency(qty * unit)
        if line_total == 0:
            return
        line_items.append(LineItem(label=label, quantity=qty, unit_price=unit, line_total=line_total))

    total_cameras = config.total_cameras
    if total_cameras > 0:
        _add(
            f"Cámaras ({config.interior_count} interior, {config.exterior_count} exterior)",
            total_cameras,
            base_camera_price(config, catalog),
        )

        resolution = find_entry(catalog.resolutions, config.resolution)
        if resolution is not None:
            _add(f"Resolución {resolution.name}", total_cameras, resolution.price)

        if config.interior_count > 0:
            _add("Instalación Interior", config.interior_count, price_of(catalog.placements, "interior"))
        if config.exterior_count > 0:
            _add("Instalación Exterior", config.exterior_count, price_of(catalog.placements, "exterior"))

    _add("DVR/NVR", 1, price_of(catalog.dvr_options, config.has_dvr))

    service = find_entry(catalog.installation_services, config.installation_service)
    if service is not None:
        _add(f"Servicio de instalación: {service.name}", 1, service.price)
        if service.id in catalog.cabling_service_ids and config.cable_length > 0:
            _add(
                f"Cableado ({format_quantity(config.cable_length)} metros)",
                config.cable_length,
                catalog.cable_price_per_meter,
            )

    # Storage is only asked for when a new recorder is needed.
    if config.has_dvr != "yes":
        storage = find_entry(catalog.storage_options, config.storage)
        if storage is not None:
            _add(f"Almacenamiento: {storage.name}", 1, storage.price)

    _add("Acceso Remoto", 1, price_of(catalog.remote_access_options, config.remote_access))

    if config.needs_monitor == "yes":
        monitor = find_entry(catalog.monitor_sizes, config.monitor_size)
        if monitor is not None:
            _add(f"Monitor {monitor.name}", 1, monitor.price)

    subtotal = _round_currency(sum((li.line_total for li in line_items), Decimal("0")))
    return QuotationBreakdown(
        subtotal=subtotal,
        total=_apply_adjustments(subtotal),
        line_items=tuple(line_items),
    )


def _apply_adjustments(subtotal: Decimal) -> Decimal:
    # No tax or discount layer yet; total mirrors subtotal.
    return subtotal


def format_quantity(value: Number) -> str:
    """
    Render a quantity without trailing zeros ("20", "12.5").
    """
    qty = _to_decimal(value)
    if qty == qty.to_integral_value():
        return str(int(qty))
    return format(qty.normalize(), "f")

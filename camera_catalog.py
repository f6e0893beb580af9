from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional, Sequence, Tuple


@dataclass(frozen=True)
class CatalogEntry:
    id: str
    name: str
    price: int = 0
    description: Optional[str] = None
    base_price: Optional[int] = None


# Option tables. Prices are MXN deltas (per camera, per metre or flat, depending on where
# pricing_engine.compute_quote applies them).

NIGHT_VISION_TYPES: Tuple[CatalogEntry, ...] = (
    CatalogEntry(
        id="none",
        name="Sin visión nocturna",
        price=0,
        description="Solo grabación con luz disponible",
    ),
    CatalogEntry(
        id="infrared",
        name="Infrarroja (IR)",
        price=200,
        description="Visión nocturna con iluminación infrarroja, ideal para vigilancia básica con luz baja",
    ),
    CatalogEntry(
        id="full-color",
        name="Full Color",
        price=600,
        description="Visión nocturna a todo color sin necesidad de iluminación IR adicional",
    ),
)

TECHNOLOGY_TYPES: Tuple[CatalogEntry, ...] = (
    CatalogEntry(
        id="analog",
        name="Analógica (HD)",
        price=0,
        description="Cámaras coaxiales conectadas a un DVR",
    ),
    CatalogEntry(
        id="ip",
        name="IP",
        price=400,
        description="Cámaras de red conectadas a un NVR, mayor calidad y funciones inteligentes",
    ),
)

PHYSICAL_TYPE_WIFI = "wifi"

PHYSICAL_TYPES: Tuple[CatalogEntry, ...] = (
    CatalogEntry(
        id="bullet",
        name="Bala",
        price=0,
        description="Formato tradicional para exteriores con largo alcance",
    ),
    CatalogEntry(
        id="dome",
        name="Domo",
        price=200,
        description="Diseño discreto ideal para interiores con visión panorámica",
    ),
    CatalogEntry(
        id="ptz",
        name="PTZ",
        price=2300,
        description="Control de movimiento Pan-Tilt-Zoom para máxima cobertura y seguimiento",
    ),
    CatalogEntry(
        id=PHYSICAL_TYPE_WIFI,
        name="WiFi",
        price=400,
        description="Conexión inalámbrica sin necesidad de cableado",
    ),
)

RESOLUTIONS: Tuple[CatalogEntry, ...] = (
    CatalogEntry(id="2mp", name="2MP (1080p)", price=0),
    CatalogEntry(id="4mp", name="4MP", price=350),
    CatalogEntry(id="5mp", name="5MP", price=500),
    CatalogEntry(id="8mp", name="8MP (4K)", price=800),
)

# Per-camera installation price by placement.
PLACEMENTS: Tuple[CatalogEntry, ...] = (
    CatalogEntry(id="interior", name="Interior", price=200),
    CatalogEntry(id="exterior", name="Exterior", price=350),
)

DVR_OPTIONS: Tuple[CatalogEntry, ...] = (
    CatalogEntry(id="yes", name="Sí, ya tengo", price=0),
    CatalogEntry(id="no", name="No, necesito uno", price=2500),
)

INSTALLATION_SERVICES: Tuple[CatalogEntry, ...] = (
    CatalogEntry(
        id="none",
        name="Sin instalación",
        price=0,
        description="Solo el equipo, la instalación corre por tu cuenta",
    ),
    CatalogEntry(
        id="basic",
        name="Instalación básica",
        price=300,
        description="Montaje y configuración usando el cableado existente",
    ),
    CatalogEntry(
        id="standard",
        name="Instalación con cableado",
        price=350,
        description="Montaje, configuración y tendido de cable",
    ),
    CatalogEntry(
        id="complete",
        name="Instalación completa",
        price=500,
        description="Cableado, canalización, montaje y configuración de acceso remoto",
    ),
)

# Installation levels that include cable runs (priced per metre on top of the service fee).
CABLING_SERVICE_IDS: FrozenSet[str] = frozenset({"standard", "complete"})

STORAGE_OPTIONS: Tuple[CatalogEntry, ...] = (
    CatalogEntry(id="1tb", name="Disco Duro 1TB", price=1200),
    CatalogEntry(id="2tb", name="Disco Duro 2TB", price=1800),
    CatalogEntry(id="4tb", name="Disco Duro 4TB", price=2800),
    CatalogEntry(id="cloud", name="Almacenamiento en la nube", price=500),
)

REMOTE_ACCESS_OPTIONS: Tuple[CatalogEntry, ...] = (
    CatalogEntry(id="yes", name="Sí", price=500),
    CatalogEntry(id="no", name="No", price=0),
)

MONITOR_NEED_OPTIONS: Tuple[CatalogEntry, ...] = (
    CatalogEntry(id="yes", name="Sí"),
    CatalogEntry(id="no", name="No"),
)

MONITOR_SIZES: Tuple[CatalogEntry, ...] = (
    CatalogEntry(id="19in", name='Monitor 19"', price=1800),
    CatalogEntry(id="22in", name='Monitor 22"', price=2200),
    CatalogEntry(id="24in", name='Monitor 24"', price=2600),
    CatalogEntry(id="32in", name='Monitor 32"', price=3900),
)

BASE_CAMERA_PRICE = 1200
CABLE_PRICE_PER_METER = 80


@dataclass(frozen=True)
class Catalog:
    """
    All reference data the pricing reduction needs, bundled so callers pass it explicitly.

    Read-only; a single instance is shared by every wizard session.
    """

    night_vision_types: Tuple[CatalogEntry, ...] = NIGHT_VISION_TYPES
    technology_types: Tuple[CatalogEntry, ...] = TECHNOLOGY_TYPES
    physical_types: Tuple[CatalogEntry, ...] = PHYSICAL_TYPES
    resolutions: Tuple[CatalogEntry, ...] = RESOLUTIONS
    placements: Tuple[CatalogEntry, ...] = PLACEMENTS
    dvr_options: Tuple[CatalogEntry, ...] = DVR_OPTIONS
    installation_services: Tuple[CatalogEntry, ...] = INSTALLATION_SERVICES
    storage_options: Tuple[CatalogEntry, ...] = STORAGE_OPTIONS
    remote_access_options: Tuple[CatalogEntry, ...] = REMOTE_ACCESS_OPTIONS
    monitor_need_options: Tuple[CatalogEntry, ...] = MONITOR_NEED_OPTIONS
    monitor_sizes: Tuple[CatalogEntry, ...] = MONITOR_SIZES
    base_camera_price: int = BASE_CAMERA_PRICE
    cable_price_per_meter: int = CABLE_PRICE_PER_METER
    cabling_service_ids: FrozenSet[str] = CABLING_SERVICE_IDS


DEFAULT_CATALOG = Catalog()


def find_entry(table: Sequence[CatalogEntry], entry_id: Optional[str]) -> Optional[CatalogEntry]:
    """
    Look up an option by id. Unset or unknown ids return None rather than raising.
    """
    if not entry_id:
        return None
    for entry in table:
        if entry.id == entry_id:
            return entry
    return None


def price_of(table: Sequence[CatalogEntry], entry_id: Optional[str]) -> int:
    entry = find_entry(table, entry_id)
    return entry.price if entry is not None else 0


def name_of(table: Sequence[CatalogEntry], entry_id: Optional[str]) -> str:
    entry = find_entry(table, entry_id)
    if entry is None:
        return entry_id or ""
    return entry.name


def ordered_ids(table: Sequence[CatalogEntry], entry_ids: FrozenSet[str]) -> Tuple[str, ...]:
    """
    Return `entry_ids` in catalog order, with unknown ids appended alphabetically.
    """
    known = tuple(e.id for e in table if e.id in entry_ids)
    unknown = tuple(sorted(i for i in entry_ids if find_entry(table, i) is None))
    return known + unknown

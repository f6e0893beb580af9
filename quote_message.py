from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional, Tuple, Union
from urllib.parse import quote

from camera_catalog import Catalog, name_of, ordered_ids
from pricing_engine import QuotationBreakdown, QuoteConfiguration, format_quantity

WHATSAPP_BASE_URL = "https://wa.me/"
DEFAULT_WHATSAPP_PHONE = "529621765599"

QUOTE_MESSAGE_GREETING = "Hola, me interesa cotizar un sistema de cámaras con las siguientes características: "

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_.~".
_URI_COMPONENT_SAFE = "!*'()"


def format_mxn(amount: Union[int, float, Decimal]) -> str:
    """
    Format a peso amount as "$14,100.00".
    """
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def _yes_no(value: str) -> str:
    if value == "yes":
        return "Sí"
    if value == "no":
        return "No"
    return value


def selection_summary(config: QuoteConfiguration, catalog: Catalog) -> Tuple[Tuple[str, str], ...]:
    """
    Ordered (label, value) rows describing every answer, in the order the sales team reads them.
    """
    physical = ", ".join(name_of(catalog.physical_types, t) for t in ordered_ids(catalog.physical_types, config.physical_types))

    monitor = _yes_no(config.needs_monitor)
    if config.needs_monitor == "yes":
        monitor = f"{monitor} ({name_of(catalog.monitor_sizes, config.monitor_size)})"

    if config.has_dvr == "yes":
        dvr = "Ya cuento con uno"
    elif config.has_dvr == "no":
        dvr = "Necesito uno"
    else:
        dvr = config.has_dvr

    installation = name_of(catalog.installation_services, config.installation_service)
    if config.installation_service in catalog.cabling_service_ids:
        installation = f"{installation} ({format_quantity(config.cable_length)} metros de cable)"

    return (
        ("Cámaras interiores", str(config.interior_count)),
        ("Cámaras exteriores", str(config.exterior_count)),
        ("Visión nocturna", name_of(catalog.night_vision_types, config.night_vision_type)),
        ("Tecnología", name_of(catalog.technology_types, config.technology_type)),
        ("Tipo de cámara", physical),
        ("Resolución", name_of(catalog.resolutions, config.resolution)),
        ("Acceso Remoto", _yes_no(config.remote_access)),
        ("Monitor", monitor),
        ("DVR/NVR", dvr),
        ("Instalación", installation),
        ("Almacenamiento", name_of(catalog.storage_options, config.storage)),
        ("Ubicación", config.location),
    )


def build_quote_message(config: QuoteConfiguration, breakdown: QuotationBreakdown, catalog: Catalog) -> str:
    message = QUOTE_MESSAGE_GREETING
    for label, value in selection_summary(config, catalog):
        message += f"\n- {label}: {value}"
    message += f"\n\nCotización estimada: {format_mxn(breakdown.total)}"
    return message


def whatsapp_link(phone: str, text: Optional[str] = None) -> str:
    digits = "".join(ch for ch in (phone or "") if ch.isdigit())
    url = f"{WHATSAPP_BASE_URL}{digits}"
    if text:
        url += "?text=" + quote(text, safe=_URI_COMPONENT_SAFE)
    return url


def quote_whatsapp_link(
    config: QuoteConfiguration,
    breakdown: QuotationBreakdown,
    catalog: Catalog,
    *,
    phone: str = DEFAULT_WHATSAPP_PHONE,
) -> str:
    return whatsapp_link(phone, build_quote_message(config, breakdown, catalog))


def breakdown_rows(breakdown: QuotationBreakdown) -> List[Dict[str, str]]:
    """
    Table rows for display: one per line item, then Subtotal and Total.
    """
    rows = [
        {
            "Concepto": li.label,
            "Cantidad": format_quantity(li.quantity),
            "Precio Unitario": format_mxn(li.unit_price),
            "Total": format_mxn(li.line_total),
        }
        for li in breakdown.line_items
    ]
    rows.append({"Concepto": "Subtotal", "Cantidad": "", "Precio Unitario": "", "Total": format_mxn(breakdown.subtotal)})
    rows.append({"Concepto": "Total", "Cantidad": "", "Precio Unitario": "", "Total": format_mxn(breakdown.total)})
    return rows

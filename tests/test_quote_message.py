from __future__ import annotations

import unittest
from decimal import Decimal
from urllib.parse import unquote

from camera_catalog import DEFAULT_CATALOG
from pricing_engine import QuoteConfiguration, compute_quote
from quote_message import (
    QUOTE_MESSAGE_GREETING,
    breakdown_rows,
    build_quote_message,
    format_mxn,
    quote_whatsapp_link,
    selection_summary,
    whatsapp_link,
)


def _reference_config() -> QuoteConfiguration:
    return QuoteConfiguration(
        interior_count=2,
        exterior_count=1,
        night_vision_type="infrared",
        technology_type="ip",
        physical_types=frozenset({"dome", "bullet"}),
        resolution="4mp",
        has_dvr="no",
        storage="1tb",
        remote_access="yes",
        needs_monitor="yes",
        monitor_size="22in",
        installation_service="complete",
        cable_length=Decimal("20"),
        location="Centro",
    )


class TestFormatMxn(unittest.TestCase):
    def test_grouping_and_decimals(self) -> None:
        self.assertEqual(format_mxn(14100), "$14,100.00")
        self.assertEqual(format_mxn(Decimal("2033.33")), "$2,033.33")
        self.assertEqual(format_mxn(0), "$0.00")
        self.assertEqual(format_mxn(1234567.5), "$1,234,567.50")
        self.assertEqual(format_mxn(-80), "-$80.00")


class TestQuoteMessage(unittest.TestCase):
    def test_summary_rows_in_order(self) -> None:
        rows = dict(selection_summary(_reference_config(), DEFAULT_CATALOG))
        labels = [label for label, _ in selection_summary(_reference_config(), DEFAULT_CATALOG)]
        self.assertEqual(
            labels,
            [
                "Cámaras interiores",
                "Cámaras exteriores",
                "Visión nocturna",
                "Tecnología",
                "Tipo de cámara",
                "Resolución",
                "Acceso Remoto",
                "Monitor",
                "DVR/NVR",
                "Instalación",
                "Almacenamiento",
                "Ubicación",
            ],
        )
        self.assertEqual(rows["Tipo de cámara"], "Bala, Domo")
        self.assertEqual(rows["Monitor"], 'Sí (Monitor 22")')
        self.assertEqual(rows["DVR/NVR"], "Necesito uno")
        self.assertEqual(rows["Instalación"], "Instalación completa (20 metros de cable)")
        self.assertEqual(rows["Acceso Remoto"], "Sí")

    def test_summary_for_owned_recorder_and_basic_install(self) -> None:
        config = QuoteConfiguration(has_dvr="yes", installation_service="basic", needs_monitor="no")
        rows = dict(selection_summary(config, DEFAULT_CATALOG))
        self.assertEqual(rows["DVR/NVR"], "Ya cuento con uno")
        self.assertEqual(rows["Instalación"], "Instalación básica")
        self.assertEqual(rows["Monitor"], "No")

    def test_message_layout(self) -> None:
        config = _reference_config()
        breakdown = compute_quote(config, DEFAULT_CATALOG)
        message = build_quote_message(config, breakdown, DEFAULT_CATALOG)
        self.assertTrue(message.startswith(QUOTE_MESSAGE_GREETING + "\n- Cámaras interiores: 2"))
        self.assertIn("\n- Resolución: 4MP", message)
        self.assertIn("\n- Ubicación: Centro", message)
        self.assertTrue(message.endswith(f"\n\nCotización estimada: {format_mxn(breakdown.total)}"))

    def test_whatsapp_link_encodes_message(self) -> None:
        config = _reference_config()
        breakdown = compute_quote(config, DEFAULT_CATALOG)
        link = quote_whatsapp_link(config, breakdown, DEFAULT_CATALOG)
        self.assertTrue(link.startswith("https://wa.me/529621765599?text="))
        encoded = link.split("?text=", 1)[1]
        self.assertNotIn(" ", encoded)
        self.assertNotIn("\n", encoded)
        self.assertIn("%0A", encoded)
        self.assertIn("%2C", encoded)
        self.assertEqual(unquote(encoded), build_quote_message(config, breakdown, DEFAULT_CATALOG))

    def test_whatsapp_link_keeps_phone_digits(self) -> None:
        self.assertEqual(whatsapp_link("+52 (962) 176-5599"), "https://wa.me/529621765599")
        self.assertEqual(whatsapp_link("5215550001111", "a b"), "https://wa.me/5215550001111?text=a%20b")


class TestBreakdownRows(unittest.TestCase):
    def test_rows_end_with_totals(self) -> None:
        breakdown = compute_quote(_reference_config(), DEFAULT_CATALOG)
        rows = breakdown_rows(breakdown)
        self.assertEqual(len(rows), len(breakdown.line_items) + 2)
        self.assertEqual(rows[0]["Concepto"], "Cámaras (2 interior, 1 exterior)")
        self.assertEqual(rows[0]["Cantidad"], "3")
        self.assertEqual(rows[-2]["Concepto"], "Subtotal")
        self.assertEqual(rows[-1]["Concepto"], "Total")
        self.assertEqual(rows[-1]["Total"], format_mxn(breakdown.total))


if __name__ == "__main__":
    unittest.main()

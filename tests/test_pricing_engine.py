from __future__ import annotations

import unittest
from dataclasses import replace
from decimal import Decimal

from camera_catalog import DEFAULT_CATALOG
from pricing_engine import (
    QuoteConfiguration,
    QuoteConfigurationError,
    apply_field_update,
    base_camera_price,
    compute_quote,
    format_quantity,
)


def _reference_config() -> QuoteConfiguration:
    return QuoteConfiguration(
        interior_count=2,
        exterior_count=1,
        night_vision_type="infrared",
        technology_type="ip",
        physical_types=frozenset({"dome"}),
        resolution="4mp",
        has_dvr="no",
        storage="1tb",
        remote_access="yes",
        needs_monitor="no",
        installation_service="complete",
        cable_length=Decimal("20"),
    )


def _print_quote(label: str, quote) -> None:
    print("\n" + "=" * 72)
    print(label)
    for li in quote.line_items:
        print(f"  - {li.label}: {li.quantity} x {li.unit_price} = {li.line_total}")
    print(f"TOTAL  {quote.total}")
    print("=" * 72)


class TestComputeQuote(unittest.TestCase):
    def test_reference_configuration_total(self) -> None:
        quote = compute_quote(_reference_config(), DEFAULT_CATALOG)
        _print_quote("test_reference_configuration_total", quote)
        items = {li.label: li for li in quote.line_items}

        cameras = items["Cámaras (2 interior, 1 exterior)"]
        self.assertEqual(cameras.unit_price, 2000)
        self.assertEqual(cameras.quantity, 3)
        self.assertEqual(cameras.line_total, 6000)
        self.assertEqual(items["Resolución 4MP"].line_total, 1050)
        self.assertEqual(items["Instalación Interior"].line_total, 400)
        self.assertEqual(items["Instalación Exterior"].line_total, 350)
        self.assertEqual(items["DVR/NVR"].line_total, 2500)
        self.assertEqual(items["Servicio de instalación: Instalación completa"].line_total, 500)
        self.assertEqual(items["Cableado (20 metros)"].line_total, 1600)
        self.assertEqual(items["Almacenamiento: Disco Duro 1TB"].line_total, 1200)
        self.assertEqual(items["Acceso Remoto"].line_total, 500)
        self.assertEqual(quote.total, 14100)
        self.assertEqual(quote.subtotal, quote.total)

    def test_line_item_order(self) -> None:
        quote = compute_quote(_reference_config(), DEFAULT_CATALOG)
        labels = [li.label for li in quote.line_items]
        self.assertEqual(
            labels,
            [
                "Cámaras (2 interior, 1 exterior)",
                "Resolución 4MP",
                "Instalación Interior",
                "Instalación Exterior",
                "DVR/NVR",
                "Servicio de instalación: Instalación completa",
                "Cableado (20 metros)",
                "Almacenamiento: Disco Duro 1TB",
                "Acceso Remoto",
            ],
        )

    def test_is_idempotent(self) -> None:
        config = _reference_config()
        self.assertEqual(compute_quote(config, DEFAULT_CATALOG), compute_quote(config, DEFAULT_CATALOG))

    def test_adding_a_camera_never_lowers_the_total(self) -> None:
        config = _reference_config()
        base = compute_quote(config, DEFAULT_CATALOG).total
        more_interior = compute_quote(replace(config, interior_count=config.interior_count + 1), DEFAULT_CATALOG).total
        more_exterior = compute_quote(replace(config, exterior_count=config.exterior_count + 1), DEFAULT_CATALOG).total
        self.assertGreaterEqual(more_interior, base)
        self.assertGreaterEqual(more_exterior, base)

        empty = QuoteConfiguration()
        self.assertGreaterEqual(
            compute_quote(replace(empty, interior_count=1), DEFAULT_CATALOG).total,
            compute_quote(empty, DEFAULT_CATALOG).total,
        )

    def test_zero_cameras_keeps_flat_items(self) -> None:
        config = replace(
            _reference_config(),
            interior_count=0,
            exterior_count=0,
            needs_monitor="yes",
            monitor_size="24in",
        )
        quote = compute_quote(config, DEFAULT_CATALOG)
        labels = [li.label for li in quote.line_items]
        self.assertFalse(any(l.startswith("Cámaras") for l in labels))
        self.assertFalse(any(l.startswith("Resolución") for l in labels))
        self.assertFalse(any(l.startswith("Instalación ") for l in labels))
        self.assertIn("DVR/NVR", labels)
        self.assertIn("Servicio de instalación: Instalación completa", labels)
        self.assertIn("Almacenamiento: Disco Duro 1TB", labels)
        self.assertIn("Acceso Remoto", labels)
        self.assertIn('Monitor Monitor 24"', labels)
        self.assertEqual(quote.total, 2500 + 500 + 1600 + 1200 + 500 + 2600)

    def test_unknown_ids_contribute_nothing(self) -> None:
        config = QuoteConfiguration(
            interior_count=1,
            night_vision_type="thermal",
            technology_type="quantum",
            physical_types=frozenset({"periscope"}),
            resolution="16mp",
            has_dvr="maybe",
            storage="floppy",
            remote_access="sometimes",
            needs_monitor="yes",
            monitor_size="100in",
            installation_service="deluxe",
        )
        quote = compute_quote(config, DEFAULT_CATALOG)
        self.assertEqual(
            [li.label for li in quote.line_items],
            ["Cámaras (1 interior, 0 exterior)", "Instalación Interior"],
        )
        self.assertEqual(quote.total, 1200 + 200)

    def test_empty_configuration_prices_at_zero(self) -> None:
        quote = compute_quote(QuoteConfiguration(), DEFAULT_CATALOG)
        self.assertEqual(quote.line_items, ())
        self.assertEqual(quote.total, 0)
        self.assertEqual(quote.subtotal, 0)

    def test_physical_surcharge_is_averaged(self) -> None:
        config = QuoteConfiguration(interior_count=1, physical_types=frozenset({"ptz", "bullet"}))
        self.assertEqual(base_camera_price(config, DEFAULT_CATALOG), 1200 + 1150)

        three = replace(config, physical_types=frozenset({"ptz", "bullet", "dome"}))
        # (2300 + 0 + 200) / 3 = 833.33
        self.assertEqual(base_camera_price(three, DEFAULT_CATALOG), Decimal("2033.33"))

    def test_night_vision_and_technology_surcharges(self) -> None:
        config = QuoteConfiguration(exterior_count=1, night_vision_type="full-color", technology_type="ip")
        self.assertEqual(base_camera_price(config, DEFAULT_CATALOG), 1200 + 600 + 400)
        self.assertEqual(base_camera_price(replace(config, night_vision_type="none"), DEFAULT_CATALOG), 1600)

    def test_cabling_only_for_cabling_levels(self) -> None:
        config = replace(_reference_config(), installation_service="basic", cable_length=Decimal("50"))
        labels = [li.label for li in compute_quote(config, DEFAULT_CATALOG).line_items]
        self.assertFalse(any(l.startswith("Cableado") for l in labels))

        standard = replace(config, installation_service="standard")
        items = {li.label: li for li in compute_quote(standard, DEFAULT_CATALOG).line_items}
        self.assertEqual(items["Cableado (50 metros)"].line_total, 4000)

    def test_fractional_cable_length(self) -> None:
        config = replace(_reference_config(), cable_length=Decimal("12.5"))
        items = {li.label: li for li in compute_quote(config, DEFAULT_CATALOG).line_items}
        self.assertEqual(items["Cableado (12.5 metros)"].line_total, 1000)

    def test_storage_skipped_when_recorder_is_owned(self) -> None:
        config = replace(_reference_config(), has_dvr="yes")
        labels = [li.label for li in compute_quote(config, DEFAULT_CATALOG).line_items]
        self.assertNotIn("DVR/NVR", labels)
        self.assertFalse(any(l.startswith("Almacenamiento") for l in labels))

    def test_monitor_only_when_needed(self) -> None:
        config = replace(_reference_config(), needs_monitor="no", monitor_size="32in")
        labels = [li.label for li in compute_quote(config, DEFAULT_CATALOG).line_items]
        self.assertFalse(any(l.startswith("Monitor") for l in labels))

        needed = replace(config, needs_monitor="yes")
        total = compute_quote(needed, DEFAULT_CATALOG).total
        self.assertEqual(total, 14100 + 3900)


class TestApplyFieldUpdate(unittest.TestCase):
    def test_returns_new_configuration(self) -> None:
        config = QuoteConfiguration()
        updated = apply_field_update(config, "resolution", "4mp")
        self.assertEqual(updated.resolution, "4mp")
        self.assertEqual(config.resolution, "")

    def test_wifi_is_exclusive(self) -> None:
        config = QuoteConfiguration()
        config = apply_field_update(config, "physical_types", "bullet")
        config = apply_field_update(config, "physical_types", "dome")
        self.assertEqual(config.physical_types, frozenset({"bullet", "dome"}))

        config = apply_field_update(config, "physical_types", "wifi")
        self.assertEqual(config.physical_types, frozenset({"wifi"}))

        config = apply_field_update(config, "physical_types", "bullet")
        self.assertEqual(config.physical_types, frozenset({"bullet"}))

    def test_selecting_a_selected_type_removes_it(self) -> None:
        config = apply_field_update(QuoteConfiguration(), "physical_types", "ptz")
        config = apply_field_update(config, "physical_types", "ptz")
        self.assertEqual(config.physical_types, frozenset())

    def test_unknown_ids_are_stored(self) -> None:
        config = apply_field_update(QuoteConfiguration(), "storage", "tape")
        self.assertEqual(config.storage, "tape")
        config = apply_field_update(config, "physical_types", "periscope")
        self.assertEqual(config.physical_types, frozenset({"periscope"}))

    def test_rejects_malformed_updates(self) -> None:
        config = QuoteConfiguration()
        with self.assertRaises(QuoteConfigurationError):
            apply_field_update(config, "camera_type", "ptz")
        with self.assertRaises(QuoteConfigurationError):
            apply_field_update(config, "interior_count", -1)
        with self.assertRaises(QuoteConfigurationError):
            apply_field_update(config, "interior_count", True)
        with self.assertRaises(QuoteConfigurationError):
            apply_field_update(config, "exterior_count", 1.5)
        with self.assertRaises(QuoteConfigurationError):
            apply_field_update(config, "cable_length", 0)
        with self.assertRaises(QuoteConfigurationError):
            apply_field_update(config, "cable_length", "20")
        with self.assertRaises(QuoteConfigurationError):
            apply_field_update(config, "resolution", 4)
        with self.assertRaises(QuoteConfigurationError):
            apply_field_update(config, "physical_types", ["bullet"])

    def test_cable_length_accepts_numbers(self) -> None:
        config = apply_field_update(QuoteConfiguration(), "cable_length", 25.0)
        self.assertEqual(config.cable_length, Decimal("25"))
        self.assertEqual(format_quantity(config.cable_length), "25")

    def test_configuration_error_is_value_error(self) -> None:
        self.assertTrue(issubclass(QuoteConfigurationError, ValueError))


if __name__ == "__main__":
    unittest.main()

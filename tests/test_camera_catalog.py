from __future__ import annotations

import unittest

from camera_catalog import (
    CABLING_SERVICE_IDS,
    DEFAULT_CATALOG,
    INSTALLATION_SERVICES,
    PHYSICAL_TYPES,
    RESOLUTIONS,
    STORAGE_OPTIONS,
    find_entry,
    name_of,
    ordered_ids,
    price_of,
)


class TestCameraCatalog(unittest.TestCase):
    def test_ids_are_unique_within_each_table(self) -> None:
        for attr in (
            "night_vision_types",
            "technology_types",
            "physical_types",
            "resolutions",
            "placements",
            "dvr_options",
            "installation_services",
            "storage_options",
            "remote_access_options",
            "monitor_need_options",
            "monitor_sizes",
        ):
            table = getattr(DEFAULT_CATALOG, attr)
            ids = [e.id for e in table]
            self.assertEqual(len(ids), len(set(ids)), attr)
            self.assertTrue(all(e.price >= 0 for e in table), attr)

    def test_find_entry_returns_matching_entry(self) -> None:
        entry = find_entry(RESOLUTIONS, "4mp")
        self.assertIsNotNone(entry)
        assert entry is not None
        self.assertEqual(entry.price, 350)
        self.assertEqual(entry.name, "4MP")

    def test_unknown_or_unset_ids_are_not_found(self) -> None:
        self.assertIsNone(find_entry(RESOLUTIONS, "12mp"))
        self.assertIsNone(find_entry(RESOLUTIONS, ""))
        self.assertIsNone(find_entry(RESOLUTIONS, None))
        self.assertEqual(price_of(STORAGE_OPTIONS, "16tb"), 0)
        self.assertEqual(price_of(STORAGE_OPTIONS, ""), 0)

    def test_name_of_falls_back_to_raw_id(self) -> None:
        self.assertEqual(name_of(STORAGE_OPTIONS, "1tb"), "Disco Duro 1TB")
        self.assertEqual(name_of(STORAGE_OPTIONS, "mystery"), "mystery")
        self.assertEqual(name_of(STORAGE_OPTIONS, ""), "")

    def test_physical_type_surcharges(self) -> None:
        surcharges = {e.id: e.price for e in PHYSICAL_TYPES}
        self.assertEqual(surcharges, {"bullet": 0, "dome": 200, "ptz": 2300, "wifi": 400})

    def test_cabling_levels_exist_in_installation_table(self) -> None:
        ids = {e.id for e in INSTALLATION_SERVICES}
        self.assertTrue(CABLING_SERVICE_IDS <= ids)
        self.assertEqual(price_of(INSTALLATION_SERVICES, "complete"), 500)

    def test_ordered_ids_follow_catalog_order(self) -> None:
        self.assertEqual(
            ordered_ids(PHYSICAL_TYPES, frozenset({"ptz", "bullet", "zzz"})),
            ("bullet", "ptz", "zzz"),
        )

    def test_default_catalog_constants(self) -> None:
        self.assertEqual(DEFAULT_CATALOG.base_camera_price, 1200)
        self.assertEqual(DEFAULT_CATALOG.cable_price_per_meter, 80)


if __name__ == "__main__":
    unittest.main()

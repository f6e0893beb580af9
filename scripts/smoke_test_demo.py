from __future__ import annotations

"""
Smoke test for the quotation wizard (local, offline).

This script simulates "wizard button presses" against a WizardSession one step at a time,
then:
- checks each step's validity gate before advancing
- computes the quote on the results step (pricing_engine)
- builds the WhatsApp handoff link (quote_message)
- generates a PDF estimate (quote_pdf)

It writes PDFs to `out/smoke_test_demo/` and exits non-zero if anything breaks.

Usage:
  python3 scripts/smoke_test_demo.py
  python3 scripts/smoke_test_demo.py --out-dir out/smoke_test_demo
"""

import argparse
import sys
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

# Allow running as `python3 scripts/smoke_test_demo.py` (module imports live at repo root).
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from pricing_engine import QuotationBreakdown
from quote_message import format_mxn, quote_whatsapp_link, selection_summary
from quote_pdf import QuotePdfArtifact, line_items_from_breakdown, make_quote_pdf_bytes
from quote_wizard import STEP_COUNT, WizardSession


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class Press:
    label: str
    apply: Callable[[WizardSession], None]


def _make_pdf_bytes(*, session: WizardSession, breakdown: QuotationBreakdown, out_dir: Path, label: str) -> bytes:
    artifact = QuotePdfArtifact(
        quote_id=f"smoke-{label}",
        quote_date=datetime.now(timezone.utc).date(),
        business_name="XperTech",
        contact_phone="529621765599",
        summary_rows=selection_summary(session.configuration, session.catalog),
        line_items=line_items_from_breakdown(breakdown),
        subtotal=breakdown.subtotal,
        total=breakdown.total,
    )
    pdf_bytes = make_quote_pdf_bytes(artifact)
    if not pdf_bytes.startswith(b"%PDF"):
        raise RuntimeError("Generated PDF does not start with %PDF header.")
    for marker in (b"Subtotal", b"Total", b"CONCEPTO"):
        if marker not in pdf_bytes:
            raise RuntimeError(f"Generated PDF missing expected marker: {marker!r}")
    (out_dir / f"{label}.pdf").write_bytes(pdf_bytes)
    return pdf_bytes


def _run_scenario(*, name: str, presses: list[Press], expected_total: Optional[int], out_dir: Path) -> None:
    session = WizardSession()
    print("")
    print("=" * 72)
    print(f"SCENARIO: {name}")
    print("=" * 72)
    for i, press in enumerate(presses, start=1):
        press.apply(session)
        step = session.step
        if not session.advance():
            raise RuntimeError(f"Step {step.index} ({step.label}) refused to advance after '{press.label}'")
        print(f"[{i}/{len(presses)}] {press.label} -> step {session.current}/{STEP_COUNT}")

    if session.current != STEP_COUNT:
        raise RuntimeError(f"Expected to land on the results step, got step {session.current}")
    breakdown = session.quotation_result
    if breakdown is None:
        raise RuntimeError("Quotation was not computed on reaching the results step")
    if expected_total is not None and breakdown.total != expected_total:
        raise RuntimeError(f"Expected total {expected_total}, got {breakdown.total}")

    for li in breakdown.line_items:
        print(f"  - {li.label}: {li.quantity} x {format_mxn(li.unit_price)} = {format_mxn(li.line_total)}")
    print(f"  - total: {format_mxn(breakdown.total)}")

    label = name.replace(" ", "_").lower()
    _make_pdf_bytes(session=session, breakdown=breakdown, out_dir=out_dir, label=label)
    print(f"  - pdf: {label}.pdf")
    print(f"  - whatsapp: {quote_whatsapp_link(session.configuration, breakdown, session.catalog)[:96]}...")


def _set(**updates: object) -> Callable[[WizardSession], None]:
    def _apply(session: WizardSession) -> None:
        for name, value in updates.items():
            session.set_field(name, value)

    return _apply


def _toggle(*type_ids: str) -> Callable[[WizardSession], None]:
    def _apply(session: WizardSession) -> None:
        for type_id in type_ids:
            session.set_field("physical_types", type_id)

    return _apply


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--out-dir",
        default=str(_repo_root() / "out" / "smoke_test_demo"),
        help="Directory to write PDFs into (default: out/smoke_test_demo).",
    )
    args = parser.parse_args(argv)

    out_dir = Path(args.out_dir).resolve()
    out_dir.mkdir(parents=True, exist_ok=True)

    # Scenario 1: the reference home installation.
    s1 = [
        Press("counts", _set(interior_count=2, exterior_count=1)),
        Press("night_vision", _set(night_vision_type="infrared")),
        Press("technology", _set(technology_type="ip")),
        Press("physical_type", _toggle("dome")),
        Press("resolution", _set(resolution="4mp")),
        Press("recording", _set(has_dvr="no", storage="1tb")),
        Press("remote_access", _set(remote_access="yes")),
        Press("monitor", _set(needs_monitor="no")),
        Press("installation", _set(installation_service="complete", cable_length=20)),
        Press("location", _set(location="Centro, Tapachula")),
    ]

    # Scenario 2: WiFi cameras on an existing recorder with a monitor and no installation.
    s2 = [
        Press("counts", _set(exterior_count=4)),
        Press("night_vision", _set(night_vision_type="full-color")),
        Press("technology", _set(technology_type="analog")),
        Press("physical_type", _toggle("bullet", "ptz", "wifi")),
        Press("resolution", _set(resolution="8mp")),
        Press("recording", _set(has_dvr="yes")),
        Press("remote_access", _set(remote_access="no")),
        Press("monitor", _set(needs_monitor="yes", monitor_size="22in")),
        Press("installation", _set(installation_service="none")),
        Press("location", _set(location="")),
    ]

    try:
        _run_scenario(name="Reference quote", presses=s1, expected_total=14100, out_dir=out_dir)
        _run_scenario(name="WiFi fleet", presses=s2, expected_total=None, out_dir=out_dir)
    except Exception:
        traceback.print_exc()
        return 1

    print("")
    print(f"OK: PDFs written to {out_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

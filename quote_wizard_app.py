from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

import streamlit as st

from camera_catalog import Catalog, CatalogEntry, find_entry
from pricing_engine import QuoteConfigurationError
from quote_message import (
    DEFAULT_WHATSAPP_PHONE,
    breakdown_rows,
    format_mxn,
    quote_whatsapp_link,
    selection_summary,
    whatsapp_link,
)
from quote_pdf import QuotePdfArtifact, line_items_from_breakdown, make_quote_pdf_bytes
from quote_wizard import STEP_COUNT, WIZARD_STEPS, WizardSession

_SESSION_KEY = "wizard_session"
_ERROR_KEY = "wizard_error"

# Single-choice fields -> (catalog table attribute, question, help text).
_CHOICE_FIELDS: dict[str, tuple[str, str, str]] = {
    "night_vision_type": ("night_vision_types", "¿Qué tipo de visión nocturna necesitas?", ""),
    "technology_type": ("technology_types", "Selecciona la tecnología de las cámaras", ""),
    "resolution": ("resolutions", "Selecciona la resolución deseada", ""),
    "has_dvr": (
        "dvr_options",
        "¿Ya cuentas con DVR/NVR?",
        "El DVR/NVR es el dispositivo que grabará y controlará tus cámaras.",
    ),
    "storage": ("storage_options", "Tipo de almacenamiento necesario", ""),
    "remote_access": (
        "remote_access_options",
        "¿Necesitas acceso remoto?",
        "Podrás ver tus cámaras desde tu celular o computadora en cualquier parte del mundo.",
    ),
    "needs_monitor": ("monitor_need_options", "¿Necesitas un monitor?", ""),
    "monitor_size": ("monitor_sizes", "Tamaño del monitor", ""),
    "installation_service": ("installation_services", "¿Qué servicio de instalación necesitas?", ""),
}


@dataclass(frozen=True)
class AppSettings:
    whatsapp_phone: str
    business_name: str


def _read_secret_or_env_str(key: str) -> str:
    """
    Read a configuration value from Streamlit Secrets (preferred) or environment variables.

    Returns a stripped string; returns "" when missing.
    """
    val: object = ""
    try:
        val = st.secrets.get(key, "")  # type: ignore[attr-defined]
    except Exception:
        # No secrets.toml (local runs, tests).
        val = ""
    if not val:
        val = os.environ.get(key, "")
    if isinstance(val, str):
        return val.strip()
    return str(val).strip() if val is not None else ""


def _app_settings() -> AppSettings:
    return AppSettings(
        whatsapp_phone=_read_secret_or_env_str("WHATSAPP_PHONE") or DEFAULT_WHATSAPP_PHONE,
        business_name=_read_secret_or_env_str("BUSINESS_NAME") or "XperTech",
    )


def _debug_log(*, location: str, message: str, data: dict) -> None:
    path = _read_secret_or_env_str("QUOTE_DEBUG_LOG")
    if not path:
        return
    payload = {
        "location": location,
        "message": message,
        "data": data,
        "timestamp": int(time.time() * 1000),
    }
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False) + "\n")
    except OSError:
        # Never let logging break the UI.
        pass


def _wizard_session() -> WizardSession:
    session = st.session_state.get(_SESSION_KEY)
    if not isinstance(session, WizardSession):
        session = WizardSession()
        st.session_state[_SESSION_KEY] = session
        _debug_log(location="quote_wizard_app.py:_wizard_session", message="New wizard session", data={})
    return session


def _widget_key(field_name: str) -> str:
    return f"wizard_{field_name}"


def _physical_widget_key(type_id: str) -> str:
    return f"wizard_physical_{type_id}"


def _sync_widget_state(session: WizardSession) -> None:
    """
    Push the session's configuration into widget keys before widgets are created.

    The WizardSession is the source of truth; widgets only report changes through callbacks.
    """
    config = session.configuration
    for field_name in _CHOICE_FIELDS:
        value = getattr(config, field_name)
        st.session_state[_widget_key(field_name)] = value or None
    for entry in session.catalog.physical_types:
        st.session_state[_physical_widget_key(entry.id)] = entry.id in config.physical_types
    st.session_state[_widget_key("cable_length")] = float(config.cable_length)
    st.session_state[_widget_key("location")] = config.location


def _set_error(message: Optional[str]) -> None:
    if message:
        st.session_state[_ERROR_KEY] = message
    else:
        st.session_state.pop(_ERROR_KEY, None)


def _apply_update(field_name: str, value: object) -> None:
    session = _wizard_session()
    try:
        session.set_field(field_name, value)
    except QuoteConfigurationError as exc:
        _set_error(str(exc))
        return
    _set_error(None)
    _debug_log(
        location="quote_wizard_app.py:_apply_update",
        message="Field updated",
        data={"field": field_name, "value": str(value), "step": session.current},
    )


def _on_widget_change(field_name: str) -> None:
    value = st.session_state.get(_widget_key(field_name))
    _apply_update(field_name, "" if value is None else value)


def _on_physical_toggle(type_id: str) -> None:
    _apply_update("physical_types", type_id)


def _on_count_adjust(field_name: str, delta: int) -> None:
    session = _wizard_session()
    session.adjust_count(field_name, delta)
    _set_error(None)


def _go_next() -> None:
    session = _wizard_session()
    from_step = session.current
    if not session.advance():
        _set_error("Completa este paso para continuar.")
        return
    _set_error(None)
    _debug_log(
        location="quote_wizard_app.py:_go_next",
        message="Advanced",
        data={
            "from_step": from_step,
            "to_step": session.current,
            "total": str(session.quotation_result.total) if session.quotation_result else None,
        },
    )


def _go_back() -> None:
    _wizard_session().retreat()
    _set_error(None)


def _go_to(step_index: int) -> None:
    if not _wizard_session().jump_to(step_index):
        _set_error("Completa los pasos anteriores antes de continuar.")
        return
    _set_error(None)


def _restart() -> None:
    _wizard_session().reset()
    _set_error(None)
    _debug_log(location="quote_wizard_app.py:_restart", message="Quote restarted", data={})


def _entry_label(entry: CatalogEntry, *, per_unit: str = "") -> str:
    label = entry.name
    if entry.price:
        label += f"  (+ {format_mxn(entry.price)}{per_unit})"
    return label


def _render_choice(catalog: Catalog, field_name: str, *, per_unit: str = "") -> None:
    table_attr, question, help_text = _CHOICE_FIELDS[field_name]
    table: Sequence[CatalogEntry] = getattr(catalog, table_attr)
    st.markdown(f"### {question}")
    if help_text:
        st.caption(help_text)
    labels = {e.id: _entry_label(e, per_unit=per_unit) for e in table}
    st.radio(
        question,
        options=[e.id for e in table],
        format_func=lambda i: labels.get(i, i),
        key=_widget_key(field_name),
        on_change=_on_widget_change,
        args=(field_name,),
        label_visibility="collapsed",
    )
    selected = find_entry(table, st.session_state.get(_widget_key(field_name)))
    if selected is not None and selected.description:
        st.caption(selected.description)


def _render_counts_controls(session: WizardSession) -> None:
    st.markdown("### ¿Cuántas cámaras necesitas y dónde se instalarán?")
    catalog = session.catalog
    cols = st.columns(2)
    for col, field_name, placement_id in (
        (cols[0], "interior_count", "interior"),
        (cols[1], "exterior_count", "exterior"),
    ):
        placement = find_entry(catalog.placements, placement_id)
        with col:
            title = placement.name if placement is not None else placement_id
            st.markdown(f"**{title}**")
            if placement is not None and placement.price:
                st.caption(f"Instalación: + {format_mxn(placement.price)} por cámara")
            minus, value, plus = st.columns([1, 1, 1])
            minus.button(
                "−",
                key=f"{field_name}_minus",
                on_click=_on_count_adjust,
                args=(field_name, -1),
                use_container_width=True,
                disabled=getattr(session.configuration, field_name) <= 0,
            )
            value.markdown(f"<h3 style='text-align:center'>{getattr(session.configuration, field_name)}</h3>", unsafe_allow_html=True)
            plus.button(
                "+",
                key=f"{field_name}_plus",
                on_click=_on_count_adjust,
                args=(field_name, 1),
                use_container_width=True,
            )


def _render_physical_type_controls(session: WizardSession) -> None:
    st.markdown("### Selecciona el tipo de cámaras")
    st.caption("Puedes combinar varios tipos. Las cámaras WiFi no se combinan con otros tipos.")
    for entry in session.catalog.physical_types:
        st.checkbox(
            _entry_label(entry),
            key=_physical_widget_key(entry.id),
            on_change=_on_physical_toggle,
            args=(entry.id,),
            help=entry.description,
        )


def _render_recording_controls(session: WizardSession) -> None:
    _render_choice(session.catalog, "has_dvr")
    if session.configuration.has_dvr == "no":
        _render_choice(session.catalog, "storage")


def _render_monitor_controls(session: WizardSession) -> None:
    _render_choice(session.catalog, "needs_monitor")
    if session.configuration.needs_monitor == "yes":
        _render_choice(session.catalog, "monitor_size")


def _render_installation_controls(session: WizardSession) -> None:
    _render_choice(session.catalog, "installation_service")
    if session.configuration.installation_service in session.catalog.cabling_service_ids:
        st.number_input(
            f"Longitud estimada de cable en metros (+ {format_mxn(session.catalog.cable_price_per_meter)} / metro)",
            min_value=1.0,
            step=5.0,
            key=_widget_key("cable_length"),
            on_change=_on_widget_change,
            args=("cable_length",),
        )


def _render_location_controls(session: WizardSession) -> None:
    st.markdown("### Ubicación aproximada")
    st.text_input(
        "Indícanos la colonia o zona de instalación:",
        key=_widget_key("location"),
        on_change=_on_widget_change,
        args=("location",),
        placeholder="Ej: Centro, Tapachula",
    )
    st.caption("Esta información nos ayuda a estimar costos adicionales por distancia si fuera necesario.")


def _build_quote_pdf_bytes(session: WizardSession, settings: AppSettings) -> bytes:
    breakdown = session.quotation_result
    if breakdown is None:
        raise ValueError("No quotation has been computed yet")
    artifact = QuotePdfArtifact(
        quote_id=datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S"),
        quote_date=datetime.now(timezone.utc).date(),
        business_name=settings.business_name,
        contact_phone=settings.whatsapp_phone,
        summary_rows=selection_summary(session.configuration, session.catalog),
        line_items=line_items_from_breakdown(breakdown),
        subtotal=breakdown.subtotal,
        total=breakdown.total,
    )
    return make_quote_pdf_bytes(artifact)


def _render_results(session: WizardSession, settings: AppSettings) -> None:
    breakdown = session.quotation_result
    if breakdown is None:
        st.info("Calculando...")
        return

    st.markdown("## Tu Cotización Personalizada")
    summary = selection_summary(session.configuration, session.catalog)
    half = (len(summary) + 1) // 2
    left, right = st.columns(2)
    for col, rows in ((left, summary[:half]), (right, summary[half:])):
        with col:
            for label, value in rows:
                st.markdown(f"{label}: **{value or 'No especificada'}**")

    st.dataframe(breakdown_rows(breakdown), use_container_width=True, hide_index=True)
    st.metric("Total", format_mxn(breakdown.total))

    st.caption("* Esta cotización es un estimado. Para un presupuesto detallado, contacta con nuestro equipo:")
    st.link_button(
        "Cotiza por WhatsApp",
        quote_whatsapp_link(session.configuration, breakdown, session.catalog, phone=settings.whatsapp_phone),
        use_container_width=True,
    )
    try:
        pdf_bytes = _build_quote_pdf_bytes(session, settings)
    except (ValueError, OSError) as exc:
        st.error(f"No se pudo generar el PDF: {exc}")
    else:
        st.download_button(
            "Descargar cotización (PDF)",
            data=pdf_bytes,
            file_name="cotizacion.pdf",
            mime="application/pdf",
            use_container_width=True,
        )


def _next_button_label(session: WizardSession) -> str:
    if session.current == STEP_COUNT - 1:
        return "Calcular Cotización"
    if session.current == STEP_COUNT:
        return "Finalizar"
    return "Siguiente"


def _render_step_controls(session: WizardSession) -> None:
    col1, _, col2 = st.columns([1, 4, 1])
    col1.button(
        "Anterior",
        key=f"wizard_back_{session.current}",
        on_click=_go_back,
        disabled=session.current <= 1,
        use_container_width=True,
    )
    col2.button(
        _next_button_label(session),
        key=f"wizard_next_{session.current}",
        on_click=_go_next,
        disabled=not session.is_current_step_valid(),
        type="primary",
        use_container_width=True,
    )


def _render_sidebar(session: WizardSession, settings: AppSettings) -> None:
    st.sidebar.subheader("Cotizador")
    for step in WIZARD_STEPS:
        marker = "➡️" if step.index == session.current else ("✅" if step.index < session.furthest_visited else "•")
        label = f"{marker} {step.index}. {step.label}"
        if step.index != session.current and session.can_jump_to(step.index):
            st.sidebar.button(label, key=f"wizard_goto_{step.index}", on_click=_go_to, args=(step.index,))
        else:
            st.sidebar.write(label)
    st.sidebar.progress(session.current / STEP_COUNT)
    st.sidebar.caption(f"Paso {session.current} de {STEP_COUNT}")
    st.sidebar.link_button("Contáctanos por WhatsApp", whatsapp_link(settings.whatsapp_phone))


def _render_active_step(session: WizardSession, settings: AppSettings) -> None:
    key = session.step.key
    if key == "counts":
        _render_counts_controls(session)
    elif key == "night_vision":
        _render_choice(session.catalog, "night_vision_type")
    elif key == "technology":
        _render_choice(session.catalog, "technology_type")
    elif key == "physical_type":
        _render_physical_type_controls(session)
    elif key == "resolution":
        _render_choice(session.catalog, "resolution", per_unit=" por cámara")
    elif key == "recording":
        _render_recording_controls(session)
    elif key == "remote_access":
        _render_choice(session.catalog, "remote_access")
    elif key == "monitor":
        _render_monitor_controls(session)
    elif key == "installation":
        _render_installation_controls(session)
    elif key == "location":
        _render_location_controls(session)
    elif key == "results":
        _render_results(session, settings)


def main() -> None:
    settings = _app_settings()
    st.set_page_config(page_title=f"{settings.business_name} - Cotizador de Cámaras", layout="centered")
    st.title("Cotizador de Cámaras")
    st.caption("Diseña tu sistema de videovigilancia personalizado en simples pasos y obtén una cotización al instante.")

    session = _wizard_session()
    _sync_widget_state(session)

    _debug_log(
        location="quote_wizard_app.py:main",
        message="Main rerun snapshot",
        data={
            "step": session.current,
            "furthest_visited": session.furthest_visited,
            "interior_count": session.configuration.interior_count,
            "exterior_count": session.configuration.exterior_count,
            "physical_types": sorted(session.configuration.physical_types),
        },
    )

    _render_sidebar(session, settings)

    with st.container(border=True):
        _render_active_step(session, settings)
        error = st.session_state.get(_ERROR_KEY)
        if error:
            st.error(str(error))
        _render_step_controls(session)

    if session.finished:
        st.success("¡Gracias! Envíanos tu cotización por WhatsApp y un asesor te contactará.")
        st.button("Nueva cotización", key="wizard_restart", on_click=_restart)


if __name__ == "__main__":
    main()

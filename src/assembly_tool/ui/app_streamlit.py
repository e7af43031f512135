"""
Streamlit UI for the assembly configurator.

Features:
- Step-by-step component selection filtered by compatibility
- Live bill of materials with pricing adjustments
- Export to CSV
- Quote creation and saved quotes with expiry status
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from assembly_tool.config.settings import get_settings
from assembly_tool.data.build_catalog import load_catalog
from assembly_tool.engine.models import Category, QuoteStatus
from assembly_tool.services.configurator_service import ConfiguratorService, next_open_category
from assembly_tool.ui.formatting import format_adjustment, format_price


st.set_page_config(
    page_title="Assembly Configurator",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_service():
    """Get cached service instance."""
    settings = get_settings()
    return ConfiguratorService.from_settings(load_catalog(settings), settings)


try:
    service = get_service()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


# ============================================================================
# SIDEBAR: Session
# ============================================================================
with st.sidebar:
    st.header("👤 Session")
    user_id = st.text_input("User ID", value="guest", key="user_input")

    saved = service.list_selections()
    if 'selection_id' not in st.session_state or service.selection_store.get_selection(st.session_state.selection_id) is None:
        st.session_state.selection_id = saved[-1].id if saved else service.new_selection().id
        saved = service.list_selections()

    labels = {s.id: f"{s.name} ({len(s)} parts)" for s in saved}
    chosen = st.selectbox(
        "Configuration",
        options=list(labels),
        index=list(labels).index(st.session_state.selection_id),
        format_func=lambda sid: labels[sid],
    )
    if chosen != st.session_state.selection_id:
        st.session_state.selection_id = chosen
        st.rerun()

    c1, c2 = st.columns(2)
    if c1.button("➕ New", use_container_width=True):
        st.session_state.selection_id = service.new_selection().id
        st.rerun()
    if c2.button("🗑️ Delete", use_container_width=True):
        service.delete_selection(st.session_state.selection_id)
        del st.session_state.selection_id
        st.rerun()


selection = service.get_selection(st.session_state.selection_id)

st.title("Assembly Configurator")
st.caption(f"v1.0 | {len(service.catalog)} components | {datetime.now().strftime('%Y-%m-%d')}")

tab1, tab2, tab3 = st.tabs(["⚙️ Configure", "🧾 Bill & Quote", "📁 Quotes"])


# ============================================================================
# TAB 1: CONFIGURE
# ============================================================================
with tab1:
    col1, col2 = st.columns([1, 2], gap="large")
    next_category = next_open_category(selection)

    with col1:
        st.subheader("Steps")
        for category in Category.ordered():
            chosen_component = selection.get(category)
            marker = "✅" if chosen_component else ("👉" if category == next_category else "▫️")
            detail = f" — {chosen_component.name}" if chosen_component else ""
            st.markdown(f"{marker} **{category.label}**{detail}")

    with col2:
        category = st.selectbox(
            "Category",
            options=Category.ordered(),
            index=Category.ordered().index(next_category) if next_category else 0,
            format_func=lambda c: c.label,
        )
        options = service.compatible_components(selection.id, category)
        current = selection.get(category)

        if not options:
            st.info("No Compatible Components")
            if not selection.is_complete():
                st.caption(f"Select a {Category.BASE.label} first.")
            else:
                st.caption("Change a previous component to see options here.")

        for component in options:
            with st.container(border=True):
                top, price = st.columns([3, 1])
                top.markdown(f"**{component.name}**")
                top.caption(component.description)
                price.markdown(f"**{format_price(component.base_price)}**")
                if component.specifications:
                    st.caption(" | ".join(f"{k}: {v}" for k, v in list(component.specifications.items())[:3]))
                if current and current.id == component.id:
                    if st.button("Remove", key=f"rm-{component.id}"):
                        service.remove_component(selection.id, category)
                        st.rerun()
                elif st.button("Select Component", key=f"sel-{component.id}", type="primary"):
                    service.select_component(selection.id, component.id, force=True)
                    st.rerun()

    validity = service.validate(selection.id)
    if validity["conflicts"]:
        for conflict in validity["conflicts"]:
            st.warning(f"{conflict['source']} does not allow {conflict['target']}")


# ============================================================================
# TAB 2: BILL & QUOTE
# ============================================================================
with tab2:
    if selection.is_empty:
        st.info("Nothing selected yet.")
    else:
        bill = service.generate_bill(selection.id)

        st.dataframe(pd.DataFrame([{
            'Category': item.component.category.label,
            'Component': item.component.name,
            'Qty': item.quantity,
            'Unit Price': format_price(item.unit_price),
            'Total': format_price(item.total_price),
        } for item in bill.line_items]), use_container_width=True, hide_index=True)

        m1, m2 = st.columns(2)
        m1.metric("Subtotal", format_price(bill.subtotal))
        m2.metric("Total", format_price(bill.total))

        for adj in bill.adjustments:
            st.markdown(f"- {adj.description}: **{format_adjustment(adj.adjustment.type.value, adj.adjustment.value)}**")

        for warning in bill.warnings:
            st.warning(warning)

        with st.expander("🔍 Pricing Trace"):
            st.text(bill.get_trace_text())

        export_df = pd.DataFrame([{
            'Component ID': item.component.id,
            'Component': item.component.name,
            'Quantity': item.quantity,
            'Unit Price': str(item.unit_price),
            'Total Price': str(item.total_price),
        } for item in bill.line_items])
        st.download_button(
            "📥 CSV",
            data=export_df.to_csv(index=False),
            file_name=f"bom_{selection.id}.csv",
            mime="text/csv",
        )

        st.divider()
        notes = st.text_area("Quote notes", key="quote_notes")
        valid_days = st.number_input("Valid for (days)", min_value=0, value=service.quote_factory.default_valid_days)
        if st.button("📄 Generate Quote", type="primary", disabled=not validity["complete"]):
            quote = service.create_quote(selection.id, user_id, valid_days=int(valid_days), notes=notes or None)
            st.success(f"Quote {quote.id[:8]} created, valid until {quote.valid_until:%Y-%m-%d}")


# ============================================================================
# TAB 3: QUOTES
# ============================================================================
with tab3:
    quotes = service.list_quotes(user_id)
    if not quotes:
        st.info("No saved quotes.")
    for quote in sorted(quotes, key=lambda q: q.created_at, reverse=True):
        status = quote.effective_status()
        with st.container(border=True):
            a, b, c = st.columns([2, 1, 1])
            a.markdown(f"**Quote {quote.id[:8]}** · {quote.created_at:%Y-%m-%d}")
            if quote.notes:
                a.caption(quote.notes)
            b.metric("Total", format_price(quote.bill_of_materials.total))
            if status == QuoteStatus.EXPIRED:
                c.error(status.value.upper())
            else:
                c.info(status.value.upper())
            c.caption(f"Valid until {quote.valid_until:%Y-%m-%d}")
            if st.button("Delete", key=f"del-{quote.id}"):
                service.delete_quote(quote.id)
                st.rerun()

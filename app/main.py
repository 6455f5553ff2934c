"""
Streamlit Frontend for Budget Tracker

A single page: totals at the top, the add form, the transaction list
with a delete button per row, and the clear/export actions.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Destructive actions need explicit confirmation
3. Invalid input is reported, never silently dropped
4. Descriptions are always rendered as plain text

The ledger is owned by the cached app components; this module only reads
from it and calls its methods.
"""

import streamlit as st

from budget_tracker.config import get_settings
from budget_tracker.models.audit import AuditEventBuilder
from budget_tracker.orchestrator import create_app_components
from budget_tracker.services.export import XLSX_MIME_TYPE, export_to_excel
from budget_tracker.services.storage import PersistenceWriteError
from budget_tracker.validation import USER_MESSAGE, InvalidInputError


# Page configuration
st.set_page_config(
    page_title="Budget Tracker",
    page_icon="💰",
    layout="centered",
)

LIGHT_CSS = """
<style>
    .stButton>button {
        width: 100%;
    }
    .tx-plus {
        color: #2ecc71;
        font-weight: bold;
    }
    .tx-minus {
        color: #c0392b;
        font-weight: bold;
    }
</style>
"""

DARK_CSS = """
<style>
    .stApp {
        background-color: #1e1e1e;
        color: #f1f1f1;
    }
    .stApp h1, .stApp h2, .stApp h3, .stApp label, .stApp p {
        color: #f1f1f1;
    }
    [data-testid="stMetricValue"] {
        color: #f1f1f1;
    }
</style>
"""


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def main():
    """Main application entry point."""
    settings = get_settings()
    symbol = settings.ledger.currency_symbol
    ledger, audit_logger = get_components()

    dark_mode = st.sidebar.toggle("🌙 Dark mode", value=False)
    st.markdown(LIGHT_CSS, unsafe_allow_html=True)
    if dark_mode:
        st.markdown(DARK_CSS, unsafe_allow_html=True)

    st.title("💰 Budget Tracker")

    render_totals(ledger, symbol)
    st.markdown("---")
    render_add_form(ledger)
    st.markdown("---")
    render_history(ledger, symbol)
    st.markdown("---")
    render_actions(ledger, audit_logger, settings)


def render_totals(ledger, symbol: str):
    """Render balance, income and expense."""
    totals = ledger.aggregates().formatted(symbol)

    st.subheader("Your Balance")
    st.markdown(f"## {totals['balance']}")

    col1, col2 = st.columns(2)
    with col1:
        st.metric("Income", totals["income"])
    with col2:
        st.metric("Expense", totals["expense"])


def render_add_form(ledger):
    """Render the add-transaction form."""
    st.subheader("Add new transaction")

    with st.form("transaction-form", clear_on_submit=True):
        text = st.text_input("Description", placeholder="Enter description...")
        amount = st.text_input(
            "Amount",
            placeholder="Enter amount...",
            help="Negative for expense, positive for income",
        )
        submitted = st.form_submit_button("Add transaction", type="primary")

    if submitted:
        try:
            ledger.add(text, amount)
        except InvalidInputError:
            st.error(USER_MESSAGE)
            return
        except PersistenceWriteError as e:
            st.error(f"Could not save the transaction: {e}")
            return
        st.rerun()


def render_history(ledger, symbol: str):
    """Render the transaction list with one delete button per row."""
    st.subheader("History")

    transactions = ledger.list()
    if not transactions:
        st.caption("No transactions yet")
        return

    for tx in transactions:
        col1, col2, col3 = st.columns([6, 3, 1])
        with col1:
            # st.text never interprets markup
            st.text(tx.description)
        with col2:
            css_class = "tx-plus" if tx.kind.value == "income" else "tx-minus"
            st.markdown(
                f'<span class="{css_class}">{tx.display_amount(symbol)}</span>',
                unsafe_allow_html=True,
            )
        with col3:
            if st.button("x", key=f"delete-{tx.id}", help="Delete this transaction"):
                try:
                    ledger.remove(tx.id)
                except PersistenceWriteError as e:
                    st.error(f"Could not delete the transaction: {e}")
                    return
                st.rerun()


def render_actions(ledger, audit_logger, settings):
    """Render clear-all and export."""
    col1, col2 = st.columns(2)

    with col1:
        confirmed = st.checkbox("Yes, clear all transactions")
        if st.button("🗑️ Clear all", disabled=not confirmed):
            try:
                ledger.clear()
            except PersistenceWriteError as e:
                st.error(f"Could not clear the ledger: {e}")
                return
            st.rerun()

    with col2:
        transactions = ledger.list()
        if not transactions:
            if st.button("📥 Export to Excel"):
                st.warning("No transactions to export!")
            return

        def _log_export():
            audit_logger.log(AuditEventBuilder.export_completed(
                filename=settings.export.filename,
                row_count=len(transactions),
            ))

        st.download_button(
            "📥 Export to Excel",
            data=export_to_excel(
                transactions,
                settings.export,
                settings.ledger.currency_symbol,
            ),
            file_name=settings.export.filename,
            mime=XLSX_MIME_TYPE,
            on_click=_log_export,
        )


if __name__ == "__main__":
    main()

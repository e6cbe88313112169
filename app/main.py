"""
Streamlit Frontend for Finance Tracker

Presentation only: every read and write goes through the SyncManager.

DESIGN PRINCIPLES:
1. The user always sees whether they are online or offline
2. Saving never fails because the remote store is down
3. Recurring entries are edited and deleted one month at a time
"""

from datetime import date
from decimal import Decimal
from typing import MutableMapping, Optional

import streamlit as st
from pydantic import ValidationError

from finance_tracker.audit import configure_logging
from finance_tracker.config import get_settings, validate_all_settings
from finance_tracker.models import Transaction, TransactionDraft, TransactionType, categories_for
from finance_tracker.sync import EventLoopThread, SyncManager, create_sync_manager


MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


@st.cache_resource
def get_event_loop_thread() -> EventLoopThread:
    """One event loop for every session (cached)."""
    return EventLoopThread()


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    return get_event_loop_thread().run(coro)


def format_money(amount: Decimal) -> str:
    return f"{amount:,.2f}"


@st.cache_resource
def get_manager() -> SyncManager:
    """Get or create the synchronization manager (cached)."""
    configure_logging(debug=get_settings().app.debug_mode)
    manager = create_sync_manager()
    run_async(manager.start())
    return manager


def main():
    """Main application entry point."""
    st.set_page_config(
        page_title="Finance Tracker",
        page_icon="💰",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    manager = get_manager()

    st.sidebar.title("💰 Finance Tracker")
    if manager.is_online:
        st.sidebar.success("🟢 Online - saving to Google Sheets")
    else:
        st.sidebar.warning("🟠 Offline - saving on this device")
        if st.sidebar.button("Try to reconnect"):
            run_async(manager.reconnect())
            st.rerun()

    st.sidebar.markdown("---")
    page = st.sidebar.radio(
        "Navigate to:",
        ["📅 Month", "🔁 Recurring", "⚙️ Settings"],
        index=0,
    )

    if page == "📅 Month":
        render_month_page(manager)
    elif page == "🔁 Recurring":
        render_recurring_page(manager)
    elif page == "⚙️ Settings":
        render_settings_page(manager)


def render_month_page(manager: SyncManager):
    """Month selector, balance cards, projection and the month's entries."""
    today = date.today()
    col1, col2 = st.columns(2)
    with col1:
        month = st.selectbox(
            "Month",
            options=list(range(1, 13)),
            index=today.month - 1,
            format_func=lambda m: MONTH_NAMES[m - 1],
        )
    with col2:
        year = st.number_input("Year", min_value=2020, max_value=2030, value=today.year)

    year = int(year)
    summary = manager.get_balance_summary(year, month)
    col1, col2, col3 = st.columns(3)
    col1.metric("Income", format_money(summary.income))
    col2.metric("Expenses", format_money(summary.expenses))
    col3.metric("Balance", format_money(summary.balance))

    projection = manager.get_month_projection(year, month, today)
    if projection:
        st.markdown("### Month projection")
        st.caption(
            f"Day {projection.current_day} of {projection.days_in_month} • "
            f"{projection.days_remaining} days remaining"
        )
        col1, col2, col3 = st.columns(3)
        col1.metric("Projected income", format_money(projection.projected_income))
        col2.metric("Projected expenses", format_money(projection.projected_expenses))
        col3.metric("Projected balance", format_money(projection.projected_balance))

    st.markdown("---")
    with st.expander("➕ Add transaction"):
        render_transaction_form(manager, key="add", default_month=month, default_year=year)

    transactions = manager.get_transactions_by_month(year, month)
    recurring_count = sum(1 for t in transactions if t.is_recurring)
    st.markdown(f"### {len(transactions)} transactions • {recurring_count} recurring")

    if not transactions:
        st.info("No transactions for this month yet.")
    for transaction in transactions:
        render_transaction_row(manager, transaction)


def render_transaction_form(
    manager: SyncManager,
    key: str,
    default_month: int,
    default_year: int,
    editing: Transaction = None,
):
    """Add form, or edit form when ``editing`` is given."""
    types = list(TransactionType)
    transaction_type = st.radio(
        "Type",
        options=types,
        index=types.index(editing.type) if editing else 1,
        format_func=lambda t: t.value.title(),
        horizontal=True,
        key=f"{key}-type",
    )
    categories = list(categories_for(transaction_type))

    with st.form(f"{key}-form"):
        description = st.text_input(
            "Description", value=editing.description if editing else ""
        )
        amount = st.number_input(
            "Amount",
            min_value=0.0,
            value=float(editing.amount) if editing else 0.0,
            step=0.01,
        )
        category = st.selectbox(
            "Category",
            options=categories,
            index=(
                categories.index(editing.category)
                if editing and editing.category in categories
                else 0
            ),
        )
        col1, col2 = st.columns(2)
        with col1:
            month = st.selectbox(
                "Reference month",
                options=list(range(1, 13)),
                index=(editing.date.month if editing else default_month) - 1,
                format_func=lambda m: MONTH_NAMES[m - 1],
            )
        with col2:
            year = st.number_input(
                "Reference year",
                min_value=2020,
                max_value=2030,
                value=editing.date.year if editing else default_year,
            )
        is_recurring = st.checkbox(
            "Repeat for 12 months",
            value=editing.is_recurring if editing else False,
            disabled=editing is not None,
        )
        submitted = st.form_submit_button("Save")

    if not submitted:
        return

    try:
        draft = TransactionDraft(
            description=description,
            amount=Decimal(str(amount)),
            type=transaction_type,
            category=category,
            reference_month=month,
            reference_year=int(year),
            is_recurring=is_recurring,
        )
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"]) or "form"
            st.error(f"{field}: {error['msg']}")
        return

    save_submission(manager, draft, st.session_state, editing)
    st.rerun()


def save_submission(
    manager: SyncManager,
    draft: TransactionDraft,
    state: MutableMapping,
    editing: Optional[Transaction] = None,
):
    """Store a submitted draft. A saved edit also closes its edit form."""
    if editing:
        run_async(manager.update_transaction(draft.as_edit_of(editing.id)))
        state.pop("editing_id", None)
    else:
        run_async(manager.add_transaction(draft))


def render_transaction_row(manager: SyncManager, transaction: Transaction):
    sign = "+" if transaction.type == TransactionType.INCOME else "-"
    badges = []
    if transaction.is_recurring:
        badges.append("🔁")
    if transaction.is_local:
        badges.append("📴")

    col1, col2, col3 = st.columns([6, 1, 1])
    with col1:
        st.markdown(
            f"**{transaction.description}** {' '.join(badges)}  \n"
            f"{transaction.category} • {transaction.date.isoformat()} • "
            f"{sign}{format_money(transaction.amount)}"
        )
    with col2:
        if st.button("✏️", key=f"edit-{transaction.id}"):
            st.session_state.editing_id = transaction.id
    with col3:
        if st.button("🗑️", key=f"delete-{transaction.id}"):
            run_async(manager.delete_transaction(transaction.id))
            st.rerun()

    if st.session_state.get("editing_id") == transaction.id:
        render_transaction_form(
            manager,
            key=f"edit-{transaction.id}",
            default_month=transaction.date.month,
            default_year=transaction.date.year,
            editing=transaction,
        )


def render_recurring_page(manager: SyncManager):
    st.title("🔁 Recurring transactions")
    recurring = manager.get_recurring_transactions()
    if not recurring:
        st.info("No recurring transactions.")
        return
    for transaction in sorted(recurring, key=lambda t: t.date):
        render_transaction_row(manager, transaction)


def render_settings_page(manager: SyncManager):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")
    status = validate_all_settings()
    sections = [
        ("Google Sheets (Remote store)", "google_sheets"),
        ("Local cache", "cache"),
    ]
    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("### Recent sync events")
    for event in manager.audit_logger.recent_events[:20]:
        st.caption(f"{event.timestamp:%H:%M:%S} • {event.description}")

    st.markdown("---")
    st.markdown("### Danger zone")
    st.markdown(
        "Clearing removes every transaction from this device. "
        "Rows already saved to Google Sheets are kept."
    )
    if st.button("Clear all transactions on this device"):
        run_async(manager.clear_all_transactions())
        st.rerun()


if __name__ == "__main__":
    main()

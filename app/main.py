"""
Streamlit Frontend for LifeLedger

One place to track daily habits and personal income and expenses.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every figure on screen is recomputed from stored records
3. Clear error messages in simple language
4. Visual feedback for all operations
5. Nobody sees anybody else's data

The record store is shared by every browser session; the
"who is logged in" snapshot lives in each session's own state.
"""

import asyncio
import html
from datetime import date, datetime, timezone
from decimal import Decimal

import streamlit as st

from lifeledger.config import get_settings, validate_all_settings
from lifeledger.models.habit import HabitType
from lifeledger.models.stats import Period
from lifeledger.models.transaction import TransactionCategory, TransactionKind
from lifeledger.models.user import FederatedProfile
from lifeledger.orchestrator import (
    AppContext,
    FinanceFlow,
    HabitFlow,
    create_app_context,
    create_storage,
)
from lifeledger.services.currency import CURRENCIES, convert_amount, get_currency_symbol
from lifeledger.services.storage import InMemoryStore, StorageError


# Page configuration
st.set_page_config(
    page_title="LifeLedger",
    page_icon="📒",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .day-done { color: #28a745; font-weight: bold; }
    .day-missed { color: #adb5bd; }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_shared_storage():
    """One record store for all sessions (cached)."""
    return create_storage(get_settings().storage)


def _mark_stale():
    st.session_state["stale"] = True


def get_context() -> AppContext:
    """Per-session context over the shared record store."""
    if "ctx" not in st.session_state:
        ctx = create_app_context(
            storage=get_shared_storage(),
            session_store=InMemoryStore(),
        )
        ctx.notifier.subscribe(_mark_stale)
        st.session_state["ctx"] = ctx
    return st.session_state["ctx"]


def sync_federated_user(ctx: AppContext):
    """Mirror Streamlit's OIDC login (when configured) into our user table."""
    user_info = getattr(st, "user", None)
    if user_info is None or not user_info.get("is_logged_in", False):
        return
    email = user_info.get("email")
    if not email:
        return
    current = ctx.identity.current_user()
    if current and current.email == email.lower() and current.name == user_info.get("name", current.name):
        return
    ctx.identity.sync_federated_session(FederatedProfile(
        email=email,
        name=user_info.get("name") or email.split("@")[0],
        image=user_info.get("picture"),
    ))


def main():
    """Main application entry point."""
    ctx = get_context()

    try:
        sync_federated_user(ctx)
    except StorageError as e:
        st.error(f"Could not reach storage: {e}")

    user = ctx.identity.current_user()
    if user is None:
        render_login_page(ctx)
        return

    # Sidebar navigation
    st.sidebar.title("📒 LifeLedger")
    st.sidebar.markdown(f"Signed in as **{user.name}**")
    if st.sidebar.button("Log out"):
        ctx.identity.logout()
        if getattr(st, "user", None) is not None and st.user.get("is_logged_in", False):
            st.logout()
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["✅ Habits", "📈 Dashboard", "💵 Finance", "⚙️ Settings"],
        index=0,
    )

    if page == "✅ Habits":
        render_habits_page(ctx, HabitFlow(ctx))
    elif page == "📈 Dashboard":
        render_dashboard_page(ctx, HabitFlow(ctx))
    elif page == "💵 Finance":
        render_finance_page(ctx, FinanceFlow(ctx))
    elif page == "⚙️ Settings":
        render_settings_page()

    if st.session_state.pop("stale", False):
        st.rerun()


def render_login_page(ctx: AppContext):
    """Render login and registration."""
    st.title("📒 LifeLedger")
    st.markdown("Track your habits and your money in one place.")

    login_tab, register_tab = st.tabs(["Log in", "Create account"])

    with login_tab:
        with st.form("login"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Log in", type="primary")
        if submitted:
            result = ctx.identity.login(email, password)
            if not result.success:
                st.error(result.error)

    with register_tab:
        with st.form("register"):
            name = st.text_input("Name")
            email = st.text_input("Email", key="register_email")
            password = st.text_input("Password", type="password", key="register_password")
            submitted = st.form_submit_button("Create account", type="primary")
        if submitted:
            result = ctx.identity.register(email, password, name)
            if result.success:
                st.success("✅ Account created. You can log in now.")
            else:
                st.error(result.error)

    if ctx.settings.app.federated_login_enabled:
        st.markdown("---")
        if st.button("Sign in with your provider"):
            st.login()

    if st.session_state.pop("stale", False):
        st.rerun()


def render_habits_page(ctx: AppContext, flow: HabitFlow):
    """Render the habit list with today's logging controls."""
    st.title("✅ Habits")

    with st.expander("➕ New habit", expanded=False):
        with st.form("new_habit", clear_on_submit=True):
            title = st.text_input("Title", placeholder="e.g., Read 20 pages")
            col1, col2 = st.columns(2)
            with col1:
                goal = st.number_input("Goal (days per week)", min_value=1, max_value=7, value=3)
            with col2:
                habit_type = st.selectbox(
                    "Type",
                    options=list(HabitType),
                    format_func=lambda t: t.label,
                )
            submitted = st.form_submit_button("Save habit", type="primary")
        if submitted:
            habit, result = flow.create_habit(title, int(goal), habit_type)
            if not result.is_valid:
                st.error(ctx.validator.get_user_friendly_summary(result))
            elif habit is not None:
                st.toast(f"✅ Saved '{habit.title}'")

    progress = flow.dashboard(days=1)
    if not progress:
        st.info("📋 No habits yet. Create your first one above.")
        return

    st.markdown("### Today")
    for row in progress:
        habit = row.habit
        done_today = row.cells[-1].completed if row.cells else False
        col1, col2, col3 = st.columns([4, 2, 1])
        with col1:
            status = "✅" if done_today else "⬜"
            st.markdown(f"{status} **{habit.title}** · goal {habit.goal_per_week}/week")
        with col2:
            if habit.type is HabitType.CHECK:
                if st.button("Mark done", key=f"done_{habit.id}", disabled=done_today):
                    flow.log_today(habit.id)
            else:
                value = st.number_input(
                    "Value",
                    min_value=0.0,
                    value=float(row.cells[-1].value or 0) if row.cells else 0.0,
                    key=f"value_{habit.id}",
                    label_visibility="collapsed",
                )
                if st.button("Log", key=f"log_{habit.id}"):
                    _, result = flow.log_today(habit.id, value)
                    if not result.is_valid:
                        st.error(result.issues[0].message)
        with col3:
            if st.button("🗑️", key=f"delete_{habit.id}", help="Delete habit and its history"):
                flow.delete_habit(habit.id)


def render_dashboard_page(ctx: AppContext, flow: HabitFlow):
    """Render weekly progress for every habit."""
    days = ctx.settings.app.dashboard_days
    st.title("📈 Dashboard")
    st.markdown(f"Your last {days} days.")

    progress = flow.dashboard(days)
    if not progress:
        st.info("📋 Create a habit to see your progress here.")
        return

    for row in progress:
        st.markdown(f"#### {row.habit.title}")
        cells = " ".join(
            f'<span class="{"day-done" if cell.completed else "day-missed"}" '
            f'title="{cell.date.isoformat()}">●</span>'
            for cell in row.cells
        )
        st.markdown(cells, unsafe_allow_html=True)
        st.progress(row.percentage / 100, text=f"{row.hits}/{row.habit.goal_per_week} · {row.percentage}%")
        col1, col2 = st.columns(2)
        col1.metric("Streak", f"{row.streak} day(s)")
        if row.habit.type is HabitType.NUMBER:
            col2.metric("Total", f"{row.period_sum:g}")

    st.markdown("---")
    if st.button("💬 Get motivation", type="primary"):
        with st.spinner("Asking your coach..."):
            answer = run_async(flow.ask_coach(progress, days))
        if answer.ok:
            st.markdown(f"""
            <div class="success-box">
                <p>{html.escape(answer.response)}</p>
            </div>
            """, unsafe_allow_html=True)
        else:
            st.error(answer.error)


def _money(amount: Decimal, ctx: AppContext, currency: str) -> str:
    rates = st.session_state.get("rates", {})
    converted = convert_amount(amount, ctx.settings.app.default_currency, currency, rates)
    return f"{get_currency_symbol(currency)}{converted:,.2f}"


def render_finance_page(ctx: AppContext, flow: FinanceFlow):
    """Render income/expense entry, summary and charts."""
    st.title("💵 Finance")

    col1, col2 = st.columns(2)
    with col1:
        period = st.selectbox(
            "Period",
            options=list(Period),
            format_func=lambda p: p.label,
        )
    with col2:
        currency = st.selectbox(
            "Display currency",
            options=[
                code for code in ctx.settings.app.supported_currencies_list
                if code in {c["code"] for c in CURRENCIES}
            ],
        )
    if "rates" not in st.session_state:
        st.session_state["rates"] = ctx.rates.get_rates(ctx.settings.app.default_currency)

    now = datetime.now(timezone.utc)
    summary = flow.summary(period, now)
    m1, m2, m3 = st.columns(3)
    m1.metric("Income", _money(summary.income, ctx, currency))
    m2.metric("Expenses", _money(summary.expense, ctx, currency))
    m3.metric("Balance", _money(summary.balance, ctx, currency))

    with st.expander("➕ New transaction", expanded=False):
        kind = st.radio(
            "Type",
            options=list(TransactionKind),
            format_func=lambda k: k.value.title(),
            horizontal=True,
        )
        with st.form("new_transaction", clear_on_submit=True):
            category = st.selectbox(
                "Category",
                options=TransactionCategory.for_kind(kind),
                format_func=lambda c: c.label,
            )
            amount = st.number_input(
                f"Amount ({ctx.settings.app.default_currency})",
                min_value=0.0,
                step=0.01,
                format="%.2f",
            )
            on_date = st.date_input("Date", value=date.today())
            description = st.text_input("Description")
            submitted = st.form_submit_button("Save", type="primary")
        if submitted:
            # number_input returns a float; send the two decimals it displays
            transaction, result = flow.add_transaction(kind, category, round(amount, 2), on_date, description)
            if not result.is_valid:
                st.error(ctx.validator.get_user_friendly_summary(result))
            elif transaction is not None:
                st.toast("✅ Saved.")

    charts = flow.charts(period, now)
    if charts.breakdown:
        st.markdown("### Expenses by category")
        st.bar_chart(
            {
                "Category": [item.category.label for item in charts.breakdown],
                "Total": [float(item.total) for item in charts.breakdown],
            },
            x="Category",
            y="Total",
        )
    if charts.monthly:
        st.markdown("### Income vs. expenses by month")
        st.bar_chart(
            {
                "Month": [m.month for m in charts.monthly],
                "Income": [float(m.income) for m in charts.monthly],
                "Expenses": [float(m.expense) for m in charts.monthly],
            },
            x="Month",
            y=["Income", "Expenses"],
            stack=False,
        )
    if charts.cumulative:
        st.markdown("### Balance over time")
        st.line_chart(
            {
                "Date": [point.date.isoformat() for point in charts.cumulative],
                "Balance": [float(point.balance) for point in charts.cumulative],
            },
            x="Date",
            y="Balance",
        )

    render_transaction_list(ctx, flow, currency)

    st.markdown("---")
    if st.button("💬 Get advice", type="primary"):
        with st.spinner("Asking your coach..."):
            answer = run_async(flow.ask_coach(period, ctx.settings.app.default_currency, now))
        if answer.ok:
            st.markdown(f"""
            <div class="success-box">
                <p>{html.escape(answer.response)}</p>
            </div>
            """, unsafe_allow_html=True)
        else:
            st.error(answer.error)


def render_transaction_list(ctx: AppContext, flow: FinanceFlow, currency: str):
    """Recent transactions with edit and delete."""
    transactions = ctx.transactions.list_transactions()
    st.markdown("### Transactions")
    if not transactions:
        st.info("📋 No transactions yet.")
        return

    for t in transactions[:50]:
        sign = "+" if t.kind is TransactionKind.INCOME else "-"
        with st.expander(f"{t.date.isoformat()} · {t.category.label} · {sign}{_money(t.amount, ctx, currency)}"):
            with st.form(f"edit_{t.id}"):
                category = st.selectbox(
                    "Category",
                    options=TransactionCategory.for_kind(t.kind),
                    index=TransactionCategory.for_kind(t.kind).index(t.category),
                    format_func=lambda c: c.label,
                )
                amount = st.number_input("Amount", min_value=0.0, value=float(t.amount), step=0.01, format="%.2f")
                on_date = st.date_input("Date", value=t.date)
                description = st.text_input("Description", value=t.description)
                col1, col2 = st.columns(2)
                save = col1.form_submit_button("Save changes")
                delete = col2.form_submit_button("🗑️ Delete")
            if save:
                _, result = flow.update_transaction(t.id, t.kind, category, round(amount, 2), on_date, description)
                if not result.is_valid:
                    st.error(ctx.validator.get_user_friendly_summary(result))
            elif delete:
                flow.delete_transaction(t.id)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Storage", "storage"),
        ("Google Sheets (Storage)", "google_sheets"),
        ("Gemini (AI coach)", "gemini"),
        ("Exchange rates", "exchange_rate"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your API keys. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()

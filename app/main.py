"""
Streamlit Frontend for the Local Ledger

Screens: Create Account, Sign In, Dashboard, Deposit.

The screens only call flow operations and render their results or errors.
All rules live in the core (src/).

DESIGN PRINCIPLES:
1. Live feedback on every field while typing
2. Nothing is saved until the form passes validation
3. The dashboard always shows the latest stored balance
"""

import asyncio

import streamlit as st

from src.accounts import InvalidCredentialsError
from src.config import get_settings, validate_all_settings
from src.models.account import FieldName, Session, Verdict, format_currency
from src.orchestrator import (
    AccountFlow,
    DashboardFlow,
    DepositFlow,
    create_app_components,
)
from src.services.storage import DuplicateIdentityError, NotFoundError, StorageError
from src.session import StaleSessionError
from src.validation import ValidationFailedError, get_user_friendly_summary, validate


st.set_page_config(
    page_title="Local Ledger",
    page_icon="🏦",
    layout="centered",
)

VERDICT_COLORS = {
    Verdict.VALID: "green",
    Verdict.INCOMPLETE: "orange",
    Verdict.INVALID: "red",
}


@st.cache_resource
def get_event_loop() -> asyncio.AbstractEventLoop:
    """One loop for the whole app so store locks stay on a single loop."""
    return asyncio.new_event_loop()


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    return get_event_loop().run_until_complete(coro)


@st.cache_resource
def get_components() -> tuple[AccountFlow, DepositFlow, DashboardFlow]:
    """Get or create application components (cached)."""
    return create_app_components(use_storage=True)


def show_field_status(field: FieldName, value: str) -> None:
    """Live status line under an input."""
    if not value:
        return
    result = validate(field, value)
    color = VERDICT_COLORS[result.verdict]
    st.markdown(f":{color}[{result.message}]")


def show_form_errors(error: ValidationFailedError) -> None:
    """Blocking summary of every field that failed on submit."""
    if error.result is None:
        st.error(str(error))
    else:
        st.error(get_user_friendly_summary(error.result))


def go_to(page: str) -> None:
    st.session_state.page = page
    st.rerun()


def render_create_account_page(account_flow: AccountFlow) -> None:
    st.title("Create Account")

    name = st.text_input("Full Name", placeholder="Enter your full name")
    show_field_status(FieldName.NAME, name)

    email = st.text_input("Email", placeholder="Enter your email")
    show_field_status(FieldName.EMAIL, email)

    phone = st.text_input("Phone Number", placeholder="Enter 10-digit phone number", max_chars=10)
    show_field_status(FieldName.PHONE, phone)

    aadhar = st.text_input("Aadhar Number", placeholder="Enter 12-digit Aadhar number", max_chars=12)
    show_field_status(FieldName.AADHAR, aadhar)

    pan = st.text_input("PAN Number", placeholder="ABCDE1234F", max_chars=10)
    show_field_status(FieldName.PAN, pan)

    password = st.text_input("Password", type="password")
    show_field_status(FieldName.PASSWORD, password)

    if st.button("Create Account", type="primary"):
        form = {
            "name": name,
            "email": email,
            "phone": phone,
            "aadhar": aadhar,
            "pan": pan,
            "password": password,
        }
        try:
            run_async(account_flow.create_account(form))
        except ValidationFailedError as e:
            show_form_errors(e)
        except DuplicateIdentityError:
            st.error("An account with this email already exists. Please sign in.")
        except StorageError:
            st.error("Could not save your account. Please try again.")
        else:
            st.session_state.sign_in_email = email
            st.session_state.flash = "Account created. Please sign in."
            go_to("sign_in")

    if st.button("Already have an account? Sign In"):
        go_to("sign_in")


def render_sign_in_page(account_flow: AccountFlow) -> None:
    st.title("Sign In")

    flash = st.session_state.pop("flash", None)
    if flash:
        st.success(flash)

    email = st.text_input("Email", value=st.session_state.get("sign_in_email", ""))
    show_field_status(FieldName.EMAIL, email)

    password = st.text_input("Password", type="password")
    show_field_status(FieldName.SIGN_IN_PASSWORD, password)

    if st.button("Sign In", type="primary"):
        try:
            session = run_async(account_flow.sign_in({"email": email, "password": password}))
        except ValidationFailedError as e:
            show_form_errors(e)
        except (NotFoundError, InvalidCredentialsError):
            st.error("Incorrect email or password")
        except StorageError:
            st.error("Could not read your account. Please try again.")
        else:
            st.session_state.session = session
            go_to("dashboard")

    if st.button("Don't have an account? Create one"):
        go_to("create_account")


def render_dashboard_page(dashboard_flow: DashboardFlow) -> None:
    session: Session = st.session_state.session
    symbol = get_settings().app.currency_symbol

    try:
        session = run_async(dashboard_flow.on_return(session))
    except StaleSessionError:
        st.error("Error: User data not found!")
        st.stop()
    st.session_state.session = session
    account = session.account

    col_title, col_logout = st.columns([4, 1])
    with col_title:
        st.caption("Welcome back,")
        st.title(account.display_name)
    with col_logout:
        if st.button("Logout"):
            run_async(dashboard_flow.logout(session))
            del st.session_state["session"]
            go_to("sign_in")

    st.metric("Total Balance", format_currency(account.balance, symbol))

    col_deposit, col_refresh = st.columns(2)
    with col_deposit:
        if st.button("Deposit Money", type="primary"):
            go_to("deposit")
    with col_refresh:
        if st.button("Refresh"):
            try:
                st.session_state.session = run_async(dashboard_flow.refresh(session))
            except StaleSessionError:
                st.error("Error: User data not found!")
                st.stop()
            st.rerun()

    st.subheader("Personal Information")
    info = {
        "Full Name": account.name or "Not provided",
        "Email": account.identity,
        "Phone": account.formatted_phone,
        "PAN": account.pan or "Not provided",
        "Aadhar": account.masked_aadhar,
    }
    for label, value in info.items():
        st.markdown(f"**{label}:** {value}")

    activity = dashboard_flow.activity(session)
    if activity:
        st.subheader("Recent Activity")
        for event in activity:
            st.caption(f"{event.timestamp:%d/%m/%Y %H:%M} · {event.description}")


def render_deposit_page(deposit_flow: DepositFlow, dashboard_flow: DashboardFlow) -> None:
    session: Session = st.session_state.session
    symbol = get_settings().app.currency_symbol

    st.title("Deposit Funds")
    st.metric("Available Balance", format_currency(session.balance, symbol))

    raw_amount = st.text_input(f"Amount to Deposit ({symbol})", placeholder="0.00")

    if st.button("Confirm Deposit", type="primary"):
        try:
            st.session_state.session = run_async(deposit_flow.deposit(session, raw_amount))
        except ValidationFailedError as e:
            st.error(f"Invalid amount. {e}")
        except StaleSessionError:
            st.error("Error: User data not found!")
        except StorageError:
            st.error("Could not update balance. Check your balance before trying again.")
            try:
                st.session_state.session = run_async(dashboard_flow.refresh(session))
            except (StaleSessionError, StorageError) as e:
                st.warning(f"Balance could not be reloaded: {e}")
        else:
            go_to("dashboard")

    if st.button("Back to Dashboard"):
        go_to("dashboard")

    st.subheader("Deposit History")
    for entry in run_async(deposit_flow.history(session)):
        st.markdown(f"**{format_currency(entry.amount, symbol)}** · {entry.timestamp}")


def main():
    """Main application entry point."""
    status = validate_all_settings()
    if not status["storage"]:
        st.error(f"Storage is misconfigured: {status['storage_error']}")
        st.stop()

    account_flow, deposit_flow, dashboard_flow = get_components()

    if "page" not in st.session_state:
        st.session_state.page = "create_account"

    page = st.session_state.page
    if page in ("dashboard", "deposit") and "session" not in st.session_state:
        page = "sign_in"

    if page == "create_account":
        render_create_account_page(account_flow)
    elif page == "sign_in":
        render_sign_in_page(account_flow)
    elif page == "dashboard":
        render_dashboard_page(dashboard_flow)
    elif page == "deposit":
        render_deposit_page(deposit_flow, dashboard_flow)


if __name__ == "__main__":
    main()

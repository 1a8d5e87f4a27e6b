# app.py
"""
O2D Dispatch Dashboard - Main Entry Point

Version: 1.0.0
"""

import logging

import streamlit as st

from o2d.api_client import ApiClient
from o2d.auth import AuthManager
from o2d.capabilities import DEFAULT_CATALOG
from o2d.config import config
from o2d.dispatch_dashboard.fragments import reset_data_source
from o2d.navigation import RouterState, ScreenKind, ViewRouter
from o2d.session import SessionStore
from o2d.views import ViewContext, build_registry

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.get_app_setting('LOG_LEVEL', 'INFO'), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "O2D Operations"
APP_ICON = "🚚"
APP_VERSION = "1.0.0"

st.set_page_config(
    page_title=f"{APP_NAME} - Dispatch Dashboard",
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #1e40af;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }

    .footer {
        text-align: center;
        color: #888;
        padding: 1rem;
        margin-top: 3rem;
        border-top: 1px solid #eee;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)

# ==================== INITIALIZATION ====================

CLIENTS_STATE_KEY = "o2d_api_clients"
ROUTER_STATE_KEY = "o2d_router"


def get_clients():
    """(auth client, data client), one pair per browser session."""
    clients = st.session_state.get(CLIENTS_STATE_KEY)
    if clients is None:
        api_config = config.get_api_config()
        clients = (
            ApiClient(api_config.auth_base_url, timeout=api_config.timeout_seconds),
            ApiClient(api_config.base_url, timeout=api_config.timeout_seconds),
        )
        st.session_state[CLIENTS_STATE_KEY] = clients
    return clients


session_store = SessionStore(st.session_state, DEFAULT_CATALOG)
auth_client, data_client = get_clients()
auth = AuthManager(
    session_store,
    auth_client,
    session_timeout_hours=config.get_app_setting('SESSION_TIMEOUT_HOURS', 8)
)


def get_router() -> ViewRouter:
    router = st.session_state.get(ROUTER_STATE_KEY)
    if router is None:
        router = ViewRouter(
            DEFAULT_CATALOG,
            st.query_params,
            registry=build_registry(DEFAULT_CATALOG),
            session_store=session_store
        )
        st.session_state[ROUTER_STATE_KEY] = router
    return router


# ==================== HELPER FUNCTIONS ====================

def show_login_page(router: ViewRouter):
    """Display the login page"""
    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Order to Dispatch tracking</p>', unsafe_allow_html=True)

    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        with st.form("login_form", clear_on_submit=False):
            st.markdown("#### 🔐 Login")

            username = st.text_input("Username", placeholder="Enter your username", key="login_username")
            password = st.text_input("Password", type="password", placeholder="Enter your password", key="login_password")

            submit = st.form_submit_button("🔑 Login", type="primary", use_container_width=True)

            if submit:
                with st.spinner("Authenticating..."):
                    success, result = auth.authenticate(username, password)

                if success:
                    auth.login(result)
                    data_client.token = result['token']
                    router.authenticate(result['identity'], result['access'])
                    st.rerun()
                else:
                    st.error(result.get("error", "Authentication failed"))


def logout(router: ViewRouter):
    auth.logout()
    data_client.token = None
    router.logout()
    reset_data_source()


def render_sidebar(router: ViewRouter):
    with st.sidebar:
        st.markdown(f"### 👤 {auth.get_user_display_name()}")
        if router.is_admin():
            st.success("🔓 Full Access")
        st.markdown("---")

        for item in router.accessible_items():
            st.button(
                f"{item.icon} {item.label}",
                key=f"nav_{item.id}",
                type="primary" if item.id == router.active_view else "secondary",
                use_container_width=True,
                on_click=router.select_view,
                args=(item.id,)
            )

        st.markdown("---")
        if st.button("🚪 Logout", use_container_width=True):
            logout(router)
            st.rerun()


def render_screen(router: ViewRouter):
    screen = router.current_screen()

    if screen.kind == ScreenKind.LOADING:
        st.info("⏳ Loading...")
        st.caption("If this persists, no screen is assigned to your account. Please contact administrator.")

    elif screen.kind == ScreenKind.DENIED:
        st.error("🚫 Access Denied")
        st.markdown(f"You don't have permission to view **{screen.label}**.")

    elif screen.kind == ScreenKind.NOT_FOUND:
        st.warning("Page not found")
        st.caption(f"No screen is registered for '{screen.view_id}'.")

    elif screen.kind == ScreenKind.ACTIVE:
        screen.render(ViewContext(
            view_id=screen.view_id,
            label=screen.label,
            identity=router.identity,
            access=router.access,
            api_client=data_client,
        ))

    st.markdown(f"""
    <div class="footer">
        <strong>{APP_NAME}</strong> v{APP_VERSION}
    </div>
    """, unsafe_allow_html=True)


# ==================== MAIN ====================

def main():
    """Main application entry point"""
    router = get_router()
    session = auth.check_session()

    if session is None:
        if router.state != RouterState.UNAUTHENTICATED:
            router.logout()
            reset_data_source()
        show_login_page(router)
        return

    data_client.token = session.token
    if router.state == RouterState.UNAUTHENTICATED or router.identity != session.identity:
        router.authenticate(session.identity, session.access)

    render_sidebar(router)
    render_screen(router)


if __name__ == "__main__":
    main()

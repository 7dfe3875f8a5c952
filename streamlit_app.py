"""Streamlit UI for the shop chat widget: login gate in front of the chat panel."""

import streamlit as st

from shopchat.config import load_env

load_env()

from shopchat.controller import ChatController
from shopchat.models import Sender

st.set_page_config(
    page_title="E-commerce Sales Chatbot",
    page_icon="🛒",
    layout="centered"
)

st.markdown("""
<style>
    .timestamp {
        font-size: 0.75em;
        color: #6b7280;
        margin-left: 8px;
    }
    .auth-header {
        background: linear-gradient(90deg, #6366f1 0%, #9333ea 100%);
        color: white;
        padding: 18px 24px;
        border-radius: 12px;
        margin-bottom: 16px;
    }
</style>
""", unsafe_allow_html=True)


def get_controller() -> ChatController:
    """One controller per browser session, kept across reruns."""
    if 'controller' not in st.session_state:
        st.session_state.controller = ChatController()
    return st.session_state.controller


def render_auth(controller: ChatController) -> None:
    """Login or registration form, depending on the session's mode."""
    session = controller.session
    title = "Create Account" if session.registering else "Welcome Back"
    st.markdown(f'<div class="auth-header"><h2>{title}</h2></div>', unsafe_allow_html=True)

    if session.error:
        st.error(session.error)
    if session.notice:
        st.success(session.notice)

    with st.form("auth_form", clear_on_submit=False):
        username = st.text_input("Username", disabled=session.loading)
        password = st.text_input("Password", type="password", disabled=session.loading)
        label = "Register" if session.registering else "Login"
        submitted = st.form_submit_button(label, disabled=session.loading, use_container_width=True)

    if submitted:
        with st.spinner("Processing..."):
            if session.registering:
                controller.submit_registration(username, password)
            else:
                controller.submit_login(username, password)
        st.rerun()

    switch_label = (
        "Already have an account? Login" if session.registering
        else "Don't have an account? Register"
    )
    if st.button(switch_label, disabled=session.loading):
        controller.toggle_mode()
        st.rerun()


def render_chat(controller: ChatController) -> None:
    """Message log plus chat input."""
    session = controller.session

    col1, col2 = st.columns([4, 1])
    with col1:
        st.title("E-commerce Sales Chatbot")
    with col2:
        if st.button("Logout", use_container_width=True):
            controller.logout()
            st.rerun()

    if session.error:
        st.warning(session.error)

    for message in session.messages:
        role = "user" if message.sender == Sender.USER else "assistant"
        with st.chat_message(role, avatar="🧑" if role == "user" else "🤖"):
            st.markdown(message.text.replace("\n", "  \n"))
            st.markdown(f'<span class="timestamp">{message.timestamp}</span>', unsafe_allow_html=True)

    if prompt := st.chat_input("Type a message...", disabled=session.loading):
        with st.spinner("Thinking..."):
            controller.send_message(prompt)
        st.rerun()


controller = get_controller()

if controller.session.authenticated:
    render_chat(controller)
else:
    render_auth(controller)

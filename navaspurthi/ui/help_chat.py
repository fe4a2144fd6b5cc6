"""Help chat page backed by the festival chatbot."""
import streamlit as st

from navaspurthi.services.chatbot_service import answer_question, get_suggestions


def render_help_chat():
    st.markdown("## 💬 Ask Navaspurthi")

    if "chat_history" not in st.session_state:
        st.session_state.chat_history = []

    for role, text in st.session_state.chat_history:
        with st.chat_message(role):
            st.markdown(text)

    suggestion_cols = st.columns(3, gap="small")
    clicked = None
    for i, suggestion in enumerate(get_suggestions()):
        with suggestion_cols[i % 3]:
            if st.button(suggestion, key=f"suggestion_{i}", width='stretch'):
                clicked = suggestion

    question = st.chat_input("Ask about events, schedule or venue") or clicked
    if not question:
        return

    reply = answer_question(question, session_id=st.session_state.get("chat_session_id"))
    st.session_state.chat_history.append(("user", question))
    st.session_state.chat_history.append(("assistant", reply.text))
    st.rerun()

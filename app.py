"""
Streamlit frontend for the AI Logo Animator.

This is the main entry point for the application. It renders the two-step
wizard (create a logo, then animate it) and forwards every action to the
WorkflowController kept in the Streamlit session.

Environment Variables:
- GEMINI_API_KEY, GOOGLE_GENAI_API_KEY or API_KEY: Default API key
- GEMINI_IMAGE_MODEL / GEMINI_SVG_MODEL / GEMINI_VIDEO_MODEL: (Optional) Model overrides
- VIDEO_POLL_INTERVAL: (Optional) Seconds between video job polls (default: 10)
- VIDEO_MESSAGE_INTERVAL: (Optional) Seconds between progress messages (default: 5)
- VIDEO_MAX_WAIT: (Optional) Give up on a video job after this many seconds (default: never)
- LOG_LEVEL: (Optional) Logging level (default: INFO)
"""

import asyncio

import streamlit as st
from dotenv import load_dotenv

from logo_studio import (
    LOGO_BUSY_MESSAGE,
    UI_ANIMATION_PROMPT,
    VIDEO_ASPECT_RATIOS,
    CredentialStore,
    GenerationClient,
    Step,
    WorkflowController,
)

# Load environment variables from .env file
load_dotenv()

BILLING_URL = "https://ai.google.dev/gemini-api/docs/billing"

# ---------- Streamlit Page Configuration ----------
st.set_page_config(
    page_title="AI Logo Animator",
    page_icon="🎬",
    layout="wide"
)


def get_controller() -> WorkflowController:
    """One controller per browser session."""
    if "controller" not in st.session_state:
        credentials = CredentialStore()
        client = GenerationClient(lambda: credentials.api_key)
        st.session_state["controller"] = WorkflowController(client, credentials)
    return st.session_state["controller"]


controller = get_controller()
state = controller.state

# ---------- Main UI ----------
st.title("🎬 AI Logo Animator")
st.markdown("_From Concept to Motion in Seconds_")

# ---------- Sidebar: API Key ----------
with st.sidebar:
    st.markdown("**API Key**")
    key_input = st.text_input(
        "Google AI API Key",
        type="password",
        value=controller.credentials.api_key,
        help="Your API key from Google AI Studio (ai.google.dev). Video generation needs billing enabled."
    )
    if st.button("🔑 Select API Key", use_container_width=True, disabled=state.is_busy):
        controller.select_key(key_input)
        st.rerun()
    if controller.credentials.has_selected_key():
        st.caption("✅ API key selected")
    else:
        st.caption("⚠️ No API key selected")

# ---------- Errors ----------
if state.error:
    st.error(f"**Error:** {state.error}")
    if not state.api_key_selected:
        st.markdown(f"[Billing Info]({BILLING_URL}) · Enter a key in the sidebar and press **Select API Key**.")

# ---------- Step 1: Create Your Logo ----------
if state.step is Step.GENERATE:
    st.header("1️⃣ Create Your Logo")
    col_generate, col_upload = st.columns(2)

    with col_generate:
        with st.form("logo_form"):
            description = st.text_area(
                "Describe your company or logo idea:",
                placeholder="e.g., 'a coffee shop called The Daily Grind with a mountain theme'",
                height=140,
            )
            generate_logo = st.form_submit_button(
                "✨ Generate Logo", type="primary", use_container_width=True, disabled=state.is_busy
            )
        if generate_logo:
            with st.spinner(LOGO_BUSY_MESSAGE):
                asyncio.run(controller.generate_logo(description))
            st.rerun()

    with col_upload:
        uploaded = st.file_uploader(
            "Upload your own image:",
            type=["png", "jpg", "jpeg", "webp"],
            help="Supported formats: PNG, JPG, WEBP"
        )
        if uploaded:
            st.image(uploaded, caption="This is the logo that will be animated")
            if st.button("➡️ Use This Logo", use_container_width=True, disabled=state.is_busy):
                controller.upload_logo_file(uploaded)
                st.rerun()

# ---------- Step 2: Animate Your Logo ----------
elif state.step is Step.ANIMATE and state.logo_png:
    header_col, reset_col = st.columns([4, 1])
    with header_col:
        st.header("2️⃣ Animate Your Logo")
    with reset_col:
        if st.button("↩️ Start Over", use_container_width=True, disabled=state.is_busy):
            controller.start_over()
            st.rerun()

    col_result, col_controls = st.columns(2)

    with col_result:
        video_placeholder = st.empty()
        if state.video_bytes:
            video_placeholder.video(state.video_bytes, autoplay=True, loop=True, muted=True)
            st.download_button(
                "📥 Download Video",
                data=state.video_bytes,
                file_name="logo-animation.mp4",
                mime="video/mp4",
                use_container_width=True,
            )
        else:
            video_placeholder.image(state.logo_png, caption="Your Logo")
        col_png, col_svg = st.columns(2)
        with col_png:
            st.download_button(
                "📥 Download PNG",
                data=state.logo_png,
                file_name="logo.png",
                mime="image/png",
                use_container_width=True,
            )
        with col_svg:
            if state.logo_svg:
                st.download_button(
                    "📥 Download SVG",
                    data=state.logo_svg,
                    file_name="logo.svg",
                    mime="image/svg+xml",
                    use_container_width=True,
                )

    with col_controls:
        with st.form("video_form"):
            prompt = st.text_input(
                "Animation Style (Optional):",
                value=UI_ANIMATION_PROMPT,
                placeholder="e.g., 'exploding with sparkles'",
            )
            aspect_ratio = st.radio(
                "Aspect Ratio:",
                list(VIDEO_ASPECT_RATIOS),
                format_func=lambda ratio: VIDEO_ASPECT_RATIOS[ratio],
                horizontal=True,
            )
            generate_video = st.form_submit_button(
                "🚀 Generate Animation", type="primary", use_container_width=True, disabled=state.is_busy
            )

        if generate_video:
            with st.status("Animating your logo...", expanded=True) as status:
                progress_line = st.empty()

                def show_progress(current_state):
                    if current_state.progress_message:
                        progress_line.write(f"⏳ {current_state.progress_message}")

                controller.on_change = show_progress
                try:
                    ok = asyncio.run(controller.generate_video(prompt, aspect_ratio))
                finally:
                    controller.on_change = None
                if ok:
                    status.update(label="✅ Complete! Your video is ready.", state="complete")
                else:
                    status.update(label="❌ Video generation failed.", state="error")
            st.rerun()

st.caption("Powered by Google Gemini. For demo purposes only.")

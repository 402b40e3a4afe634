"""
Streamlit frontend for Character Studio.

This is the main entry point for the application. It renders the studio
(header, character library, canvas with layer manager, tool controls and the
character creator) and wires user actions to the shared StudioState.

Environment Variables:
- GEMINI_API_KEY or GOOGLE_GENAI_API_KEY: Gemini key (can also be selected in the UI)
- GEMINI_IMAGE_MODEL: (Optional) image model (default: gemini-2.5-flash-image)
- GEMINI_VIDEO_MODEL: (Optional) video model (default: veo-2.0-generate-001)
- VIDEO_POLL_INTERVAL_SECONDS: (Optional) seconds between video status checks (default: 10)
- VIDEO_MAX_WAIT_SECONDS: (Optional) give up on a video after this long (default: 600)
"""

import streamlit as st
from dotenv import load_dotenv
from google.genai import errors as genai_errors

# Import all modular components
from modules import (
    AspectRatio,
    Character,
    DEFAULT_EDIT_PROMPT,
    DEFAULT_SCENE_PROMPT,
    DEFAULT_VIDEO_PROMPT,
    GenerationError,
    ToolType,
    get_api_key,
    get_logger,
    get_studio_state,
    load_image_bytes,
    parse_data_url,
    to_data_url,
)

# Load environment variables from .env file
load_dotenv()

logger = get_logger("app")

# ---------- Streamlit Page Configuration ----------
st.set_page_config(
    page_title="Character Studio",
    page_icon="🎭",
    layout="wide"
)

state = get_studio_state()


def _media_bytes(url: str):
    """Data URLs are decoded for st.image/st.video; anything else is passed through."""
    if url.startswith("data:"):
        data, _ = parse_data_url(url)
        return data
    return url


# ---------- Canvas ----------
def render_canvas(slot, gen) -> None:
    view = gen.view()
    with slot.container():
        if view == "loading":
            st.info(f"⏳ {gen.loading_message or 'Working...'}")
        elif view == "error":
            st.error(f"**An Error Occurred**\n\n{gen.error}")
        elif view == "result" and gen.result.kind == "image":
            st.image(_media_bytes(gen.result.url), caption="Generated content", width='stretch')
        elif view == "result" and gen.result.kind == "video":
            st.video(_media_bytes(gen.result.url), autoplay=True, loop=True)
        else:
            st.markdown("## 🎬 Your Scene Awaits")
            st.caption("Use the controls on the right to build your masterpiece.")


def render_layer_manager() -> None:
    if not state.selection.shows_layer_manager:
        return
    layers = state.layers_top_to_bottom()
    with st.container(border=True):
        st.markdown("**Layers (Top to Bottom)**")
        for position, char in enumerate(layers):
            col_img, col_name, col_up, col_down = st.columns([1, 3, 1, 1])
            with col_img:
                st.image(_media_bytes(char.image_url), width=40)
            with col_name:
                st.write(char.name)
            with col_up:
                st.button(
                    "⬆", key=f"layer_up_{char.id}", disabled=position == 0,
                    on_click=state.selection.raise_layer, args=(char.id,),
                )
            with col_down:
                st.button(
                    "⬇", key=f"layer_down_{char.id}", disabled=position == len(layers) - 1,
                    on_click=state.selection.lower_layer, args=(char.id,),
                )

        names = {c.id: c.name for c in layers}
        col_drag, col_drop, col_move = st.columns([2, 2, 1])
        with col_drag:
            dragged = st.selectbox("Move", list(names), format_func=names.get, key="layer_drag")
        with col_drop:
            target = st.selectbox("Onto slot of", list(names), format_func=names.get, key="layer_drop")
        with col_move:
            st.write("")
            st.button("Move", key="layer_move", on_click=state.selection.move_layer, args=(dragged, target))
        st.caption("Reorder layers to change who stands in front.")


# ---------- Character Creator ----------
@st.dialog("🧑‍🎨 New Character")
def character_creator() -> None:
    name = st.text_input("Name", placeholder="e.g., Captain Whiskers")
    prompt = st.text_area(
        "Description",
        placeholder="e.g., A brave cat pirate with an eyepatch and a red coat",
        height=100,
    )
    source = st.radio("Image source", ["Generate with AI", "Upload image"], horizontal=True)
    uploaded = None
    if source == "Upload image":
        uploaded = st.file_uploader("Character image", type=["png", "jpg", "jpeg"], key="creator_upload")

    if st.button("💾 Save Character", type="primary", width='stretch'):
        if not name.strip():
            st.warning("⚠️ Please give your character a name.")
            return
        if source == "Upload image":
            if not uploaded:
                st.warning("⚠️ Please upload an image for your character.")
                return
            try:
                image_bytes, mime = load_image_bytes(uploaded, keep_alpha=True)
            except ValueError as exc:
                st.error(str(exc))
                return
            image_url = to_data_url(image_bytes, mime)
        else:
            if not prompt.strip():
                st.warning("⚠️ Please describe your character so it can be generated.")
                return
            try:
                with st.spinner("Creating your character..."):
                    image_url = state.service().create_character(name, prompt)
            except (GenerationError, genai_errors.APIError) as exc:
                logger.error(f"Character creation failed: {exc}")
                st.error(str(exc) or "Failed to create character.")
                return
        state.add_character(Character.create(name=name.strip(), image_url=image_url, prompt=prompt.strip()))
        st.rerun()


# ---------- Header: Tool Switch ----------
st.title("🎭 Character Studio")
if "tool_choice" not in st.session_state:
    st.session_state["tool_choice"] = state.active_tool
st.radio(
    "Tool",
    list(ToolType),
    key="tool_choice",
    format_func=lambda t: t.label,
    horizontal=True,
    label_visibility="collapsed",
    on_change=lambda: state.set_tool(st.session_state["tool_choice"]),
)

# ---------- Sidebar: Character Library ----------
with st.sidebar:
    st.header("Character Library")
    if st.button("➕ New Character", width='stretch'):
        character_creator()

    if not state.characters:
        st.info("Your library is empty.\n\nCreate a new character to get started!")
    else:
        grid = st.columns(2)
        for idx, char in enumerate(state.characters):
            with grid[idx % 2]:
                selected = state.is_selected(char.id)
                st.image(_media_bytes(char.image_url), caption=char.name, width='stretch')
                st.button(
                    "✅ Selected" if selected else "Select",
                    key=f"select_{char.id}",
                    type="primary" if selected else "secondary",
                    on_click=state.toggle_character,
                    args=(char.id,),
                    width='stretch',
                )

# ---------- Main: Canvas + Controls ----------
col_canvas, col_controls = st.columns([3, 1])

with col_canvas:
    canvas_slot = st.empty()
    render_canvas(canvas_slot, state.generation)
    render_layer_manager()


def show_progress(gen) -> None:
    render_canvas(canvas_slot, gen)


def render_scene_builder() -> None:
    st.subheader("Scene Builder")
    selected = state.selected_characters()
    st.markdown("**Selected Characters**")
    if selected:
        st.caption(" · ".join(c.name for c in selected))
    else:
        st.caption("Select from library")
    prompt = st.text_area("Scene Prompt", value=DEFAULT_SCENE_PROMPT, height=140, key="scene_prompt")
    if st.button(
        "Generate Scene", type="primary", width='stretch',
        disabled=not selected or state.generation.is_loading,
    ):
        state.dispatcher.generate_scene(state.service(), selected, prompt, listener=show_progress)
        st.rerun()


def render_image_editor() -> None:
    st.subheader("Image Editor")
    uploaded = st.file_uploader("Upload Image", type=["png", "jpg", "jpeg"], key="edit_upload")
    prompt = st.text_input("Edit Prompt", value=DEFAULT_EDIT_PROMPT, key="edit_prompt")
    if st.button(
        "Generate Edit", type="primary", width='stretch',
        disabled=not uploaded or state.generation.is_loading,
    ):
        state.dispatcher.edit_image(state.service(), uploaded, prompt, listener=show_progress)
        st.rerun()


def render_key_selector() -> None:
    st.subheader("Video Generator")
    st.info("Video generation needs a Gemini API key with access to Veo. Select a key to continue.")
    key = st.text_input(
        "Gemini API Key", type="password", key="video_api_key",
        help="Your API key from Google AI Studio (ai.google.dev)",
    )
    if st.button("🔑 Select Key", type="primary", width='stretch', disabled=not key):
        state.select_key(key)
        st.rerun()
    if get_api_key():
        if st.button("Use configured key", width='stretch'):
            state.select_key()
            st.rerun()


def render_video_generator() -> None:
    if not state.video_key_selected:
        render_key_selector()
        return
    st.subheader("Video Generator")
    uploaded = st.file_uploader("Starting Image", type=["png", "jpg", "jpeg"], key="video_upload")
    prompt = st.text_area("Video Prompt", value=DEFAULT_VIDEO_PROMPT, height=90, key="video_prompt")
    aspect_ratio = st.radio(
        "Aspect Ratio", list(AspectRatio), format_func=lambda r: r.label, horizontal=True, key="video_aspect",
    )
    if st.button(
        "Generate Video", type="primary", width='stretch',
        disabled=not uploaded or state.generation.is_loading,
    ):
        state.dispatcher.generate_video(
            state.service(),
            uploaded,
            prompt,
            aspect_ratio,
            on_credential_reset=state.reset_key,
            listener=show_progress,
        )
        st.rerun()


with col_controls:
    if state.active_tool is ToolType.SCENE_BUILDER:
        render_scene_builder()
    elif state.active_tool is ToolType.IMAGE_EDITOR:
        render_image_editor()
    elif state.active_tool is ToolType.VIDEO_GENERATOR:
        render_video_generator()

st.caption("Built with Streamlit + Google Gemini. Select characters in the sidebar, then pick a tool.")

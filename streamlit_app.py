"""
Material Dither Studio

Run with:
    streamlit run streamlit_app.py
"""

from __future__ import annotations

import io
import time

import numpy as np
import streamlit as st
from PIL import Image

from material_dither.config import DitherMethod, DitherSettings, RunConfig
from material_dither.dithering import dither_rgba
from material_dither.image_io import prepare_rgba, upscale
from material_dither.metrics import black_ratio, tone_error
from material_dither.tone import tone_image

# -- Page config -------------------------------------------------------
st.set_page_config(
    page_title="Material Dither",
    page_icon=None,
    layout="wide",
    initial_sidebar_state="collapsed",
)

_DEFAULTS = DitherSettings()
_RUN_DEFAULTS = RunConfig()

# -- CSS ---------------------------------------------------------------
st.markdown("""
<style>
    .stApp {
        background-color: #121212;
        color: #e8e8e8;
        font-family: 'Inter', 'Helvetica Neue', sans-serif;
    }
    .block-container {
        max-width: 1100px;
        padding-top: 3rem;
    }
    .studio-title {
        font-size: 1.4rem;
        font-weight: 600;
        letter-spacing: -0.01em;
        margin-bottom: 0.2rem;
    }
    .studio-subtitle {
        font-size: 0.85rem;
        color: #9a9a9a;
        margin-bottom: 2rem;
    }
    .label-detail {
        font-size: 0.7rem;
        letter-spacing: 0.08em;
        text-transform: uppercase;
        text-align: center;
        color: #9a9a9a;
        margin-top: 0.4rem;
    }
    .stSlider label, .stSelectbox label, .stFileUploader label {
        font-size: 0.65rem !important;
        letter-spacing: 0.06em;
        text-transform: uppercase;
        color: #9a9a9a !important;
    }
    .stDownloadButton > button {
        border-radius: 24px !important;
        letter-spacing: 0.08em;
        text-transform: uppercase;
        font-size: 0.7rem;
    }
    div[data-testid="stImage"] img { image-rendering: pixelated; }

    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
</style>
""", unsafe_allow_html=True)


# -- Title -------------------------------------------------------------
st.markdown('<div class="studio-title">Material Dither</div>', unsafe_allow_html=True)
st.markdown(
    '<div class="studio-subtitle">'
    "Drop an image and reduce it to pure black and white. Error diffusion "
    "(Floyd-Steinberg, Atkinson) keeps gradients smooth, Bayer matrices give "
    "the classic cross-hatched look, and random noise adds grain."
    "</div>",
    unsafe_allow_html=True,
)

# -- Controls ----------------------------------------------------------
methods = list(DitherMethod)
method = st.selectbox(
    "Method",
    methods,
    index=methods.index(_DEFAULTS.method),
    format_func=lambda m: m.value,
)

ctrl1, ctrl2, ctrl3, ctrl4 = st.columns(4)
with ctrl1:
    threshold = st.slider("Threshold", 0, 255, _DEFAULTS.threshold)
with ctrl2:
    pixel_size = st.slider("Pixel size", 1, 20, _DEFAULTS.pixel_size)
with ctrl3:
    contrast = st.slider("Contrast", -100, 100, _DEFAULTS.contrast)
with ctrl4:
    brightness = st.slider("Brightness", -100, 100, _DEFAULTS.brightness)

settings = DitherSettings(
    method=method,
    threshold=threshold,
    pixel_size=pixel_size,
    contrast=contrast,
    brightness=brightness,
)

st.markdown("---")

# -- Upload ------------------------------------------------------------
uploaded = st.file_uploader(
    "Drop image", type=["jpg", "jpeg", "png", "webp", "bmp", "gif", "jfif"],
)

# Keep the upload across reruns triggered by the sliders
if uploaded is not None:
    st.session_state.uploaded_data = uploaded.getvalue()
elif "uploaded_data" not in st.session_state:
    st.session_state.uploaded_data = None

if st.session_state.uploaded_data is not None:
    original = Image.open(io.BytesIO(st.session_state.uploaded_data)).convert("RGBA")
    rgba = prepare_rgba(original, settings.pixel_size, _RUN_DEFAULTS.max_proc_width)
    h, w = rgba.shape[:2]

    t0 = time.perf_counter()
    dithered = dither_rgba(rgba, settings, rng=np.random.default_rng())
    elapsed = time.perf_counter() - t0

    result = upscale(dithered, settings.pixel_size)

    col1, col2 = st.columns(2)
    with col1:
        st.image(original, use_container_width=True)
        st.markdown('<div class="label-detail">Source</div>', unsafe_allow_html=True)
    with col2:
        st.image(result, use_container_width=True)
        st.markdown(
            f'<div class="label-detail">{settings.method.value} &middot; '
            f"{w} &times; {h}</div>",
            unsafe_allow_html=True,
        )

    m1, m2, m3 = st.columns(3)
    m1.metric("Grid", f"{w} x {h}")
    m2.metric("Black", f"{black_ratio(dithered):.0%}")
    m3.metric("Tone error", f"{tone_error(tone_image(rgba, settings), dithered):.1f}")
    st.caption(f"Rendered in {elapsed:.2f} s")

    buf = io.BytesIO()
    result.save(buf, format="PNG")
    st.download_button(
        "Download PNG",
        data=buf.getvalue(),
        file_name=f"material-dither-{int(time.time() * 1000)}.png",
        mime="image/png",
    )
else:
    st.markdown(
        '<p style="color: #777; font-size: 0.95rem; margin-top: 2rem;">'
        "Drop an image to begin.</p>",
        unsafe_allow_html=True,
    )

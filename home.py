from __future__ import annotations

import streamlit as st

from fabshop.config import get_settings
from fabshop.db import get_conn, ensure_schema
from fabshop.services.demo_data import upsert_reference_data

st.set_page_config(page_title="Fabshop", page_icon="🪨", layout="wide")

st.title("🪨 Fabshop — Stone Fabrication Sales")
st.caption("Slab, sink and faucet inventory with contracts that sell, edit, cancel, cut and install.")

settings = get_settings()
conn = get_conn(settings.db_path)
ensure_schema(conn)
upsert_reference_data(conn)

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")

st.info(
    "Use the left sidebar navigation. Start with **🧪 Data Management** to load demo stock, then sell slabs in **New Sale** and manage them in **Sales**.",
    icon="ℹ️",
)

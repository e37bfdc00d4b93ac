from __future__ import annotations

import streamlit as st

st.set_page_config(page_title="Fabshop", page_icon="🪨", layout="wide")

pages = [
    st.Page("home.py", title="Home", icon="🏠"),
    st.Page("pages/1_📦_Inventory.py", title="Inventory", icon="📦"),
    st.Page("pages/2_🧾_New_Sale.py", title="New Sale", icon="🧾"),
    st.Page("pages/3_📋_Sales.py", title="Sales", icon="📋"),
    st.Page("pages/4_🧪_Data_Management.py", title="Data Management", icon="🧪"),
]

st.navigation(pages).run()

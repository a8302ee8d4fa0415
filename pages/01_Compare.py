"""Compare - side by side specs and single car detail"""

import streamlit as st

from car_suite.config import COL_CAPACITY, COL_SEATS
from car_suite.data import load_data_flow
from car_suite.export import car_id, comparison_table, find_car, human_money, to_csv_bytes
from car_suite.filters import classify_body_type
from car_suite.state import get_coordinator, init_session_state
from car_suite.ui import render_page_header

# Configure page
st.set_page_config(
    page_title="Compare Cars",
    page_icon="⚖️",
    layout="wide"
)

init_session_state()

render_page_header(
    title="Compare Cars",
    description="Side-by-side specifications for vehicles in the current filter",
    icon="⚖️"
)

df_cars, _ = load_data_flow()
if df_cars is None:
    st.error("❌ No data loaded. Open the main page to configure a data source.")
    st.stop()

df_view = get_coordinator(df_cars).filtered
if df_view.empty:
    st.warning("⚠️ No vehicles match the current filters.")
    st.stop()

options = [car_id(r) for r in df_view[["companyName", "modelName"]].to_dict(orient="records")]
options = list(dict.fromkeys(options))

defaults = [i for i in st.session_state.get("compare_ids", []) if i in options] or options[:3]
selected = st.multiselect("Cars to compare (max 3)", options, default=defaults, max_selections=3)
st.session_state["compare_ids"] = selected

if not selected:
    st.info("Select at least one car.")
    st.stop()

chosen = [find_car(df_view, i) for i in selected]
table = comparison_table([c for c in chosen if c is not None])
table.columns = ["Specification"] + selected
st.dataframe(table, hide_index=True, use_container_width=True)

st.download_button(
    "⬇️ Download comparison CSV",
    data=to_csv_bytes(table),
    file_name="car_comparison.csv",
    mime="text/csv",
)

# Detail view
st.divider()
st.header("🔍 Detail")
detail_id = st.selectbox("Car", selected)
car = find_car(df_view, detail_id)
if car is None:
    st.warning("Car not found.")
    st.stop()

c1, c2, c3 = st.columns(3)
c1.metric("Price", human_money(car["price"]))
c2.metric("Horsepower", f"{car['horsePower']:,.0f} hp")
c3.metric("0-100 km/h", f"{car['performance']:.1f} s")

c4, c5, c6 = st.columns(3)
c4.metric("Top speed", f"{car['totalSpeed']:,.0f} km/h")
c5.metric("Torque", f"{car['torque']:,.0f} Nm")
c6.metric("Body type", classify_body_type(car["modelName"]))

st.caption(
    f"Engine: {car['engineType']} | Fuel: {car['fuelType']} | "
    f"CC/Battery: {car.get(COL_CAPACITY, '-')} | Seats: {car.get(COL_SEATS, '-')}"
)

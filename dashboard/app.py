import streamlit as st
import pandas as pd
import plotly.express as px
import math
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data_backend import DashboardData
from visualization import GraphViz

from collabgraph.insights import SUCCESS, WARNING
from collabgraph.metrics import MATRIX_FILTERS
from collabgraph.relations import relation_label

st.set_page_config(
    page_title="team collaboration graph",
    layout="wide",
    initial_sidebar_state="expanded",
)

if 'data' not in st.session_state:
    st.session_state.data = None
if 'viz' not in st.session_state:
    st.session_state.viz = None

st.sidebar.title("team collaboration graph")
st.sidebar.markdown("---")

data_path = st.sidebar.text_input("Data file path", value="./data/items.json", help="json list of items or {'weeks': [...]}")
previous_path = st.sidebar.text_input("Previous period (optional)", value="", help="overrides the previous week in the data file")

col1, col2 = st.sidebar.columns(2)

if col1.button("Load Data"):
    if os.path.exists(data_path):
        with st.spinner("loading..."):
            data = DashboardData()
            try:
                data.load(data_path, previous_path or None)
            except ValueError as e:
                st.sidebar.error(f"could not read {data_path}: {e}")
            else:
                data.save_cache()
                st.session_state.data = data
                st.session_state.viz = GraphViz(data)
                st.sidebar.success(f"loaded {len(data.items)} items, {len(data.members())} people")
    else:
        st.sidebar.error(f"file not found: {data_path}")

if col2.button("Load Cache"):
    data = DashboardData()
    if data.load_cache():
        st.session_state.data = data
        st.session_state.viz = GraphViz(data)
        st.sidebar.success("loaded from cache")
    else:
        st.sidebar.warning("no cache found")

if st.session_state.data is None:
    st.title("team collaboration graph")
    st.info("load a data file from the sidebar")
    st.stop()

data = st.session_state.data
viz = st.session_state.viz

members = data.members()
owners = data.owners()

st.sidebar.markdown("---")
me = st.sidebar.selectbox("Me", owners or members, index=0) if (owners or members) else None


def show_insights(insights):
    if not insights:
        st.write("nothing to report")
    for i in insights:
        text = i.message if not i.detail else f"{i.message}  \n{i.detail}"
        if i.type == WARNING:
            st.warning(text)
        elif i.type == SUCCESS:
            st.success(text)
        else:
            st.info(text)


tab_overview, tab_network, tab_orbit, tab_bottlenecks, tab_matrix, tab_insights = st.tabs([
    "Overview", "Network", "My Orbit", "Bottlenecks", "Matrix", "Insights"
])


with tab_overview:
    st.header("Team Overview")

    stats = data.get_full_graph_stats()
    c1, c2, c3, c4, c5, c6 = st.columns(6)
    c1.metric("People", stats['num_members'])
    c2.metric("References", stats['num_references'])
    c3.metric("Pairs", stats['total_pairs'])
    c4.metric("Waits", stats['total_waits'])
    c5.metric("Clusters", stats['num_components'])
    c6.metric("Density", f"{stats['density']:.2f}")

    if data.weeks:
        st.plotly_chart(viz.trend_figure(), use_container_width=True)

    rel_stats = data.get_relation_stats()
    if rel_stats:
        rel_df = pd.DataFrame([{'Relation': relation_label(r), 'Count': n} for r, n in rel_stats.items()])
        fig = px.bar(rel_df, x='Relation', y='Count', title='Relations', color='Count', color_continuous_scale='blues')
        st.plotly_chart(fig, use_container_width=True)

    st.subheader("Load")
    st.plotly_chart(viz.load_heatmap_figure(), use_container_width=True)
    st.dataframe(data.load_table(), use_container_width=True)


with tab_network:
    st.header("Network")

    scene = data.get_scene()
    if data.graph.is_empty():
        st.info("no collaboration recorded")
    else:
        col1, col2, col3 = st.columns([2, 2, 1])
        with col1:
            yaw = st.slider("Rotate", 0, 359, int(math.degrees(scene.camera.rotation_y)) % 360)
        with col2:
            tilt = st.slider("Tilt", -90, 90, int(math.degrees(scene.camera.rotation_x)))
        with col3:
            focus = st.selectbox("Highlight", ["(none)"] + members)

        # streamlit reruns per interaction, so the camera is set directly instead of animated
        scene.set_auto_rotate(False)
        scene.camera.rotation_y = math.radians(yaw)
        scene.camera.rotation_x = math.radians(tilt)
        scene.highlight.clear()
        if focus != "(none)":
            scene.click(focus)

        st.plotly_chart(viz.network_figure(scene.render()), use_container_width=True)
        st.caption("node size: degree, color: group, dotted edges are directional")

        comps = data.get_components()
        if len(comps) > 1:
            with st.expander(f"{len(comps)} separate clusters"):
                st.dataframe(pd.DataFrame(comps), use_container_width=True)


with tab_orbit:
    st.header("My Orbit")
    if me is None:
        st.info("nobody to show")
    else:
        view = data.get_orbit(me)
        zoom = st.slider("Zoom", 0.5, 3.0, 1.0, 0.1)
        view.set_zoom(zoom)

        if not view.layout.nodes:
            st.info(f"{me} has no collaborators this period")
        else:
            net = viz.create_orbit_graph(me, view)
            net.save_graph("dashboard/temp_orbit.html")
            with open("dashboard/temp_orbit.html", "r") as f:
                st.components.v1.html(f.read(), height=600, scrolling=True)
            st.caption("inner ring: frequent pairing, middle: occasional pairing, outer: waiting only")

        col1, col2 = st.columns(2)
        with col1:
            st.plotly_chart(viz.radar_figure(me), use_container_width=True)
        with col2:
            s = data.get_member(me)
            st.metric("Pair sessions", s.pair_count)
            st.metric("Waiting on others", s.wait_count)
            st.metric("Others waiting on me", s.inbound_wait)
            st.metric("Cross-group", f"{s.cross_group_score}%")
            st.metric("Cross-module", f"{s.cross_module_score}%")


with tab_bottlenecks:
    st.header("Bottlenecks")
    st.dataframe(data.bottleneck_table(), use_container_width=True)

    if me is not None and data.weeks:
        st.plotly_chart(viz.timeline_figure(me), use_container_width=True)


with tab_matrix:
    st.header("Group Matrix")
    relation_filter = st.radio(
        "Relation",
        [f for f in MATRIX_FILTERS if f is not None],
        format_func=lambda f: "All" if f == 'both' else relation_label(f),
        horizontal=True,
    )
    st.plotly_chart(viz.group_matrix_figure(relation_filter), use_container_width=True)


with tab_insights:
    st.header("Insights")
    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Team")
        show_insights(data.get_team_insights())
    with col2:
        if me is not None:
            st.subheader(f"For {me}")
            show_insights(data.get_insights(me))

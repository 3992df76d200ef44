import math
from typing import Optional

import plotly.graph_objects as go
from pyvis.network import Network

from collabgraph.constants import (
    ORBIT_HEIGHT, ORBIT_WIDTH, PAIR, POST, UNKNOWN_GROUP, UNKNOWN_GROUP_COLOR, WAIT,
)
from collabgraph.layout.orbit import OrbitView
from collabgraph.layout.scene import RenderFrame, group_colors
from collabgraph.relations import relation_color, relation_label


CENTER_COLOR = '#2c3e50'
ANOMALY_COLOR = '#e74c3c'

# heatmap scales, low -> high
LOAD_SCALE = 'Blues'
MATRIX_SCALE = 'Purples'


class GraphViz:
    """
    plotly figures and pyvis networks from dashboard data.
    only draws, every number comes from the backend
    """

    def __init__(self, data_backend):
        self.data = data_backend

    def _group_colors(self) -> dict:
        return group_colors(self.data.graph)

    # 3-D network (already projected to screen space)

    def network_figure(self, frame: RenderFrame, height: int = 600) -> go.Figure:
        """one projected frame. traces are added far to near so closer things paint on top"""

        fig = go.Figure()

        for e in frame.edges:
            fig.add_trace(go.Scatter(
                x=[e.x1, e.x2],
                y=[e.y1, e.y2],
                mode='lines',
                line={'width': e.width, 'color': e.color, 'dash': 'dot' if e.directed else 'solid'},
                opacity=e.opacity,
                hoverinfo='text',
                text=f"{e.source} -> {e.target} ({relation_label(e.relation)})",
                showlegend=False,
            ))

        if frame.nodes:
            fig.add_trace(go.Scatter(
                x=[n.x for n in frame.nodes],
                y=[n.y for n in frame.nodes],
                mode='markers+text',
                text=[n.id for n in frame.nodes],
                textposition='top center',
                customdata=[n.group for n in frame.nodes],
                hovertemplate='%{text}<br>%{customdata}<extra></extra>',
                marker={
                    'size': [n.radius for n in frame.nodes],
                    'color': [n.color for n in frame.nodes],
                    'opacity': [n.opacity for n in frame.nodes],
                    'line': {'width': [3 if n.is_active else 1 for n in frame.nodes], 'color': '#ffffff'},
                },
                showlegend=False,
            ))

        fig.update_layout(
            height=height,
            margin={'l': 10, 'r': 10, 't': 10, 'b': 10},
            plot_bgcolor='#ffffff',
            xaxis={'visible': False},
            # screen y grows downward
            yaxis={'visible': False, 'autorange': 'reversed', 'scaleanchor': 'x'},
        )
        return fig

    # heatmaps

    def load_heatmap_figure(self) -> go.Figure:
        df = self.data.load_table()
        value_cols = [c for c in df.columns if c not in ('member', 'group', 'total_load')]
        fig = go.Figure(go.Heatmap(
            z=df[value_cols].values if len(df) else [],
            x=[relation_label(c) if c != 'inbound_wait' else 'Waited On' for c in value_cols],
            y=list(df['member']),
            colorscale=LOAD_SCALE,
            hovertemplate='%{y} / %{x}: %{z}<extra></extra>',
        ))
        fig.update_layout(title='Collaboration Load', yaxis={'autorange': 'reversed'})
        return fig

    def group_matrix_figure(self, relation_filter=None) -> go.Figure:
        table = self.data.matrix_table(relation_filter)
        fig = go.Figure(go.Heatmap(
            z=table.values if not table.empty else [],
            x=list(table.columns),
            y=list(table.index),
            colorscale=MATRIX_SCALE,
            hovertemplate='%{y} -> %{x}: %{z}<extra></extra>',
        ))
        title = 'Group Matrix' if relation_filter in (None, 'both') else f'Group Matrix ({relation_label(relation_filter)})'
        fig.update_layout(title=title, xaxis_title='target group', yaxis_title='source group',
                          yaxis={'autorange': 'reversed'})
        return fig

    # personal charts

    def radar_figure(self, member: str) -> go.Figure:
        profile = self.data.get_radar(member)
        axes = [a.axis.replace('_', ' ') for a in profile.axes]
        values = [a.value for a in profile.axes]
        fig = go.Figure(go.Scatterpolar(
            r=values + values[:1],
            theta=axes + axes[:1],
            fill='toself',
            name=member,
            hovertext=[str(a.raw) for a in profile.axes] + [str(profile.axes[0].raw)],
        ))
        fig.update_layout(polar={'radialaxis': {'range': [0, 100]}}, showlegend=False,
                          title=f'Collaboration profile: {member}')
        return fig

    def timeline_figure(self, member: str) -> go.Figure:
        rows = self.data.get_timeline(member)
        labels = [r.label for r in rows]

        fig = go.Figure()
        fig.add_trace(go.Scatter(x=labels, y=[r.inbound for r in rows], mode='lines+markers',
                                 name='Waited on', line={'color': relation_color(WAIT)}))
        fig.add_trace(go.Scatter(x=labels, y=[r.outbound for r in rows], mode='lines+markers',
                                 name='Waiting', line={'color': '#95a5a6', 'dash': 'dot'}))

        anomalies = [r for r in rows if r.is_anomaly]
        if anomalies:
            fig.add_trace(go.Scatter(
                x=[r.label for r in anomalies], y=[r.inbound for r in anomalies],
                mode='markers', name='Spike',
                marker={'size': 14, 'color': ANOMALY_COLOR, 'symbol': 'circle-open', 'line': {'width': 2}},
            ))

        fig.update_layout(title=f'Bottleneck timeline: {member}', xaxis_title='week', yaxis_title='count')
        return fig

    def trend_figure(self, member: Optional[str] = None) -> go.Figure:
        rows = self.data.get_weekly_trend(member)
        labels = [r.label for r in rows]
        fig = go.Figure()
        for attr, rel in (('pair', PAIR), ('wait', WAIT), ('post', POST)):
            fig.add_trace(go.Bar(x=labels, y=[getattr(r, attr) for r in rows],
                                 name=relation_label(rel), marker_color=relation_color(rel)))
        fig.update_layout(barmode='stack', title='Weekly collaboration' + (f': {member}' if member else ''))
        return fig

    # orbit (pyvis, fixed positions)

    def create_orbit_graph(
        self,
        member: str,
        view: Optional[OrbitView] = None,
        height: str = f'{int(ORBIT_HEIGHT)}px',
    ) -> Network:
        """
        pyvis network with every position pinned to the orbit layout.
        pass a view to carry over drag overrides and highlight
        """
        view = view or self.data.get_orbit(member)
        rendered = view.render()
        colors = self._group_colors()

        net = Network(
            height=height,
            width='100%',
            directed=False,
            notebook=False,
            bgcolor='#ffffff',
            font_color='#333333',
        )
        net.set_options('''
        {
            "physics": { "enabled": false },
            "nodes": {
                "font": { "size": 14, "face": "arial" }
            },
            "edges": {
                "arrows": { "to": { "enabled": false } }
            },
            "interaction": {
                "dragNodes": true,
                "dragView": true,
                "zoomView": true,
                "hover": true
            }
        }
        ''')

        # vis.js puts 0,0 in the middle, orbit coordinates have it top left
        ox, oy = ORBIT_WIDTH / 2.0, ORBIT_HEIGHT / 2.0

        center = rendered['center']
        net.add_node(
            center['name'],
            label=center['name'],
            title=f"{center['name']}\n{center['group']}",
            color=CENTER_COLOR,
            size=center['radius'],
            x=center['x'] - ox,
            y=center['y'] - oy,
            fixed=True,
            shape='dot',
        )

        for node in rendered['nodes']:
            net.add_node(
                node['name'],
                label=node['name'],
                title=self._orbit_title(view, node['name']),
                color=colors.get(node['group'], UNKNOWN_GROUP_COLOR),
                size=node['radius'],
                x=node['x'] - ox,
                y=node['y'] - oy,
                fixed=True,
                opacity=node['opacity'],
                borderWidth=3 if node['is_bottleneck'] else 1,
                shape='dot',
            )

        for entry in rendered['edges']:
            e = entry['edge']
            options = {
                'title': f"{relation_label(e.relation)} x{e.count}",
                'color': {'color': relation_color(e.relation), 'opacity': entry['opacity']},
                'width': e.width,
                'smooth': {'type': 'curvedCW', 'roundness': self._roundness(e)},
            }
            # only waits point somewhere, pairing has no direction
            if e.arrow:
                options['arrows'] = 'to'
            net.add_edge(e.source, e.target, **options)

        return net

    def _orbit_title(self, view: OrbitView, name: str) -> str:
        node = view.layout.node(name)
        lines = [
            name,
            f"Group: {node.group if node.group else UNKNOWN_GROUP}",
            f"Pair: {node.pair_count}",
            f"Wait: {node.wait_count}",
            f"Ring: {node.ring}",
        ]
        return '\n'.join(lines)

    def _roundness(self, edge) -> float:
        # vis.js wants the bend as a fraction of the edge length
        (x1, y1), (cx, cy), (x2, y2) = edge.start, edge.control, edge.end
        length = math.hypot(x2 - x1, y2 - y1)
        if length == 0:
            return 0.0
        offset = math.hypot(cx - (x1 + x2) / 2.0, cy - (y1 + y2) / 2.0)
        return round(min(offset / length, 1.0), 3)

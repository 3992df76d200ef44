import networkx as nx
import pandas as pd
from collections import Counter
import logging
import pickle
import os
import sys

# add parent dir to path so we can import collabgraph when streamlit runs from dashboard/
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from collabgraph.data_loader import WorkItemLoader
from collabgraph.graph_builder import build_graph, to_networkx
from collabgraph.insights import generate_personal_insights, generate_team_insights
from collabgraph.layout.force_sim import ForceLayoutConfig, ForceLayoutSimulator
from collabgraph.layout.orbit import OrbitView, compute_orbit
from collabgraph.layout.scene import NetworkScene
from collabgraph.metrics import (
    bottleneck_ranking, group_matrix, load_heatmap, member_summary, team_totals,
)
from collabgraph.relations import registered_relations
from collabgraph.trends import bottleneck_timeline, radar_profile, weekly_trend

logger = logging.getLogger(__name__)


class DashboardData:
    """
    one loaded period (plus the one before it, if the file has it) and every
    view the dashboard asks for. metrics are recomputed from items on demand,
    only the layout and the per member summaries are cached
    """

    def __init__(self, layout_config: ForceLayoutConfig = None):
        self.items = []
        self.previous_items = None
        self.weeks = []
        self.graph = build_graph([])
        self.G = None  # networkx multigraph
        self.G_simple = None

        # the simulator keeps its own snapshot, re-relaxes only on a structural change
        self.simulator = ForceLayoutSimulator(layout_config)
        self._scene = None
        self._summaries = {}
        self._centralities = None

    def load(self, filepath: str, previous_path: str = None):
        """load a data file; previous_path overrides the previous week inside it"""

        loader = WorkItemLoader(filepath)
        items = loader.load()
        previous = loader.previous_items()

        if previous_path:
            previous = WorkItemLoader(previous_path).load()

        return self.set_items(items, previous=previous, weeks=loader.weeks)

    def set_items(self, items, previous=None, weeks=None):
        self.items = list(items or [])
        self.previous_items = list(previous) if previous is not None else None
        self.weeks = list(weeks or [])
        self._build_graph()
        logger.debug("dashboard data: %d items, %d members", len(self.items), len(self.graph.nodes))
        return self

    def _build_graph(self):
        self.graph = build_graph(self.items)
        self.G = to_networkx(self.graph)

        # collapsed undirected view for components / centralities
        self.G_simple = nx.Graph()
        self.G_simple.add_nodes_from(self.G.nodes)
        self.G_simple.add_edges_from((s, t) for s, t in self.G.edges() if s != t)

        self._summaries = {}
        self._centralities = None
        if self._scene is not None:
            self._scene.set_graph(self.graph)

    # members

    def members(self) -> list:
        return self.graph.node_ids()

    def owners(self) -> list:
        return list(dict.fromkeys(item.owner for item in self.items))

    def search_members(self, query: str, limit: int = 20) -> list:
        query = query.lower()
        matches = [m for m in self.members() if query in m.lower()]
        return sorted(matches)[:limit]

    def get_member(self, name: str):
        if name not in self._summaries:
            self._summaries[name] = member_summary(self.items, name)
        return self._summaries[name]

    def get_previous_member(self, name: str):
        if self.previous_items is None:
            return None
        return member_summary(self.previous_items, name)

    # team stats (networkx)

    def get_components(self) -> list:
        """connected groups of collaborators, largest first"""
        comps = sorted(nx.connected_components(self.G_simple), key=len, reverse=True)
        return [
            {'component_id': i, 'size': len(c), 'members': sorted(c)[:10]}
            for i, c in enumerate(comps)
        ]

    def get_centralities(self, force_recompute=False) -> dict:
        if self._centralities is not None and not force_recompute:
            return self._centralities

        deg_cent = nx.degree_centrality(self.G_simple)
        between_cent = nx.betweenness_centrality(self.G_simple)
        close_cent = nx.closeness_centrality(self.G_simple)

        self._centralities = {
            m: {
                'degree_centrality': deg_cent.get(m, 0),
                'betweenness': between_cent.get(m, 0),
                'closeness': close_cent.get(m, 0),
            }
            for m in self.members()
        }
        return self._centralities

    def get_full_graph_stats(self) -> dict:
        totals = team_totals(self.items)
        degrees = [n.degree for n in self.graph.nodes]
        return {
            'num_members': len(self.graph.nodes),
            'num_owners': totals.members,
            'num_edges': len(self.graph.edges),
            'num_references': totals.total_references,
            'total_pairs': totals.total_pairs,
            'total_waits': totals.total_waits,
            'avg_pair_count': totals.avg_pair_count,
            'num_components': len(self.get_components()),
            'density': nx.density(nx.DiGraph(self.G)) if self.G.number_of_nodes() else 0.0,
            'avg_degree': sum(degrees) / len(degrees) if degrees else 0,
            'max_degree': max(degrees) if degrees else 0,
        }

    def get_relation_stats(self) -> dict:
        rels = Counter(rel for item in self.items for _, rel in item.references())
        return dict(rels.most_common())

    # analytics passthrough

    def get_insights(self, member: str) -> list:
        return generate_personal_insights(self.items, member, self.previous_items)

    def get_team_insights(self) -> list:
        return generate_team_insights(self.items)

    def get_bottlenecks(self) -> list:
        return bottleneck_ranking(self.items)

    def get_load(self) -> list:
        return load_heatmap(self.items)

    def get_matrix(self, relation_filter=None) -> list:
        return group_matrix(self.items, relation_filter)

    def get_radar(self, member: str):
        return radar_profile(self.items, member)

    def get_timeline(self, member: str) -> list:
        return bottleneck_timeline(self.weeks, member)

    def get_weekly_trend(self, member: str = None) -> list:
        return weekly_trend(self.weeks, member)

    # layouts

    def get_scene(self) -> NetworkScene:
        if self._scene is None:
            self._scene = NetworkScene(self.graph, simulator=self.simulator)
        return self._scene

    def get_orbit(self, member: str) -> OrbitView:
        return OrbitView(compute_orbit(self.items, member))

    # tables for display

    def load_table(self) -> pd.DataFrame:
        rows = []
        for r in self.get_load():
            row = {'member': r.name, 'group': r.group}
            for rel in registered_relations():
                row[rel] = r.relation_counts.get(rel, 0)
            row['inbound_wait'] = r.inbound_wait
            row['total_load'] = r.total_load
            rows.append(row)
        return pd.DataFrame(rows, columns=['member', 'group'] + registered_relations() + ['inbound_wait', 'total_load'])

    def bottleneck_table(self) -> pd.DataFrame:
        cols = ['member', 'group', 'inbound', 'outbound', 'intensity', 'waiting']
        rows = [
            {
                'member': b.name,
                'group': b.group,
                'inbound': b.inbound_count,
                'outbound': b.outbound_count,
                'intensity': b.intensity,
                'waiting': ', '.join(b.waiters),
            }
            for b in self.get_bottlenecks()
        ]
        return pd.DataFrame(rows, columns=cols)

    def matrix_table(self, relation_filter=None) -> pd.DataFrame:
        """source group rows x target group columns"""
        cells = self.get_matrix(relation_filter)
        if not cells:
            return pd.DataFrame()
        df = pd.DataFrame([
            {'source': c.source_group, 'target': c.target_group, 'count': c.total_count}
            for c in cells
        ])
        order = list(dict.fromkeys(df['source']))
        table = df.pivot(index='source', columns='target', values='count')
        return table.reindex(index=order, columns=order)

    def insights_table(self, member: str = None) -> pd.DataFrame:
        insights = self.get_insights(member) if member else self.get_team_insights()
        return pd.DataFrame(
            [{'type': i.type, 'code': i.code, 'message': i.message, 'detail': i.detail or ''} for i in insights],
            columns=['type', 'code', 'message', 'detail'],
        )

    # cache

    def save_cache(self, filepath: str = 'dashboard_cache.pkl'):
        data = {
            'items': self.items,
            'previous_items': self.previous_items,
            'weeks': self.weeks,
        }
        with open(filepath, 'wb') as f:
            pickle.dump(data, f)

    def load_cache(self, filepath: str = 'dashboard_cache.pkl') -> bool:
        """load from cache if exists"""
        if not os.path.exists(filepath):
            return False

        with open(filepath, 'rb') as f:
            data = pickle.load(f)

        self.set_items(data['items'], previous=data['previous_items'], weeks=data['weeks'])
        return True

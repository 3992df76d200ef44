# NOTE: these are the fixed knobs of the analysis. change them here and nowhere else.
# insight thresholds are not configurable at runtime.

# relation vocabulary

PAIR = 'pair'
WAIT = 'pre'            # owner is waiting on the named collaborator
POST = 'post'
REVIEW = 'review'
HANDOFF = 'handoff'

UNKNOWN_RELATION = 'unknown'   # collaborator entry with no relation at all

# only these two carry directional / symmetric semantics.
# everything else is counted, never interpreted
SPECIAL_RELATIONS = {PAIR, WAIT}

# the vocabularies disagree ('waiting-on' vs 'pre', and plain 'wait' in hand-written data).
# same meaning everywhere, so they are explicit aliases, not guesses
RELATION_ALIASES = {
    'waiting-on': WAIT,
    'wait': WAIT,
}

RELATION_LABELS = {
    PAIR: 'Pair',
    WAIT: 'Waiting on',
    POST: 'Follow-up',
    REVIEW: 'Review',
    HANDOFF: 'Handoff',
    UNKNOWN_RELATION: 'Unspecified',
}

RELATION_COLORS = {
    PAIR: '#3b82f6',      # blue
    WAIT: '#ef4444',      # red
    POST: '#22c55e',      # green
    REVIEW: '#a855f7',    # purple
    HANDOFF: '#f59e0b',   # amber
    UNKNOWN_RELATION: '#94a3b8',
}

# groups

UNKNOWN_GROUP = 'Unknown'  # member never owns an item, so we never saw a group for them

GROUP_PALETTE = [
    '#2563eb', '#16a34a', '#db2777', '#ea580c',
    '#7c3aed', '#0891b2', '#ca8a04', '#4b5563',
]
UNKNOWN_GROUP_COLOR = '#9ca3af'

# insight thresholds (personal)

BOTTLENECK_INBOUND_MIN = 2          # this many people waiting on me -> warning
HIGH_CROSS_GROUP_SCORE = 50
INSULAR_CROSS_GROUP_MAX = 20        # exclusive, and score must be > 0
PAIR_ABOVE_AVERAGE_RATIO = 1.5
BACKLOG_OUTBOUND_MIN = 3
COLLAB_JUMP_MIN = 2                 # strictly greater than this
REPEATED_WAIT_MIN = 2

# insight thresholds (team)

TEAM_BOTTLENECK_INBOUND_MIN = 3
TEAM_ACTIVE_PAIR_MIN = 3
TEAM_WAIT_PAIR_RATIO = 1.5

# trends

TIMELINE_ANOMALY_SIGMA = 1.5
TIMELINE_ANOMALY_MIN_WEEKS = 3

# orbit layout

ORBIT_RING_RADII = {'inner': 100.0, 'middle': 170.0, 'outer': 240.0}
ORBIT_INNER_INTENSITY = 0.5
ORBIT_CENTER_RADIUS = 35.0
ORBIT_NODE_MIN_RADIUS = 22.0
ORBIT_NODE_RADIUS_SPAN = 14.0
ORBIT_CURVE_RATIO = 0.15
ORBIT_CURVE_MAX = 25.0
ORBIT_CURVE_PER_COUNT = 0.25
ORBIT_ZOOM_MIN = 0.5
ORBIT_ZOOM_MAX = 3.0
ORBIT_WIDTH = 600.0
ORBIT_HEIGHT = 550.0

# highlight / dimming (never zero, dimmed things stay visible)

ACTIVE_OPACITY = 1.0
IDLE_NODE_OPACITY = 1.0
IDLE_EDGE_OPACITY = 0.6
DIMMED_NODE_OPACITY = 0.2
DIMMED_EDGE_OPACITY = 0.1

# camera

AUTO_ROTATE_SPEED = 0.3       # radians per second
DRAG_SENSITIVITY = 0.01       # radians per pixel
MAX_TILT = 1.5707963267948966  # pi / 2

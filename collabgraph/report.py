# prints a plain text collaboration report for a data file.
# usage: python -m collabgraph.report data.json --member alice

import argparse
import logging
import sys

from collabgraph.data_loader import WorkItemLoader
from collabgraph.insights import generate_personal_insights, generate_team_insights
from collabgraph.metrics import bottleneck_ranking, group_matrix, load_heatmap, member_summary, team_totals
from collabgraph.trends import bottleneck_timeline, timeline_delta

logger = logging.getLogger(__name__)

TOP_N = 10


def print_team(items):

    totals = team_totals(items)
    print("TEAM")
    print(f"  members: {totals.members}, references: {totals.total_references}")
    print(f"  pairs: {totals.total_pairs}, waits: {totals.total_waits}, "
          f"avg pairs per member: {totals.avg_pair_count:.1f}")
    print()

    print("BOTTLENECKS")
    ranking = [b for b in bottleneck_ranking(items) if b.inbound_count > 0]
    if not ranking:
        print("  nobody is being waited on")
    for b in ranking[:TOP_N]:
        print(f"  {b.name:<20} {b.group:<14} inbound {b.inbound_count:>3}  ({b.intensity}%)  "
              f"waiting: {', '.join(b.waiters)}")
    print()

    print("LOAD")
    for row in load_heatmap(items)[:TOP_N]:
        print(f"  {row.name:<20} pair {row.pair_count:>3}  wait {row.wait_count:>3}  "
              f"inbound {row.inbound_wait:>3}  total {row.total_load:>3}")
    print()

    print("GROUP MATRIX")
    for cell in group_matrix(items):
        if cell.total_count:
            print(f"  {cell.source_group} -> {cell.target_group}: {cell.total_count} "
                  f"(pair {cell.pair_count}, wait {cell.wait_count}, other {cell.other_count})")
    print()

    print("TEAM INSIGHTS")
    for insight in generate_team_insights(items):
        print(f"  [{insight.type}] {insight.message}")
    print()


def print_member(items, member, previous=None, weeks=None):

    s = member_summary(items, member)
    print(f"MEMBER {s.name} ({s.group})")
    print(f"  pairs: {s.pair_count}, waiting on others: {s.wait_count}, others waiting: {s.inbound_wait}")
    print(f"  cross-group: {s.cross_group_score}%, cross-module: {s.cross_module_score}%")
    for c in s.collaborators[:5]:
        print(f"    {c.name}: {c.count}")

    if weeks:
        delta = timeline_delta(bottleneck_timeline(weeks, member))
        if delta is not None:
            print(f"  week over week: inbound {delta['inbound']:+d}, outbound {delta['outbound']:+d}")
    print()

    print("INSIGHTS")
    for insight in generate_personal_insights(items, member, previous):
        print(f"  [{insight.type}] {insight.message}")
        if insight.detail:
            print(f"      {insight.detail}")
    print()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Print a collaboration report for a work item file.")
    parser.add_argument("data", help="json file: a list of items, or {'weeks': [...]} / {'items': [...]}")
    parser.add_argument("--member", help="also print the personal view for this member")
    parser.add_argument("--previous", help="json file with the previous period (overrides the weeks in data)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    loader = WorkItemLoader(args.data)
    items = loader.load()

    previous = loader.previous_items()
    if args.previous:
        previous = WorkItemLoader(args.previous).load()

    logger.debug("report on %d items (previous period: %s)", len(items), previous is not None)

    print_team(items)
    if args.member:
        print_member(items, args.member, previous, loader.weeks)
    return 0


if __name__ == "__main__":
    sys.exit(main())

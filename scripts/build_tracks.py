import argparse
import asyncio
import logging

import logging_config
from tracks.factory import build_default_board
from tracks.store import InMemorySegmentStore, load_segments
from tracks.waypoints import sample_display_waypoints

logger = logging.getLogger("build_tracks")


def parse_args():
    parser = argparse.ArgumentParser(description="Resolve and route every segment of a trip file.")
    parser.add_argument("trip", help="Trip JSON (trips -> days -> route_segments, or a list of segments)")
    parser.add_argument("--provider", choices=["amap", "osrm"], default=None,
                        help="Driving route provider (default: ROUTE_PROVIDER env or amap)")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def print_tracks(board, store):
    for track in board.tracks:
        segment = store.get_segment(track.segment_id)
        route_info = "direct line" if track.degraded else f"{track.distance_label} / {track.duration_label}"
        if track.from_cache:
            route_info += " (cached)"
        print(f"\n=== {track.segment_name} ({track.segment_id}) ===")
        print(f"  Route: {route_info}, {len(track.polyline)} polyline points")
        for point in track.points:
            print(f"  [{point.kind.value:>5}] {point.label}: {point.coordinate.lat:.5f}, {point.coordinate.lon:.5f}")
        if segment is not None:
            waypoints = sample_display_waypoints(segment, track.polyline)
            if waypoints:
                print(f"  Display waypoints: {len(waypoints)}")


async def run(args):
    segments = load_segments(args.trip)
    store = InMemorySegmentStore(segments)
    board = build_default_board(args.provider)

    logger.info("Loaded %d segment(s) from %s", len(segments), args.trip)
    await board.refresh(store.get_segments())

    print_tracks(board, store)
    if board.message:
        print("\n=== WARNINGS ===")
        print(board.message)


def main():
    args = parse_args()
    logging_config.configure(args.log_level)
    asyncio.run(run(args))


if __name__ == "__main__":
    main()

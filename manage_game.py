"""CLI tool for driving a running Opticon server from the terminal.

Sends commands to the server's /game endpoints and prints the result.
The server must be running for this tool to work.

Usage:
    python manage_game.py state
    python manage_game.py move east
    python manage_game.py rotate right
    python manage_game.py bluff west
    python manage_game.py end-turn
    python manage_game.py tick --ms 1000
    python manage_game.py reset
    python manage_game.py log
    python manage_game.py map

Environment variables:
    OPTICON_URL: Server URL (default: http://127.0.0.1:8000)
"""

import argparse
import os
import sys

import httpx

DEFAULT_URL = os.environ.get("OPTICON_URL", "http://127.0.0.1:8000")

STEPS = {
    "north": (0, -1),
    "east": (1, 0),
    "south": (0, 1),
    "west": (-1, 0),
}
TURNS = {"left": -1, "right": 1}

MAP_GLYPHS = {
    "/turf/floor": ".",
    "/turf/wall": "#",
    "/turf/moat": "~",
}
OVERLAY_GLYPHS = {
    "/turf/window": "g",
    "/turf/door": "d",
    "/turf/door/locked": "D",
    "/turf/wall": "X",
}


def _request(method: str, url: str, **kwargs) -> httpx.Response:
    """Make an HTTP request, handling connection errors."""
    kwargs.setdefault("timeout", 10.0)
    try:
        return httpx.request(method, url, **kwargs)
    except httpx.ConnectError:
        print(f"Error: Could not connect to server at {url}", file=sys.stderr)
        print("Is the server running?", file=sys.stderr)
        sys.exit(1)


def _handle_error(resp: httpx.Response) -> None:
    """Handle common error status codes."""
    if resp.status_code in (400, 404, 422):
        detail = resp.json().get("detail", "Bad request")
        print(f"Error: {detail}", file=sys.stderr)
        sys.exit(1)
    elif resp.status_code != 200:
        print(f"Error: {resp.status_code}: {resp.text}", file=sys.stderr)
        sys.exit(1)


def _print_result(data: dict) -> None:
    status = "ok" if data["success"] else f"ignored ({data['reason']})"
    print(f"[{status}] {data['description']}")
    for event in data.get("events", []):
        print(f"  - {event['description']}")
    if data.get("game_over"):
        print(f"Game over. Winner: {data['winner']}")


def _command(url: str, path: str, body: dict | None = None) -> None:
    resp = _request("POST", f"{url}/game/{path}", json=body)
    _handle_error(resp)
    _print_result(resp.json())


def show_state(url: str) -> None:
    """Print turn, phase, and actor state."""
    resp = _request("GET", f"{url}/game/state")
    _handle_error(resp)
    data = resp.json()
    prisoner = data["prisoner"]
    watcher = data["watcher"]
    print(f"Turn {data['turn_number']}: {data['active_turn']} ({data['phase']})")
    if data["winner"]:
        print(f"Winner:   {data['winner']}")
    print(f"Prisoner: {tuple(prisoner['position'])}  MP {prisoner['movement_points']}")
    bluff = watcher["bluff_direction"] or "-"
    print(f"Watcher:  facing {watcher['facing']}  bluff {bluff}")
    print(f"Noise:    {len(data['noise_markers'])} marker(s)")
    print(f"Commands: {', '.join(data['available_commands'])}")


def show_log(url: str) -> None:
    """Print the current game's event log."""
    resp = _request("GET", f"{url}/game/log")
    _handle_error(resp)
    events = resp.json()
    if not events:
        print("No events yet.")
        return
    print(f"{'TURN':<6} {'ROLE':<10} {'KIND':<12} DESCRIPTION")
    print("-" * 60)
    for event in events:
        print(f"{event['turn_number']:<6} {event['role']:<10} {event['kind']:<12} {event['description']}")


def show_map(url: str) -> None:
    """Print the map as ASCII, with the prisoner as '@'."""
    resp = _request("GET", f"{url}/game/map")
    _handle_error(resp)
    grid = resp.json()["grid"]
    state = _request("GET", f"{url}/game/state").json()
    px, py = state["prisoner"]["position"]
    for y, row in enumerate(grid):
        line = []
        for x, cell in enumerate(row):
            if (x, y) == (px, py):
                line.append("@")
            elif cell["overlay"]:
                line.append(OVERLAY_GLYPHS.get(cell["overlay"], "?"))
            else:
                line.append(MAP_GLYPHS.get(cell["turf"], "?"))
        print("".join(line))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Play Opticon against a running server",
    )

    url_kwargs = dict(
        default=DEFAULT_URL,
        help=f"Server URL (default: {DEFAULT_URL}, or set OPTICON_URL env var)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    state_parser = subparsers.add_parser("state", help="Show turn and actor state")
    state_parser.add_argument("--url", **url_kwargs)

    move_parser = subparsers.add_parser("move", help="Step the prisoner one cell")
    move_parser.add_argument("direction", choices=sorted(STEPS))
    move_parser.add_argument("--url", **url_kwargs)

    rotate_parser = subparsers.add_parser("rotate", help="Turn the watcher a quarter-turn")
    rotate_parser.add_argument("way", choices=sorted(TURNS))
    rotate_parser.add_argument("--url", **url_kwargs)

    bluff_parser = subparsers.add_parser("bluff", help="Declare a watcher bluff")
    bluff_parser.add_argument("direction", choices=sorted(STEPS))
    bluff_parser.add_argument("--url", **url_kwargs)

    end_parser = subparsers.add_parser("end-turn", help="End the active turn")
    end_parser.add_argument("--url", **url_kwargs)

    tick_parser = subparsers.add_parser("tick", help="Advance simulated time")
    tick_parser.add_argument("--ms", type=float, default=1000.0, help="Milliseconds to advance")
    tick_parser.add_argument("--url", **url_kwargs)

    reset_parser = subparsers.add_parser("reset", help="Start a new game after game over")
    reset_parser.add_argument("--url", **url_kwargs)

    log_parser = subparsers.add_parser("log", help="Show the event log")
    log_parser.add_argument("--url", **url_kwargs)

    map_parser = subparsers.add_parser("map", help="Print the map as ASCII")
    map_parser.add_argument("--url", **url_kwargs)

    args = parser.parse_args()

    if args.command == "state":
        show_state(args.url)
    elif args.command == "move":
        dx, dy = STEPS[args.direction]
        _command(args.url, "move", {"dx": dx, "dy": dy})
    elif args.command == "rotate":
        _command(args.url, "rotate", {"delta": TURNS[args.way]})
    elif args.command == "bluff":
        _command(args.url, "bluff", {"direction": args.direction})
    elif args.command == "end-turn":
        _command(args.url, "end-turn")
    elif args.command == "tick":
        _command(args.url, "tick", {"delta_ms": args.ms})
    elif args.command == "reset":
        _command(args.url, "reset")
    elif args.command == "log":
        show_log(args.url)
    elif args.command == "map":
        show_map(args.url)


if __name__ == "__main__":
    main()

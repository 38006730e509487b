#!/usr/bin/env python3
"""
GCS Live Map CLI

Command-line client for gcs-map-server.
"""

import argparse
import json
import sys
from typing import Any, List

from ..overlay.dispatcher import EVENTS
from .client import MapClient, ServerError, ServerConnectionError, read_journal

# Parameters passed through as text, so a vehicle called "1" stays "1"
STRING_PARAMS = {'name', 'type', 'mode', 'color'}


# ANSI colors
class Colors:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    CYAN = '\033[96m'


def color(text: str, c: str) -> str:
    """Apply color to text"""
    return f"{c}{text}{Colors.RESET}"


def print_error(msg: str):
    """Print error message"""
    print(color(f"Error: {msg}", Colors.RED))


def print_success(msg: str):
    """Print success message"""
    print(color(msg, Colors.GREEN))


def parse_value(text: str) -> Any:
    """
    Decode one command-line event argument

    JSON literals are decoded (numbers, lists, objects); anything else is
    passed through as a plain string, so vehicle names need no quoting.
    """
    try:
        return json.loads(text)
    except ValueError:
        return text


def parse_event_args(call: str, texts: List[str]) -> List[Any]:
    """Decode command-line arguments for `call`, keeping text parameters as strings"""
    params = EVENTS.get(call, ())
    values = []
    for i, text in enumerate(texts):
        if i < len(params) and params[i] in STRING_PARAMS:
            values.append(text)
        else:
            values.append(parse_value(text))
    return values


# ==================== Commands ====================

def cmd_status(client: MapClient, args) -> int:
    """Show server health and vehicles"""
    try:
        health = client.get_health()
        state = client.get_state()
    except (ServerError, ServerConnectionError) as e:
        print_error(str(e))
        return 1

    session = state.get('session', {})
    vehicles = session.get('vehicles', {})

    print()
    print(color("=== GCS Live Map ===", Colors.BOLD))
    print(f"Status: {color(health.get('status', '?'), Colors.GREEN)}")
    print(f"Events applied: {health.get('events', 0)}")
    print(f"Fence shapes: {session.get('fences', 0)}")

    print()
    print(color("--- Vehicles ---", Colors.CYAN))
    if not vehicles:
        print("  (none)")
    for name, v in vehicles.items():
        pos = v.get('position')
        where = f"{pos['lat']:.6f}, {pos['lng']:.6f}" if pos else color("no fix", Colors.YELLOW)
        mission = session.get('missions', {}).get(name)
        wps = f"{len(mission['waypoints'])} wp" if mission else "-"
        guided = "G" if name in session.get('guided', {}) else "-"
        print(f"  {name:<16} {v.get('type', '?'):<13} {where:<24} "
              f"mode={v.get('mode') or '-':<10} batt={v.get('battery_level', 0)}% "
              f"mission={wps} guided={guided}")
    print()
    return 0


def cmd_state(client: MapClient, args) -> int:
    """Dump full map state as JSON"""
    try:
        state = client.get_state()
    except (ServerError, ServerConnectionError) as e:
        print_error(str(e))
        return 1

    print(json.dumps(state, indent=2, ensure_ascii=False))
    return 0


def cmd_vehicle(client: MapClient, args) -> int:
    """Show one vehicle's tooltip"""
    try:
        vehicle = client.get_vehicle(args.name)
    except (ServerError, ServerConnectionError) as e:
        print_error(str(e))
        return 1

    print(vehicle.get('title', ''))
    return 0


def cmd_events(client: MapClient, args) -> int:
    """List accepted events"""
    try:
        events = client.list_events()
    except (ServerError, ServerConnectionError) as e:
        print_error(str(e))
        return 1

    for call, params in events.items():
        print(f"  {call:<16} {' '.join(params)}")
    return 0


def cmd_send(client: MapClient, args) -> int:
    """Send a single event"""
    values = parse_event_args(args.call, args.args)
    try:
        client.send_event(args.call, *values)
    except (ServerError, ServerConnectionError) as e:
        print_error(str(e))
        return 1

    print_success(f"{args.call} applied")
    return 0


def cmd_replay(client: MapClient, args) -> int:
    """Replay a JSON-lines event journal"""
    try:
        events = [event for _, event in read_journal(args.file)]
    except (FileNotFoundError, ValueError) as e:
        print_error(str(e))
        return 1

    applied = 0
    for start in range(0, len(events), args.batch_size):
        chunk = events[start:start + args.batch_size]
        try:
            result = client.send_batch(chunk)
        except ServerConnectionError as e:
            print_error(str(e))
            return 1
        except ServerError as e:
            failed = start + e.response.get('index', 0) + 1
            print_error(f"event {failed} of {len(events)}: {e}")
            return 1
        applied += result.get('applied', 0)

    print_success(f"Replayed {applied} events from {args.file}")
    return 0


def cmd_serve(client: MapClient, args) -> int:
    """Start server in foreground"""
    from ..server.main import main as server_main
    return server_main([])


# ==================== Main ====================

def main(argv=None):
    """Main entry point for gcs-map CLI"""
    parser = argparse.ArgumentParser(
        prog='gcs-map',
        description='GCS Live Map CLI',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gcs-map status                                   Vehicles on the map
  gcs-map send vehicleUp A QUADROTOR               Bring a vehicle up
  gcs-map send positionUpdate A 37.5 -122.0 10     Move it
  gcs-map send drawMission A 1 '[{"lat":37.5,"lng":-122.0}]'
  gcs-map replay events.jsonl                      Replay a journal
  gcs-map serve                                    Start server (dev mode)
"""
    )

    parser.add_argument(
        '--url',
        default='http://localhost:8080',
        help='Server URL (default: http://localhost:8080)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command')

    # status
    subparsers.add_parser('status', help='Show vehicles on the map')

    # state
    subparsers.add_parser('state', help='Dump full map state as JSON')

    # vehicle
    p = subparsers.add_parser('vehicle', help="Show a vehicle's tooltip")
    p.add_argument('name', help='Vehicle name')

    # events
    subparsers.add_parser('events', help='List accepted events')

    # send
    p = subparsers.add_parser('send', help='Send one event')
    p.add_argument('call', help='Event name, e.g. positionUpdate')
    p.add_argument('args', nargs='*', help='Event arguments (JSON literals or strings)')

    # replay
    p = subparsers.add_parser('replay', help='Replay a JSON-lines event journal')
    p.add_argument('file', help='Journal file path')
    p.add_argument('--batch-size', type=int, default=100, help='Events per request')

    # serve
    subparsers.add_parser('serve', help='Start server in foreground (dev mode)')

    args = parser.parse_args(argv)

    # No command - show help
    if not args.command:
        parser.print_help()
        return 0

    client = MapClient(args.url)

    # Commands that don't need server
    if args.command == 'serve':
        return cmd_serve(client, args)

    if not client.is_server_running():
        print_error(f"Server is not running at {args.url} (start it with 'gcs-map serve')")
        return 1

    commands = {
        'status': cmd_status,
        'state': cmd_state,
        'vehicle': cmd_vehicle,
        'events': cmd_events,
        'send': cmd_send,
        'replay': cmd_replay,
    }

    return commands[args.command](client, args)


if __name__ == '__main__':
    sys.exit(main())

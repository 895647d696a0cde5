#!/usr/bin/env python3
"""
SlideCraft - Interactive CLI Session Tool

Usage:
    python tools/slidecraft_cli.py [--url URL] [--session SESSION_ID]

Features:
    - Real-time WebSocket message display
    - Color-coded message types
    - Raw JSON toggle with 'j' command
    - Deck commands (type 'help' once connected)
"""

import asyncio
import json
import shlex
import sys
import uuid
from datetime import datetime

import websockets

# ANSI color codes
COLORS = {
    'reset': '\033[0m',
    'red': '\033[91m',
    'green': '\033[92m',
    'yellow': '\033[93m',
    'blue': '\033[94m',
    'magenta': '\033[95m',
    'cyan': '\033[96m',
    'gray': '\033[90m',
    'bold': '\033[1m',
}

HELP = [
    ("gen <url>", "generate a deck from a web page"),
    ("text <content>", "generate a deck from pasted text"),
    ("next / prev / go <n>", "navigate (slide numbers are 1-based)"),
    ("add / img <ref>", "add a content or image slide after the current one"),
    ("del [n]", "delete slide n (default: current)"),
    ("edit <n> <field> <value>", "replace one field of slide n"),
    ("size <n> <field_key> <px>", "override a field's font size"),
    ("theme <name> [accent]", "minimalist, hybrid or maximalist"),
    ("rename <title>", "rename the deck"),
    ("dismiss / reset", "acknowledge an error / start over"),
    ("j / q / r", "toggle raw JSON / quit / reconnect"),
]


def color(text, color_name):
    return f"{COLORS.get(color_name, '')}{text}{COLORS['reset']}"


def format_timestamp():
    return datetime.now().strftime("%H:%M:%S")


def _slide_number(token):
    return int(token) - 1


def parse_command(line, current_index=0):
    """
    Translate one CLI line into a client message.

    Returns:
        dict to send, or None if the line is not a deck command
    """
    try:
        parts = shlex.split(line)
    except ValueError:
        return None
    if not parts:
        return None

    cmd, args = parts[0].lower(), parts[1:]
    try:
        if cmd == 'gen' and args:
            return {"type": "generate", "payload": {"url": args[0], "notes": " ".join(args[1:])}}
        if cmd == 'text' and args:
            return {"type": "generate", "payload": {"text": " ".join(args)}}
        if cmd in ('next', 'prev'):
            return {"type": "navigate", "payload": {"direction": "next" if cmd == 'next' else "previous"}}
        if cmd == 'go' and args:
            return {"type": "navigate", "payload": {"index": _slide_number(args[0])}}
        if cmd == 'add':
            return {"type": "add_slide", "payload": {"after_index": current_index}}
        if cmd == 'img' and args:
            return {"type": "add_image_slide", "payload": {"after_index": current_index, "image": args[0]}}
        if cmd == 'del':
            index = _slide_number(args[0]) if args else current_index
            return {"type": "delete_slide", "payload": {"index": index}}
        if cmd == 'edit' and len(args) >= 3:
            return {"type": "edit_field", "payload": {
                "slide_index": _slide_number(args[0]), "field": args[1], "value": " ".join(args[2:])
            }}
        if cmd == 'size' and len(args) == 3:
            return {"type": "set_customization", "payload": {
                "slide_index": _slide_number(args[0]), "kind": "fontSize",
                "field_key": args[1], "value": float(args[2])
            }}
        if cmd == 'theme' and args:
            payload = {"template": args[0]}
            if len(args) > 1:
                payload["accent_color"] = args[1]
            return {"type": "set_theme", "payload": payload}
        if cmd == 'rename' and args:
            return {"type": "rename_deck", "payload": {"title": " ".join(args)}}
        if cmd == 'dismiss':
            return {"type": "dismiss_error", "payload": {}}
        if cmd == 'reset':
            return {"type": "reset", "payload": {}}
    except ValueError:
        return None
    return None


def print_message(msg_type, payload, raw_json=None, show_raw=False):
    """Pretty-print a WebSocket message."""
    ts = color(f"[{format_timestamp()}]", 'gray')

    if msg_type == 'chat_message':
        text = payload.get('text', '')
        print(f"{ts} {color('CHAT:', 'green')} {text}")

    elif msg_type == 'deck_update':
        state = payload.get('state', '')
        deck = payload.get('presentation') or {}
        slides = deck.get('slides', [])
        current = payload.get('current_index', 0)
        print(f"{ts} {color('DECK:', 'blue')} [{state}] '{deck.get('title', '')}' "
              f"{len(slides)} slides, theme={payload.get('theme')}")
        for i, slide in enumerate(slides):
            marker = color('>', 'yellow') if i == current else ' '
            label = slide.get('title') or slide.get('text') or slide.get('number') or ''
            print(f"  {marker} {color(f'[{i+1}]', 'cyan')} {slide.get('type')}: {label[:60]}")
        if payload.get('error'):
            print(f"    {color('ERROR:', 'red')} {payload['error']}")

    elif msg_type == 'status_update':
        status = payload.get('status', '')
        text = payload.get('text', '')
        progress = payload.get('progress')
        suffix = f" {progress}%" if progress is not None else ""
        print(f"{ts} {color('STATUS:', 'magenta')} [{status}] {text}{suffix}")

    else:
        print(f"{ts} {color(f'{msg_type.upper()}:', 'gray')} {str(payload)[:200]}")

    if show_raw and raw_json:
        print(f"    {color('RAW:', 'gray')} {json.dumps(raw_json, indent=2)[:500]}")


async def receive_messages(ws, state):
    """Background task to receive and display messages."""
    try:
        async for message in ws:
            try:
                data = json.loads(message)
                msg_type = data.get('type', 'unknown')
                payload = data.get('payload', {})
                if msg_type == 'deck_update':
                    state['current_index'] = payload.get('current_index', 0)
                print_message(msg_type, payload, data, state['show_raw'])
                print(f"{color('> ', 'cyan')}", end='', flush=True)  # Re-print prompt
            except json.JSONDecodeError:
                print(color(f"[RAW] {message[:200]}", 'red'))
    except websockets.ConnectionClosed:
        print(color("\nConnection closed", 'yellow'))
    except asyncio.CancelledError:
        pass


async def main(url, session_id=None):
    """Main CLI loop."""
    if not session_id:
        session_id = f"cli-{uuid.uuid4().hex[:8]}"

    full_url = f"{url}/ws?session_id={session_id}"

    print(color("=" * 60, 'bold'))
    print(color("SlideCraft - CLI Session Tool", 'bold'))
    print(color("=" * 60, 'bold'))
    print(f"Session: {color(session_id, 'cyan')}")
    print(f"URL: {color(full_url, 'gray')}")
    print(color("-" * 60, 'gray'))

    state = {'show_raw': False, 'current_index': 0}

    try:
        async with websockets.connect(full_url, ping_interval=30, ping_timeout=10) as ws:
            print(color("Connected! Type 'help' for commands.\n", 'green'))

            receive_task = asyncio.create_task(receive_messages(ws, state))

            while True:
                try:
                    print(f"{color('> ', 'cyan')}", end='', flush=True)
                    loop = asyncio.get_running_loop()
                    line = (await loop.run_in_executor(None, sys.stdin.readline)).strip()

                    if not line:
                        continue

                    if line.lower() == 'q':
                        print(color("Goodbye!", 'yellow'))
                        break
                    elif line.lower() == 'j':
                        state['show_raw'] = not state['show_raw']
                        print(color(f"Raw JSON: {'ON' if state['show_raw'] else 'OFF'}", 'yellow'))
                    elif line.lower() == 'r':
                        print(color("Reconnecting...", 'yellow'))
                        break
                    elif line.lower() == 'help':
                        for usage, description in HELP:
                            print(f"  {color(usage, 'yellow')} - {description}")
                    else:
                        message = parse_command(line, state['current_index'])
                        if message is None:
                            print(color("Unknown command (type 'help')", 'red'))
                            continue
                        await ws.send(json.dumps(message))

                except KeyboardInterrupt:
                    print(color("\nInterrupted", 'yellow'))
                    break

            receive_task.cancel()
            try:
                await receive_task
            except asyncio.CancelledError:
                pass

    except (OSError, websockets.WebSocketException) as e:
        print(color(f"Connection error: {e}", 'red'))


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="SlideCraft CLI Session Tool")
    parser.add_argument("--url", default="ws://localhost:8000", help="WebSocket base URL")
    parser.add_argument("--session", default=None, help="Session ID")
    args = parser.parse_args()

    asyncio.run(main(args.url, args.session))

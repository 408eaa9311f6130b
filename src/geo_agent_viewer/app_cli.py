from __future__ import annotations

import argparse
import signal
import sys
import threading

from loguru import logger

from .ansi_colors import ColorMode, detect_color_mode
from .collaborators import fetch_boundary_overlay
from .config import ViewerConfig, build_stream
from .demo_scripts import DEMO_PROMPTS
from .domain_types import Session
from .errors import TurnInProgressError
from .http_agent_stream import HttpAgentStream
from .presenters import render_map_view, render_session
from .session_reducer import new_session
from .timeline_presenter import render_event_line
from .turn_controller import TurnController


class LiveEcho:
    """Print new events and streamed text as each snapshot is published."""

    def __init__(self, mode: ColorMode) -> None:
        self.mode = mode
        self._events_seen = 0
        self._message_id: str | None = None
        self._chars_seen = 0
        self._mid_line = False

    def __call__(self, session: Session) -> None:
        for event in session.events[self._events_seen:]:
            if self._mid_line:
                print(flush=True)
                self._mid_line = False
            print(render_event_line(event, self.mode, details=False), flush=True)
        self._events_seen = len(session.events)

        active = next((m for m in session.messages if m.id == session.active_message_id), None)
        if active is None:
            return
        if active.id != self._message_id:
            self._message_id, self._chars_seen = active.id, 0
        fresh = active.content[self._chars_seen:]
        if fresh:
            print(fresh, end="", flush=True)
            self._chars_seen = len(active.content)
            self._mid_line = True


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def _start_session_init(stream: HttpAgentStream) -> threading.Thread:
    # Fire and forget: the first turn does not wait for the backend to answer
    thread = threading.Thread(target=stream.init_session, name="session-init", daemon=True)
    thread.start()
    return thread


def _build_controller(config: ViewerConfig, args: argparse.Namespace, mode: ColorMode) -> TurnController:
    session = new_session()
    stream = build_stream(config, session.session_id, simulate=args.simulate)
    if isinstance(stream, HttpAgentStream):
        _start_session_init(stream)

    on_update = LiveEcho(mode) if args.live_events else None
    controller = TurnController(stream, session=session, on_update=on_update)

    if not args.no_overlay:
        overlay = fetch_boundary_overlay(config.boundary_url, timeout_secs=config.timeout_secs)
        if overlay is not None:
            controller.load_boundary_overlay(overlay)
    return controller


def _install_abort_handler(controller: TurnController) -> None:
    def handle_signal(signum: int, frame: object) -> None:
        if controller.is_streaming:
            controller.abort()
            return
        raise KeyboardInterrupt

    try:
        signal.signal(signal.SIGINT, handle_signal)
    except (ValueError, OSError):
        # Not on the main thread
        pass


def run_turn(controller: TurnController, text: str, args: argparse.Namespace, mode: ColorMode) -> None:
    session = controller.send(text)
    if args.live_events:
        print()
        print(render_map_view(session.map_view))
    else:
        print(render_session(session, mode))


def ask(controller: TurnController, args: argparse.Namespace, mode: ColorMode) -> None:
    run_turn(controller, args.text, args, mode)


def demo(controller: TurnController, args: argparse.Namespace, mode: ColorMode) -> None:
    for prompt in DEMO_PROMPTS:
        print(f"\n>>> {prompt}", flush=True)
        run_turn(controller, prompt, args, mode)


def chat(controller: TurnController, args: argparse.Namespace, mode: ColorMode) -> None:
    print(f"Session {controller.snapshot.session_id}. Empty line or Ctrl-D to quit.")
    while True:
        try:
            text = input("you> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not text:
            break
        try:
            run_turn(controller, text, args, mode)
        except TurnInProgressError as exc:
            print(f"[{exc}]", file=sys.stderr)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="geo-agent-viewer",
        description="Follow a geospatial agent's investigation: transcript, event timeline and map view.",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--simulate", action="store_true", help="Use the scripted simulator even if a backend is configured")
    common.add_argument("--color", choices=["auto", "always", "never"], default="auto", help="Color mode (default: auto)")
    common.add_argument("--live-events", action="store_true", help="Print events and text as they stream in")
    common.add_argument("--no-overlay", action="store_true", help="Skip fetching the boundary overlay")

    sub = parser.add_subparsers(dest="command", required=True)
    ask_cmd = sub.add_parser("ask", parents=[common], help="Run a single turn")
    ask_cmd.add_argument("text")
    sub.add_parser("demo", parents=[common], help="Run the three demo prompts in order")
    sub.add_parser("chat", parents=[common], help="Interactive session")

    args = parser.parse_args(argv)
    config = ViewerConfig.from_env()
    _configure_logging(config.log_level)

    mode = detect_color_mode(args.color)
    controller = _build_controller(config, args, mode)
    _install_abort_handler(controller)

    if args.command == "ask":
        ask(controller, args, mode)
    elif args.command == "demo":
        demo(controller, args, mode)
    elif args.command == "chat":
        chat(controller, args, mode)


if __name__ == "__main__":
    main()

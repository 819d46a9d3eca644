"""Console front end for the weather search controller."""
import argparse
import asyncio
import logging
import os
import signal
import sys
import threading
from typing import Optional, Tuple

from dotenv import load_dotenv

from controller import QueryController
from display import summary_lines, theme_name
from history_cache import HistoryCache
from kv_store import JsonFileStore
from navigator import ClearAction, DividerItem, HistoryItem, KEY_BACKSPACE, KEY_DOWN, KEY_ENTER, KEY_ESCAPE, KEY_UP
from openweather_geocoder import OpenWeatherGeocoder
from openweather_provider import OpenWeatherProvider
from query_state import ControllerState
from scheduler import AsyncioScheduler

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_STORE = os.path.join(BASE_DIR, "weather-orbit.json")
DEFAULT_LOG_FILE = os.path.join(BASE_DIR, "weather-orbit.log")

HELP_TEXT = """Type a place name to get suggestions, then:
  :down / :up     move the selection      :enter   activate selection or submit
  :esc            hide the list           :back    backspace on an empty query
  :submit         fetch the typed place   :pick N  click list item N
  :focus / :blur  focus or leave input    :click   click into the input
  :reset          clear the input         :clear   clear history
  :quit           exit"""

KEY_COMMANDS = {
    ":down": KEY_DOWN,
    ":up": KEY_UP,
    ":enter": KEY_ENTER,
    ":esc": KEY_ESCAPE,
    ":back": KEY_BACKSPACE,
}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser("Weather Orbit console")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--store", default=DEFAULT_STORE, help="JSON file holding history and last place")
    parser.add_argument("--timeout", type=int, default=10, help="HTTP timeout in seconds")
    parser.add_argument("--debounce", type=float, default=0.3, help="Seconds of quiet before suggestions are fetched")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.FileHandler(log_file)]
    if verbose:
        # stdout belongs to the console view
        handlers.append(logging.StreamHandler(sys.stderr))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers
    )


def load_config() -> Tuple[str, str]:
    load_dotenv()
    api_key = os.getenv("WEATHER_API_KEY")
    lang = os.getenv("WEATHER_LANG", "en")

    if not api_key:
        raise SystemExit("Missing WEATHER_API_KEY in environment")

    logging.info(f"Configuration loaded: lang={lang}")
    return api_key, lang


def build_controller(api_key: str, lang: str, args: argparse.Namespace, scheduler: AsyncioScheduler) -> QueryController:
    provider = OpenWeatherProvider(api_key=api_key, units="metric", lang=lang, timeout=args.timeout)
    geocoder = OpenWeatherGeocoder(api_key=api_key, timeout=args.timeout)
    history = HistoryCache(JsonFileStore(args.store))
    controller = QueryController(
        weather_provider=provider,
        place_lookup=geocoder,
        history=history,
        scheduler=scheduler,
        debounce_seconds=args.debounce,
    )
    logging.info(f"Controller ready (store={args.store}, debounce={args.debounce}s)")
    return controller


class ConsoleView:
    """Prints the parts of the controller state that changed since the last render."""

    def __init__(self, out=None):
        self.out = out or sys.stdout
        self._last: Optional[ControllerState] = None

    def write(self, text: str = "") -> None:
        print(text, file=self.out, flush=True)

    def render(self, state: ControllerState) -> None:
        last = self._last
        self._last = state

        if last is None or state.lifecycle != last.lifecycle:
            if state.lifecycle.is_loading:
                self.write("... Loading weather...")
            elif state.lifecycle.is_error:
                self.write(f"!! {state.lifecycle.message}")
            elif state.lifecycle.is_info:
                self.write(f"ii {state.lifecycle.message}")

        if last is None or state.placeholder != last.placeholder:
            if not state.query:
                self.write(f"[{state.placeholder}]")

        list_changed = last is None or (
            state.list_visible != last.list_visible
            or state.combined_list != last.combined_list
            or state.cursor != last.cursor
        )
        if state.show_empty_hint:
            if last is None or not last.show_empty_hint:
                self.write("   No recent searches")
        elif list_changed and state.list_visible:
            self._render_list(state)

        if state.snapshot is not None and (last is None or state.snapshot is not last.snapshot):
            self.write()
            for line in summary_lines(state.snapshot):
                self.write(f"   {line}")
            self.write(f"   ({theme_name(state.snapshot)})")
            self.write()

    def _render_list(self, state: ControllerState) -> None:
        for index, item in enumerate(state.combined_list):
            marker = ">" if index == state.cursor else " "
            if isinstance(item, DividerItem):
                self.write(f"  {marker} --- {item.label} ---")
            elif isinstance(item, ClearAction):
                self.write(f"{index:>2}{marker} [{item.label}]")
            elif isinstance(item, HistoryItem):
                self.write(f"{index:>2}{marker} {item.label} (recent)")
            else:
                self.write(f"{index:>2}{marker} {item.label}")


def handle_command(controller: QueryController, line: str, view: ConsoleView) -> bool:
    """Apply one console command. Returns False when the user wants to quit."""
    command, _, arg = line.strip().partition(" ")
    if command == ":quit":
        return False
    if command in KEY_COMMANDS:
        controller.on_key_down(KEY_COMMANDS[command])
    elif command == ":submit":
        controller.on_submit()
    elif command == ":reset":
        controller.on_reset()
    elif command == ":focus":
        controller.on_focus()
    elif command == ":blur":
        controller.on_blur()
    elif command == ":click":
        controller.on_click()
    elif command == ":clear":
        controller.clear_history()
        controller.show_info("History cleared")
    elif command == ":pick":
        items = controller.combined_list
        try:
            item = items[int(arg)]
        except (ValueError, IndexError):
            view.write(f"No list item {arg!r}")
            return True
        controller.on_select(item)
    else:
        view.write(HELP_TEXT)
    return True


def start_line_reader(loop: asyncio.AbstractEventLoop, stream=None) -> asyncio.Queue:
    """
    Read lines from stream on a daemon thread and hand them to the loop.

    A daemon thread does not keep the process alive, so shutdown never waits
    on a blocked readline. None is queued once the stream is exhausted.
    """
    if stream is None:
        stream = sys.stdin
    lines: asyncio.Queue = asyncio.Queue()

    def pump() -> None:
        try:
            for line in iter(stream.readline, ""):
                loop.call_soon_threadsafe(lines.put_nowait, line)
            loop.call_soon_threadsafe(lines.put_nowait, None)
        except RuntimeError:
            # loop already closed
            return

    threading.Thread(target=pump, name="console-input", daemon=True).start()
    return lines


async def console_loop(controller: QueryController, view: ConsoleView, lines: asyncio.Queue) -> None:
    view.write(HELP_TEXT)
    while True:
        line = await lines.get()
        if line is None:
            break
        line = line.rstrip("\n")
        if line.startswith(":"):
            if not handle_command(controller, line, view):
                break
        else:
            controller.on_input_change(line)


def signal_handler(signum, frame):
    logging.info(f"Received signal {signum}, shutting down")
    raise KeyboardInterrupt()


async def run(args: argparse.Namespace, api_key: str, lang: str) -> None:
    scheduler = AsyncioScheduler()
    controller = build_controller(api_key, lang, args, scheduler)
    view = ConsoleView()
    controller.add_listener(view.render)
    controller.start()
    view.render(controller.state)
    try:
        await console_loop(controller, view, start_line_reader(asyncio.get_running_loop()))
    finally:
        scheduler.cancel_all()


def main() -> None:
    args = parse_args()
    setup_logging(args.log_file, args.verbose)
    api_key, lang = load_config()

    signal.signal(signal.SIGTERM, signal_handler)

    try:
        asyncio.run(run(args, api_key, lang))
    except KeyboardInterrupt:
        logging.info("Stopping console")


if __name__ == "__main__":
    main()

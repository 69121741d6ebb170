"""Executable Textual app demonstrating jump beacons."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import Container
    from textual.widgets import Footer, Header, TextArea
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use jump_beacon.adapters.textual.app"
    ) from exc

from jump_beacon.host import CursorPosition
from jump_beacon.keymaps import DEFAULT_BINDINGS, ActionRef
from jump_beacon.plugin import JumpBeaconPlugin
from jump_beacon.runtime import telemetry

from .host import BEACON_LAYER, BeaconTextArea, TextualBeaconHost

# Terminals deliver ctrl+i as tab.
KEY_ALIASES = {"ctrl+i": "tab,ctrl+i"}


@dataclass
class DemoBuffer:
    name: str
    text: str
    cursor: tuple[int, int] = (0, 0)


def sample_buffer(name: str = "sample", lines: int = 400) -> DemoBuffer:
    body = "\n".join(
        f"{index:>4}  the quick brown fox jumps over the lazy dog"
        for index in range(1, lines + 1)
    )
    return DemoBuffer(name=name, text=body)


def load_buffers(paths: Sequence[str]) -> List[DemoBuffer]:
    buffers = [
        DemoBuffer(name=Path(path).name, text=Path(path).read_text(encoding="utf-8"))
        for path in paths
    ]
    return buffers or [sample_buffer("sample-a"), sample_buffer("sample-b", 120)]


class BeaconDemoApp(App[None]):
    """Text editor pane that flashes a beacon after large cursor jumps."""

    CSS = f"""
    #editor {{
        height: 1fr;
        layers: text {BEACON_LAYER};
    }}

    #editor > TextArea {{
        layer: text;
        height: 1fr;
    }}
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("ctrl+n", "next_buffer", "Next buffer", priority=True),
        Binding("ctrl+up", "goto_top", "Top", priority=True),
        Binding("ctrl+down", "goto_bottom", "Bottom", priority=True),
    ]

    def __init__(
        self,
        buffers: Optional[Sequence[DemoBuffer]] = None,
        *,
        options: Optional[Dict[str, Any]] = None,
        keys: Optional[Dict[str, Optional[str]]] = None,
    ) -> None:
        super().__init__()
        self.buffers: List[DemoBuffer] = list(buffers or [sample_buffer()])
        self.current = 0
        self.options = dict(options or {})
        self.keys = dict(keys or {})
        self.editor: BeaconTextArea | None = None
        self.host: TextualBeaconHost | None = None
        self.plugin: JumpBeaconPlugin | None = None
        self._installed_keys: set[str] = set()

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="editor"):
            self.editor = BeaconTextArea(
                self.buffers[self.current].text,
                click_observer=self._record_click,
                soft_wrap=False,
                show_line_numbers=True,
            )
            yield self.editor
        yield Footer()

    def on_mount(self) -> None:
        assert self.editor is not None
        self.host = TextualBeaconHost(self.editor)
        self.plugin = JumpBeaconPlugin(self.host)
        self.apply_options(self.options, keys=self.keys)
        self.sub_title = self.buffers[self.current].name
        self.editor.focus()

    def apply_options(
        self,
        options: Optional[Dict[str, Any]] = None,
        *,
        keys: Optional[Dict[str, Optional[str]]] = None,
    ) -> None:
        """Re-run plugin setup and bind any key the registry now uses."""

        if self.plugin is None:
            return
        self.plugin.setup(options, keys=keys)
        for binding in self.plugin.registry.iter_bindings():
            token = binding.key_signature
            if token in self._installed_keys:
                continue
            # App.bind() cannot make a priority binding; TextArea would eat these keys.
            self._bindings.bind(
                KEY_ALIASES.get(token, token),
                f"beacon_key({token!r})",
                binding.description,
                priority=True,
            )
            self._installed_keys.add(token)
        self.refresh_bindings()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        # Keys the registry dropped fall through to the editor.
        if action == "beacon_key":
            return self._bound_action(str(parameters[0])) is not None
        return True

    def on_unmount(self) -> None:
        if self.plugin is not None:
            self.plugin.shutdown()

    def on_text_area_selection_changed(self, event: TextArea.SelectionChanged) -> None:
        if self.plugin is None:
            return
        self.plugin.cursor_moved(CursorPosition.from_tuple(event.selection.end))

    def _record_click(self, event: events.MouseDown) -> None:
        if self.plugin is not None:
            self.plugin.mouse_pressed(event)

    def action_beacon_key(self, token: str) -> None:
        action = self._bound_action(token)
        if action is not None and self.plugin is not None:
            action(self.plugin)

    def _bound_action(self, token: str) -> ActionRef | None:
        if self.plugin is None:
            return None
        return self.plugin.registry.lookup(token)

    def action_goto_top(self) -> None:
        self._programmatic_jump(0)

    def action_goto_bottom(self) -> None:
        if self.editor is not None:
            self._programmatic_jump(self.editor.document.line_count - 1)

    def action_next_buffer(self) -> None:
        self.switch_buffer((self.current + 1) % len(self.buffers))

    def switch_buffer(self, index: int) -> None:
        editor = self.editor
        if editor is None or self.plugin is None or index == self.current:
            return
        self.buffers[self.current].cursor = editor.cursor_location
        self.current = index
        target = self.buffers[index]
        with editor.prevent(TextArea.SelectionChanged, TextArea.Changed):
            editor.load_text(target.text)
            editor.move_cursor(target.cursor)
        self.sub_title = target.name
        self.plugin.buffer_entered(CursorPosition.from_tuple(editor.cursor_location))

    def _programmatic_jump(self, line: int) -> None:
        if self.editor is None or self.host is None:
            return
        self.host.record_jump()
        self.editor.move_cursor((max(line, 0), 0))


def _env_int(key: str, fallback: int) -> int:
    value = os.environ.get(key)
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the jump beacon Textual demo.")
    parser.add_argument("paths", nargs="*", help="Files to open as buffers")
    parser.add_argument(
        "--min-jump",
        type=int,
        default=_env_int("JUMP_BEACON_MIN_JUMP", 10),
        help="Lines the cursor must travel to trigger a beacon (default: 10)",
    )
    parser.add_argument(
        "--fade-step",
        type=int,
        default=_env_int("JUMP_BEACON_FADE_STEP", 8),
        help="Transparency percent added per frame (default: 8)",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=_env_int("JUMP_BEACON_INTERVAL_MS", 50),
        help="Frame interval in milliseconds (default: 50)",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=_env_int("JUMP_BEACON_TIMEOUT_MS", 500),
        help="Maximum beacon lifetime in milliseconds (default: 500)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=_env_int("JUMP_BEACON_WIDTH", 40),
        help="Maximum beacon width in cells (default: 40)",
    )
    parser.add_argument(
        "--highlight",
        default=os.environ.get("JUMP_BEACON_HIGHLIGHT", "#FF6B6B"),
        help="Beacon colour (default: #FF6B6B)",
    )
    parser.add_argument(
        "--no-ignore-mouse",
        action="store_true",
        help="Also flash the beacon after mouse-driven jumps",
    )
    parser.add_argument(
        "--disabled",
        action="store_true",
        help="Start with beacons switched off (toggle with ctrl+t)",
    )
    parser.add_argument(
        "--bind",
        action="append",
        default=[],
        type=_key_override,
        metavar="BINDING=KEY",
        help="Move a beacon key, e.g. beacon.show=ctrl+g; an empty KEY unbinds it",
    )
    parser.add_argument(
        "--log-preset",
        choices=sorted(telemetry.PRESETS),
        default=os.environ.get("JUMP_BEACON_LOG_PRESET", "tui"),
        help="Telelog preset for the session (default: tui, which keeps the console clean)",
    )
    return parser.parse_args(argv)


def _key_override(raw: str) -> tuple[str, Optional[str]]:
    binding_id, sep, key = raw.partition("=")
    known = {binding.id for binding in DEFAULT_BINDINGS}
    if not sep or binding_id not in known:
        raise argparse.ArgumentTypeError(
            f"expected BINDING=KEY with BINDING one of {', '.join(sorted(known))}"
        )
    return binding_id, key.strip() or None


def options_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "min_jump": args.min_jump,
        "fade_step": args.fade_step,
        "interval_ms": args.interval,
        "timeout_ms": args.timeout,
        "max_width": args.width,
        "highlight": args.highlight,
        "ignore_mouse": not args.no_ignore_mouse,
        "enabled": not args.disabled,
    }


def keys_from_args(args: argparse.Namespace) -> Dict[str, Optional[str]]:
    return dict(args.bind)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset=args.log_preset)
    app = BeaconDemoApp(
        load_buffers(args.paths),
        options=options_from_args(args),
        keys=keys_from_args(args),
    )
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()

"""
Yogaflow - Yoga Sequence Player
Main entry point
"""
import argparse
import sys
from pathlib import Path
from typing import Optional, Tuple

from core.export import export_sequence_text, write_export
from core.models import PoseLibrary, Sequence
from core.persistence import SequenceStore
from core.sample_data import create_morning_flow, create_sample_library
from core.settings import load_settings
from playback.controller import PlaybackController
from playback.narration import ConsoleNarrator, NullNarrator
from playback.scheduler import PlaybackLoop


# Module-level variables (accessed by callbacks)
player_view = None


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="yogaflow", description="Play a yoga sequence.")
    parser.add_argument("sequence_id", nargs="?", help="ID of a stored sequence")
    parser.add_argument("--demo", action="store_true", help="Play the built-in Morning Flow sequence")
    parser.add_argument("--headless", action="store_true", help="Play in the terminal without a window")
    parser.add_argument("--export", metavar="PATH", help="Write a text outline to PATH (file or directory) and exit")
    parser.add_argument("--list", action="store_true", help="List stored sequence IDs and exit")
    parser.add_argument("--speed", type=float, help="Playback speed multiplier")
    parser.add_argument("--settings", metavar="PATH", help="Settings file (default ~/.yogaflow/settings.json)")
    return parser.parse_args(argv)


def resolve_sequence(store: SequenceStore, sequence_id: Optional[str],
                     demo: bool) -> Tuple[Optional[Sequence], PoseLibrary]:
    """
    Pick the sequence and pose library to play.

    Falls back to the demo sequence when no ID is given, and to the sample
    library when the store has none.

    Returns:
        (sequence or None if the ID is not stored, library)
    """
    library = store.load_library()
    if not library.variations:
        library = create_sample_library()

    if demo or sequence_id is None:
        return create_morning_flow(), library

    sequence = store.get(sequence_id)
    if sequence is None:
        print(f"[STORE] Sequence not found: {sequence_id}")
    return sequence, library


def run_headless(controller: PlaybackController, tick_interval: float) -> int:
    """Play to the end in the terminal. Ctrl+C stops playback."""
    loop = PlaybackLoop(controller, tick_interval=tick_interval)
    try:
        loop.run()
    except KeyboardInterrupt:
        loop.stop()
        controller.pause()
        print("[PLAYBACK] Interrupted")
    return 0


def run_player(controller: PlaybackController, sequence: Sequence, library: PoseLibrary,
               ui_scale: float) -> int:
    """Open the DearPyGui player window."""
    global player_view

    import dearpygui.dearpygui as dpg
    from ui.theme import apply_player_theme, apply_ui_scale
    from ui.views.PlayerView import PlayerView

    dpg.create_context()

    print(f"Applying UI scale: {ui_scale}x")
    apply_ui_scale(ui_scale)

    player_view = PlayerView(controller, sequence, library, on_close=on_exit)
    window_tag = player_view.create()
    apply_player_theme()

    dpg.create_viewport(title="Yogaflow", width=840, height=700)
    dpg.setup_dearpygui()
    dpg.show_viewport()
    dpg.set_primary_window(window_tag, True)

    print("Ready!")

    while dpg.is_dearpygui_running():
        player_view.update()
        dpg.render_dearpygui_frame()

        # Space toggles play/pause
        if hasattr(dpg, "mvKey_Spacebar") and dpg.is_key_pressed(dpg.mvKey_Spacebar):
            controller.toggle()

    controller.reset()
    dpg.destroy_context()
    print("Yogaflow closed.")
    return 0


def on_exit():
    """Exit application."""
    print("[EXIT] Closing Yogaflow")
    import dearpygui.dearpygui as dpg
    dpg.stop_dearpygui()


def main(argv=None) -> int:
    """Launch Yogaflow."""
    args = parse_args(argv)

    print("=== Yogaflow ===")
    settings = load_settings(Path(args.settings) if args.settings else None)
    playback_settings = settings["playback"]

    store = SequenceStore(settings["storage"]["store_dir"])

    if args.list:
        for sequence_id in store.list_ids():
            print(sequence_id)
        return 0

    sequence, library = resolve_sequence(store, args.sequence_id, args.demo)
    if sequence is None:
        return 1

    if args.export:
        try:
            path = write_export(sequence, args.export, library)
        except IOError as e:
            print(f"[EXPORT] {e}")
            return 1
        print(f"[EXPORT] Wrote {path}")
        return 0

    narrator = ConsoleNarrator() if playback_settings.get("narration_enabled", True) else NullNarrator()
    speed = args.speed if args.speed is not None else playback_settings["speed"]
    try:
        controller = PlaybackController(sequence, narrator=narrator, library=library, speed=speed)
    except ValueError as e:
        print(f"[PLAYBACK] {e}")
        return 2

    if args.headless:
        print(export_sequence_text(sequence, library))
        return run_headless(controller, playback_settings["tick_interval"])

    return run_player(controller, sequence, library, settings["video"]["ui_scale"])


if __name__ == "__main__":
    sys.exit(main())

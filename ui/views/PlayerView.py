"""
Player view for Yogaflow.
Plays a sequence with transport controls, progress and the current pose.
"""
import math

import dearpygui.dearpygui as dpg
from typing import Optional, Callable, Dict

from core.constants import SPEED_OPTIONS
from core.durations import format_duration
from core.export import export_sequence_text, step_name
from core.models import PoseLibrary, Sequence
from playback.controller import PlaybackController, PlaybackSnapshot, PlaybackState


def speed_label(speed: float) -> str:
    """Combo label for a speed multiplier, e.g. "1.5x"."""
    return f"{speed:g}x"


def describe_snapshot(snapshot: PlaybackSnapshot, controller: PlaybackController,
                      library: Optional[PoseLibrary] = None) -> Dict[str, str]:
    """
    Text shown by the player for a snapshot.

    Returns:
        Dict with "pose", "remaining", "clock" and "button" labels
    """
    active = controller.active_interval
    if active is not None:
        pose = step_name(active.pose_step, library)
        remaining = format_duration(math.ceil(snapshot.active_remaining))
    elif snapshot.state == PlaybackState.FINISHED:
        pose = "Namaste"
        remaining = ""
    else:
        pose = "Ready"
        remaining = ""

    clock = f"{format_duration(int(snapshot.elapsed))} / {format_duration(snapshot.total)}"
    button = "Pause" if snapshot.state == PlaybackState.PLAYING else "Play"
    return {"pose": pose, "remaining": remaining, "clock": clock, "button": button}


class PlayerView:
    """
    Player window.

    Shows:
    - Sequence name and outline
    - Current pose and time left in it
    - Progress bar (click to seek)
    - Play/Pause, Reset and speed selector
    """

    def __init__(self, controller: PlaybackController, sequence: Sequence,
                 library: Optional[PoseLibrary] = None,
                 on_close: Optional[Callable] = None):
        """
        Args:
            controller: Playback controller to drive
            sequence: Sequence being played (for the outline)
            library: Pose library for pose names
            on_close: Callback when "Close" clicked (optional)
        """
        self.controller = controller
        self.sequence = sequence
        self.library = library
        self.on_close = on_close
        self._window_tag = "player_window"
        controller.add_listener(self._on_snapshot)

    def create(self) -> str:
        """
        Create the player window.

        Returns:
            Window tag
        """
        from ui.theme import create_play_button_theme, create_reset_button_theme, create_active_pose_theme

        with dpg.window(label="Yogaflow", width=760, height=620, pos=(40, 40),
                        tag=self._window_tag, no_scrollbar=True):
            dpg.add_text(self.sequence.name.upper(), color=(86, 156, 132, 255))
            dpg.add_separator()
            dpg.add_spacer(height=10)

            pose_text = dpg.add_text("Ready", tag="player_pose_text")
            dpg.bind_item_theme(pose_text, create_active_pose_theme())
            dpg.add_text("", tag="player_remaining_text")
            dpg.add_spacer(height=10)

            dpg.add_progress_bar(default_value=0.0, width=-1, tag="player_progress")
            with dpg.item_handler_registry(tag="player_progress_handlers"):
                dpg.add_item_clicked_handler(callback=self._on_progress_clicked)
            dpg.bind_item_handler_registry("player_progress", "player_progress_handlers")
            dpg.add_text("00:00 / 00:00", tag="player_clock_text", color=(150, 152, 156, 255))
            dpg.add_spacer(height=10)

            with dpg.group(horizontal=True):
                play_btn = dpg.add_button(label="Play", width=120, height=40,
                                          tag="player_play_btn",
                                          callback=lambda: self.controller.toggle())
                dpg.bind_item_theme(play_btn, create_play_button_theme())

                reset_btn = dpg.add_button(label="Reset", width=120, height=40,
                                           callback=lambda: self.controller.reset())
                dpg.bind_item_theme(reset_btn, create_reset_button_theme())

                dpg.add_combo(
                    items=[speed_label(s) for s in SPEED_OPTIONS],
                    default_value=speed_label(self.controller.speed),
                    width=100,
                    tag="player_speed_combo",
                    callback=self._on_speed_changed,
                )

                if self.on_close:
                    dpg.add_button(label="Close", width=100, height=40,
                                   callback=lambda: self.on_close())

            dpg.add_spacer(height=10)
            with dpg.child_window(height=-1, width=-1):
                dpg.add_text(export_sequence_text(self.sequence, self.library),
                             tag="player_outline_text")

        self._refresh(self.controller.snapshot())
        return self._window_tag

    def set_sequence(self, sequence: Sequence):
        """Show an edited sequence and keep the playback position."""
        self.sequence = sequence
        self.controller.load(sequence)
        if dpg.does_item_exist("player_outline_text"):
            dpg.set_value("player_outline_text", export_sequence_text(sequence, self.library))

    def update(self):
        """
        Called every frame. Ticks the controller while playing.
        """
        self.controller.tick()

    def _on_snapshot(self, snapshot: PlaybackSnapshot):
        self._refresh(snapshot)

    def _refresh(self, snapshot: PlaybackSnapshot):
        if not dpg.does_item_exist(self._window_tag):
            return
        labels = describe_snapshot(snapshot, self.controller, self.library)
        dpg.set_value("player_pose_text", labels["pose"])
        dpg.set_value("player_remaining_text", labels["remaining"])
        dpg.set_value("player_clock_text", labels["clock"])
        dpg.set_value("player_progress", snapshot.progress_fraction)
        dpg.configure_item("player_play_btn", label=labels["button"])

    def _on_speed_changed(self, sender, app_data):
        self.controller.set_speed(float(app_data.rstrip("x")))

    def _on_progress_clicked(self, sender, app_data):
        """Seek to the clicked position on the progress bar."""
        min_x, _ = dpg.get_item_rect_min("player_progress")
        width, _ = dpg.get_item_rect_size("player_progress")
        if width <= 0:
            return
        mouse_x, _ = dpg.get_mouse_pos(local=False)
        fraction = min(max((mouse_x - min_x) / width, 0.0), 1.0)
        self.controller.seek(fraction * self.controller.total)

    def show(self):
        """Show the player window."""
        if dpg.does_item_exist(self._window_tag):
            dpg.show_item(self._window_tag)

    def hide(self):
        """Hide the player window."""
        if dpg.does_item_exist(self._window_tag):
            dpg.hide_item(self._window_tag)

    def destroy(self):
        """Destroy the player window."""
        self.controller.remove_listener(self._on_snapshot)
        if dpg.does_item_exist(self._window_tag):
            dpg.delete_item(self._window_tag)

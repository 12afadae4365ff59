"""
Dark theme for the Yogaflow player.
Provides color palette and DearPyGui theme configuration.
"""
import dearpygui.dearpygui as dpg


class StudioDark:
    """Player color constants."""

    # Background colors
    BG_WINDOW = (28, 30, 34, 255)          # #1C1E22 - Main window background
    BG_PANEL = (40, 43, 48, 255)           # #282B30 - Outline panel
    BG_INPUT = (58, 62, 68, 255)           # #3A3E44 - Combo/progress track
    BG_HOVER = (48, 52, 58, 255)           # #30343A - Hover state

    BORDER = (58, 62, 68, 255)

    # Text colors
    TEXT_PRIMARY = (220, 220, 216, 255)    # #DCDCD8 - Primary text
    TEXT_SECONDARY = (150, 152, 156, 255)  # #96989C - Secondary text
    TEXT_ACTIVE_POSE = (240, 220, 160, 255)  # #F0DCA0 - Current pose name

    # Accent colors
    ACCENT = (86, 156, 132, 255)           # #569C84 - Progress bar, sliders
    ACCENT_HOVER = (102, 176, 150, 255)
    ACCENT_ACTIVE = (72, 136, 114, 255)

    # Status colors
    PLAY = (80, 160, 80, 255)              # #50A050 - Play
    RESET = (200, 90, 80, 255)             # #C85A50 - Reset

    BUTTON_NORMAL = (58, 62, 68, 255)
    BUTTON_HOVER = (70, 74, 80, 255)
    BUTTON_ACTIVE = (82, 86, 92, 255)

    # Spacing
    FRAME_PADDING = (10, 6)
    ITEM_SPACING = (8, 6)
    WINDOW_PADDING = (16, 16)


def apply_player_theme() -> None:
    """
    Apply the dark theme to DearPyGui.
    Call this once after the windows are created.
    """
    with dpg.theme() as global_theme:
        with dpg.theme_component(dpg.mvAll):
            dpg.add_theme_color(dpg.mvThemeCol_WindowBg, StudioDark.BG_WINDOW)
            dpg.add_theme_color(dpg.mvThemeCol_ChildBg, StudioDark.BG_PANEL)
            dpg.add_theme_color(dpg.mvThemeCol_PopupBg, StudioDark.BG_PANEL)
            dpg.add_theme_color(dpg.mvThemeCol_Border, StudioDark.BORDER)
            dpg.add_theme_color(dpg.mvThemeCol_FrameBg, StudioDark.BG_INPUT)
            dpg.add_theme_color(dpg.mvThemeCol_FrameBgHovered, StudioDark.BG_HOVER)

            dpg.add_theme_color(dpg.mvThemeCol_Text, StudioDark.TEXT_PRIMARY)

            dpg.add_theme_color(dpg.mvThemeCol_Button, StudioDark.BUTTON_NORMAL)
            dpg.add_theme_color(dpg.mvThemeCol_ButtonHovered, StudioDark.BUTTON_HOVER)
            dpg.add_theme_color(dpg.mvThemeCol_ButtonActive, StudioDark.BUTTON_ACTIVE)

            dpg.add_theme_color(dpg.mvThemeCol_PlotHistogram, StudioDark.ACCENT)
            dpg.add_theme_color(dpg.mvThemeCol_SliderGrab, StudioDark.ACCENT)
            dpg.add_theme_color(dpg.mvThemeCol_SliderGrabActive, StudioDark.ACCENT_HOVER)

            dpg.add_theme_style(dpg.mvStyleVar_FramePadding, StudioDark.FRAME_PADDING[0], StudioDark.FRAME_PADDING[1])
            dpg.add_theme_style(dpg.mvStyleVar_ItemSpacing, StudioDark.ITEM_SPACING[0], StudioDark.ITEM_SPACING[1])
            dpg.add_theme_style(dpg.mvStyleVar_WindowPadding, StudioDark.WINDOW_PADDING[0], StudioDark.WINDOW_PADDING[1])
            dpg.add_theme_style(dpg.mvStyleVar_FrameRounding, 4)
            dpg.add_theme_style(dpg.mvStyleVar_GrabRounding, 4)

    dpg.bind_theme(global_theme)


def apply_ui_scale(scale: float) -> None:
    """Scale all fonts (settings "video.ui_scale")."""
    dpg.set_global_font_scale(scale)


def _button_theme(normal, hover, active) -> int:
    with dpg.theme() as theme:
        with dpg.theme_component(dpg.mvButton):
            dpg.add_theme_color(dpg.mvThemeCol_Button, normal)
            dpg.add_theme_color(dpg.mvThemeCol_ButtonHovered, hover)
            dpg.add_theme_color(dpg.mvThemeCol_ButtonActive, active)
            dpg.add_theme_color(dpg.mvThemeCol_Text, (255, 255, 255, 255))
    return theme


def create_play_button_theme() -> int:
    """
    Create play/pause button theme (green).

    Returns:
        Theme tag that can be bound to buttons
    """
    return _button_theme(StudioDark.PLAY, (90, 180, 90, 255), (70, 140, 70, 255))


def create_reset_button_theme() -> int:
    """
    Create reset button theme (red).

    Returns:
        Theme tag that can be bound to buttons
    """
    return _button_theme(StudioDark.RESET, (215, 105, 95, 255), (180, 75, 65, 255))


def create_active_pose_theme() -> int:
    """Text theme for the pose currently being held."""
    with dpg.theme() as theme:
        with dpg.theme_component(dpg.mvText):
            dpg.add_theme_color(dpg.mvThemeCol_Text, StudioDark.TEXT_ACTIVE_POSE)
    return theme

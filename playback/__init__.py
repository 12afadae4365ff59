"""
Playback layer for Yogaflow.

Modules:
- controller: Playback state machine over a flattened timeline
- scheduler: Wall-clock tick loop driving the controller
- narration: Narrator interface and pose name announcements
"""

"""
Core data structures and sequence logic for Yogaflow.

Modules:
- models: Immutable data structures (PoseStep, GroupBlock, Section, Sequence, etc.)
- durations: Duration string parsing and formatting
- aggregator: Total durations for any sequence node
- timeline: Flattening a sequence into timed intervals
- commands: Command pattern for sequence edits
- templates: Copying template sections with fresh IDs
- export: Plain-text export
- persistence: Sequence document store (.flow format)
- settings: User settings
- sample_data: Demo pose library, sequence and template
- constants: Shared constants (speeds, file format, discriminants)
"""

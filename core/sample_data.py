"""
Sample data for Yogaflow.

Provides a small pose library, a demo sequence and a starter template, used
by the player's demo mode and by tests.
"""
from typing import Tuple

from core.models import (
    GroupBlock,
    Pose,
    PoseLibrary,
    PoseStep,
    PoseVariation,
    RoundOverride,
    Section,
    Sequence,
)


def create_sample_library() -> PoseLibrary:
    """
    Create the demo pose library.

    Returns:
        Library with four poses and their variations
    """
    poses = (
        Pose(id="pose-1", name="Mountain Pose"),
        Pose(id="pose-2", name="Downward Dog"),
        Pose(id="pose-3", name="Warrior I"),
        Pose(id="pose-4", name="Child's Pose"),
    )
    variations = (
        PoseVariation(id="var-1", pose_id="pose-1", name="Mountain Pose (Default)", is_default=True),
        PoseVariation(id="var-2a", pose_id="pose-2", name="Downward Dog (Default)", is_default=True),
        PoseVariation(id="var-2b", pose_id="pose-2", name="with Bent Knees"),
        PoseVariation(id="var-3", pose_id="pose-3", name="Warrior I (Default)", is_default=True),
        PoseVariation(id="var-3b", pose_id="pose-3", name="with Arms Extended"),
        PoseVariation(id="var-4", pose_id="pose-4", name="Child's Pose (Default)", is_default=True),
    )
    return PoseLibrary(poses=poses, variations=variations)


def create_morning_flow() -> Sequence:
    """
    Create the "Morning Flow" demo sequence.

    Warm Up: Mountain Pose, then 3 rounds of Downward Dog / Child's Pose with
    a bent-knee Downward Dog ending on round 3.
    Standing Series: Warrior I, then Warrior I with arms extended.

    Returns:
        Sequence totalling 07:15 (435 seconds)
    """
    warm_up_block = GroupBlock(
        id="group-block-1",
        sets=3,
        items=(
            PoseStep(id="pose-instance-2", pose_variation_id="var-2a", duration_seconds=45),
            PoseStep(id="pose-instance-3", pose_variation_id="var-4", duration_seconds=30),
        ),
        round_overrides=(
            RoundOverride(
                round=3,
                items=(
                    PoseStep(id="pose-instance-4", pose_variation_id="var-2b", duration_seconds=60),
                ),
            ),
        ),
    )

    warm_up = Section(
        id="section-1",
        name="Warm Up",
        items=(
            PoseStep(id="pose-instance-1", pose_variation_id="var-1", duration_seconds=30),
            warm_up_block,
        ),
    )

    standing = Section(
        id="section-2",
        name="Standing Series",
        items=(
            PoseStep(id="pose-instance-5", pose_variation_id="var-3", duration_seconds=60),
            PoseStep(id="pose-instance-6", pose_variation_id="var-3b", duration_seconds=60),
        ),
    )

    return Sequence(id="seq-1", name="Morning Flow", sections=(warm_up, standing))


def create_default_template() -> Tuple[Section, ...]:
    """
    Create the starter template for new sequences.

    Copy it with core.templates.sequence_from_template before use so the new
    sequence gets its own IDs.
    """
    integration = Section(
        id="template-integration",
        name="Integration",
        items=(
            PoseStep(id="template-step-1", pose_variation_id="var-1", duration_seconds=30),
            PoseStep(id="template-step-2", pose_variation_id="var-4", duration_seconds=60),
            GroupBlock(
                id="template-block-1",
                sets=5,
                items=(
                    PoseStep(id="template-step-3", pose_variation_id="var-2a", duration_seconds=3),
                    PoseStep(id="template-step-4", pose_variation_id="var-1", duration_seconds=3),
                ),
            ),
        ),
    )
    flow = Section(
        id="template-flow",
        name="Flow",
        items=(
            GroupBlock(
                id="template-block-2",
                sets=2,
                items=(
                    PoseStep(id="template-step-5", pose_variation_id="var-3", duration_seconds=45),
                    PoseStep(id="template-step-6", pose_variation_id="var-2a", duration_seconds=30),
                ),
                round_overrides=(
                    RoundOverride(
                        round=2,
                        items=(
                            PoseStep(id="template-step-7", pose_variation_id="var-4", duration_seconds=30),
                        ),
                    ),
                ),
            ),
        ),
    )
    cool_down = Section(
        id="template-cool-down",
        name="Cool Down",
        items=(
            PoseStep(id="template-step-8", pose_variation_id="var-4", duration_seconds=120),
        ),
    )
    return (integration, flow, cool_down)

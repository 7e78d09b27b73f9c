"""
Value objects passed between the pipeline stages.

Frames and snapshots are immutable. PhaseEvent is the one exception: its
duration is filled in when the next transition happens.
"""
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from ..config.landmarks import NUM_LANDMARKS


# ========================================
# POSE INPUT
# ========================================

@dataclass(frozen=True)
class Keypoint:
    """One tracked landmark in a single frame."""
    index: int
    x: float
    y: float
    z: float
    visibility: float = 1.0
    presence: float = 1.0

    @property
    def position(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def with_position(self, x, y, z):
        """Copy with new coordinates, confidence scores unchanged."""
        return replace(self, x=x, y=y, z=z)

    def to_dict(self) -> dict:
        return {
            'index': self.index,
            'x': self.x,
            'y': self.y,
            'z': self.z,
            'visibility': self.visibility,
            'presence': self.presence,
        }


@dataclass(frozen=True)
class PoseFrame:
    """Exactly 33 keypoints in landmark order plus a capture timestamp (seconds)."""
    keypoints: Tuple[Keypoint, ...]
    timestamp: float

    def __post_init__(self):
        object.__setattr__(self, 'keypoints', tuple(self.keypoints))
        if len(self.keypoints) != NUM_LANDMARKS:
            raise ValueError(
                f"PoseFrame requires {NUM_LANDMARKS} keypoints, got {len(self.keypoints)}"
            )
        for position, kp in enumerate(self.keypoints):
            if kp.index != position:
                raise ValueError(
                    f"Keypoint at position {position} has index {kp.index}"
                )

    def __getitem__(self, idx):
        return self.keypoints[idx]

    def __len__(self):
        return len(self.keypoints)

    @classmethod
    def from_array(cls, array, timestamp):
        """
        Build a frame from an array of shape (33, 3), (33, 4) or (33, 5).

        Columns are x, y, z and optionally visibility and presence.
        Missing confidence columns default to 1.0.
        """
        data = np.asarray(array, dtype=float)
        if data.ndim != 2 or data.shape[1] not in (3, 4, 5):
            raise ValueError(
                f"Expected an array of shape ({NUM_LANDMARKS}, 3-5), got {data.shape}"
            )
        keypoints = []
        for idx, row in enumerate(data):
            visibility = row[3] if len(row) > 3 else 1.0
            presence = row[4] if len(row) > 4 else 1.0
            keypoints.append(Keypoint(
                idx, float(row[0]), float(row[1]), float(row[2]),
                float(visibility), float(presence)
            ))
        return cls(tuple(keypoints), float(timestamp))

    @classmethod
    def from_landmarks(cls, landmarks, timestamp):
        """
        Build a frame from MediaPipe-style landmark objects.

        Any sequence of objects exposing x, y, z and visibility works, e.g.
        ``results.pose_world_landmarks.landmark``. Landmarks without a
        presence score get 1.0.
        """
        keypoints = tuple(
            Keypoint(
                idx, lm.x, lm.y, lm.z,
                lm.visibility,
                getattr(lm, 'presence', 1.0)
            )
            for idx, lm in enumerate(landmarks)
        )
        return cls(keypoints, float(timestamp))

    def to_array(self):
        """(33, 5) array of x, y, z, visibility, presence."""
        return np.array([
            [kp.x, kp.y, kp.z, kp.visibility, kp.presence]
            for kp in self.keypoints
        ])


# ========================================
# METRICS
# ========================================

@dataclass(frozen=True)
class MetricsSnapshot:
    """
    One frame's derived measurements.

    Angles are in degrees, heights in meters and velocities in m/s once the
    extractor is calibrated. Any field may be None when the landmarks it
    needs were not visible.
    """
    timestamp: float
    left_knee_flexion: Optional[float] = None
    right_knee_flexion: Optional[float] = None
    left_elbow_angle: Optional[float] = None
    right_elbow_angle: Optional[float] = None
    shoulder_rotation: Optional[float] = None
    hip_rotation: Optional[float] = None
    left_wrist_height: Optional[float] = None
    right_wrist_height: Optional[float] = None
    right_wrist_velocity: Optional[float] = None
    left_wrist_velocity: Optional[float] = None

    @property
    def hip_shoulder_separation(self) -> Optional[float]:
        if self.shoulder_rotation is None or self.hip_rotation is None:
            return None
        return abs(self.shoulder_rotation - self.hip_rotation)

    @property
    def contact_height(self) -> Optional[float]:
        # Right-handed server: contact is the right wrist
        return self.right_wrist_height

    @property
    def is_valid(self) -> bool:
        return any(value is not None for value in (
            self.left_knee_flexion,
            self.right_knee_flexion,
            self.hip_shoulder_separation,
            self.contact_height,
            self.right_wrist_velocity,
        ))

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'left_knee_flexion': self.left_knee_flexion,
            'right_knee_flexion': self.right_knee_flexion,
            'left_elbow_angle': self.left_elbow_angle,
            'right_elbow_angle': self.right_elbow_angle,
            'shoulder_rotation': self.shoulder_rotation,
            'hip_rotation': self.hip_rotation,
            'hip_shoulder_separation': self.hip_shoulder_separation,
            'left_wrist_height': self.left_wrist_height,
            'right_wrist_height': self.right_wrist_height,
            'contact_height': self.contact_height,
            'right_wrist_velocity': self.right_wrist_velocity,
            'left_wrist_velocity': self.left_wrist_velocity,
            'is_valid': self.is_valid,
        }


# ========================================
# PHASES
# ========================================

class ServePhase(str, Enum):
    """Serve motion phases, cycling in declaration order."""
    PREPARATION = "preparation"
    LOADING = "loading"
    CONTACT = "contact"
    FOLLOW_THROUGH = "follow_through"

    @property
    def display_name(self) -> str:
        return _PHASE_DISPLAY_NAMES[self]

    @property
    def next_phase(self) -> 'ServePhase':
        members = list(ServePhase)
        return members[(members.index(self) + 1) % len(members)]


_PHASE_DISPLAY_NAMES = {
    ServePhase.PREPARATION: "Preparation",
    ServePhase.LOADING: "Loading",
    ServePhase.CONTACT: "Contact",
    ServePhase.FOLLOW_THROUGH: "Follow Through",
}


@dataclass
class PhaseEvent:
    """
    A phase transition.

    ``duration`` is how long this phase lasted; it stays None until the next
    transition backfills it.
    """
    phase: ServePhase
    timestamp: float
    metrics: MetricsSnapshot
    duration: Optional[float] = None
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> dict:
        return {
            'event_id': self.event_id,
            'phase': self.phase.value,
            'timestamp': self.timestamp,
            'duration': self.duration,
            'metrics': self.metrics.to_dict(),
        }


# ========================================
# FEEDBACK
# ========================================

class FeedbackSeverity(str, Enum):
    """Assessment tiers, ordered from best to worst."""
    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(FeedbackSeverity).index(self)

    @property
    def is_problem(self) -> bool:
        return self in (FeedbackSeverity.WARNING, FeedbackSeverity.CRITICAL)


class FeedbackCategory(str, Enum):
    KNEE_FLEXION = "knee_flexion"
    HIP_SHOULDER_SEPARATION = "hip_shoulder_separation"
    CONTACT_HEIGHT = "contact_height"
    WRIST_VELOCITY = "wrist_velocity"
    ELBOW_ANGLE = "elbow_angle"
    TORSO_ROTATION = "torso_rotation"
    OVERALL = "overall"

    @property
    def display_name(self) -> str:
        return _CATEGORY_DISPLAY_NAMES[self]


_CATEGORY_DISPLAY_NAMES = {
    FeedbackCategory.KNEE_FLEXION: "Knee Flexion",
    FeedbackCategory.HIP_SHOULDER_SEPARATION: "Hip-Shoulder Separation",
    FeedbackCategory.CONTACT_HEIGHT: "Contact Height",
    FeedbackCategory.WRIST_VELOCITY: "Wrist Velocity",
    FeedbackCategory.ELBOW_ANGLE: "Elbow Angle",
    FeedbackCategory.TORSO_ROTATION: "Torso Rotation",
    FeedbackCategory.OVERALL: "Overall",
}


@dataclass(frozen=True)
class FeedbackItem:
    severity: FeedbackSeverity
    category: FeedbackCategory
    message: str
    actionable: str
    timestamp: float
    impact: Optional[str] = None
    current_value: Optional[float] = None
    ideal_range: Optional[str] = None

    @property
    def formatted_message(self) -> str:
        """Message, suggestion, impact and measured-vs-ideal on separate lines."""
        lines = [self.message, f"→ {self.actionable}"]
        if self.impact:
            lines.append(f"Impact: {self.impact}")
        if self.current_value is not None and self.ideal_range:
            lines.append(f"Current: {self.current_value:.1f} | Ideal: {self.ideal_range}")
        return "\n".join(lines)

    @property
    def short_message(self) -> str:
        return f"{self.category.display_name}: {self.severity.value}"

    def to_dict(self) -> dict:
        return {
            'severity': self.severity.value,
            'category': self.category.value,
            'message': self.message,
            'actionable': self.actionable,
            'impact': self.impact,
            'current_value': self.current_value,
            'ideal_range': self.ideal_range,
            'timestamp': self.timestamp,
        }


@dataclass(frozen=True)
class QualityAnalysis:
    """Quality of one completed serve cycle. Scores are 0-100 or None."""
    loading_metrics: MetricsSnapshot
    contact_metrics: MetricsSnapshot
    total_duration: float
    loading_quality: Optional[float] = None
    contact_quality: Optional[float] = None
    overall_quality: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            'loading_metrics': self.loading_metrics.to_dict(),
            'contact_metrics': self.contact_metrics.to_dict(),
            'total_duration': self.total_duration,
            'loading_quality': self.loading_quality,
            'contact_quality': self.contact_quality,
            'overall_quality': self.overall_quality,
        }

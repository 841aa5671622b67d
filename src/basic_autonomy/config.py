"""Configuration models for waypoint generation."""

from enum import Enum
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from basic_autonomy.types import DEFAULT_CONTROLLER_PLUGIN


class TrajectoryType(str, Enum):
    """Trajectory categories."""

    INLANECRUISING = "inlanecruising"
    COOPERATIVE_LANECHANGE = "cooperative_lanechange"


class CurveFitMethod(str, Enum):
    """Curve fitting strategies."""

    CUBIC_SPLINE = "cubic_spline"
    BSPLINE = "bspline"


class GeneralTrajConfig(BaseModel):
    """Trajectory category and route sampling configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    trajectory_type: TrajectoryType = Field(..., description="Trajectory category")
    default_downsample_ratio: int = Field(
        1, ge=1, description="Keep every n-th sampled route point"
    )
    turn_downsample_ratio: int = Field(
        1, ge=1, description="Keep every n-th sampled point on turn lanelets"
    )


class DetailedTrajConfig(BaseModel):
    """Kinematic limits and smoothing parameters."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    trajectory_time_length: float = Field(..., gt=0, description="Look-ahead time horizon [s]")
    curve_resample_step_size: float = Field(
        ..., gt=0, description="Spacing of samples taken along the fitted curve [m]"
    )
    minimum_speed: float = Field(..., ge=0, description="Lower speed clamp [m/s]")
    max_accel: float = Field(..., gt=0, description="Maximum longitudinal acceleration [m/s^2]")
    lateral_accel_limit: float = Field(
        ..., gt=0, description="Maximum lateral acceleration in curves [m/s^2]"
    )
    speed_moving_average_window_size: int = Field(
        1, ge=1, description="Moving average window for speed limits"
    )
    curvature_moving_average_window_size: int = Field(
        1, ge=1, description="Moving average window for curvatures"
    )
    back_distance: float = Field(0.0, ge=0, description="Look-back distance for stitching [m]")
    buffer_ending_downtrack: float = Field(
        0.0, ge=0, description="Extra geometry past the last maneuver end [m]"
    )
    max_speed: float | None = Field(None, gt=0, description="Upper speed clamp [m/s]")
    desired_controller_plugin: str = Field(
        DEFAULT_CONTROLLER_PLUGIN, description="Controller plugin executing the trajectory"
    )
    curve_fit_method: CurveFitMethod = Field(
        CurveFitMethod.CUBIC_SPLINE, description="Curve fitting strategy"
    )
    lanechange_blend: Literal["linear", "smoothstep"] = Field(
        "linear", description="Weight profile blending the two lane centerlines"
    )

    @model_validator(mode="after")
    def _check_speed_bounds(self) -> "DetailedTrajConfig":
        if self.max_speed is not None and self.max_speed < self.minimum_speed:
            raise ValueError("max_speed must not be smaller than minimum_speed")
        return self


class WaypointGenerationConfig(BaseModel):
    """Top level configuration file layout."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    general: GeneralTrajConfig
    detailed: DetailedTrajConfig

    @classmethod
    def from_yaml(cls, path: str | Path) -> "WaypointGenerationConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML file

        Returns:
            WaypointGenerationConfig instance
        """
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls(**data)


def compose_general_trajectory_config(
    trajectory_type: str | TrajectoryType,
    default_downsample_ratio: int,
    turn_downsample_ratio: int,
) -> GeneralTrajConfig:
    """Build a GeneralTrajConfig from positional values."""
    return GeneralTrajConfig(
        trajectory_type=TrajectoryType(trajectory_type),
        default_downsample_ratio=default_downsample_ratio,
        turn_downsample_ratio=turn_downsample_ratio,
    )


def compose_detailed_trajectory_config(
    trajectory_time_length: float,
    curve_resample_step_size: float,
    minimum_speed: float,
    max_accel: float,
    lateral_accel_limit: float,
    speed_moving_average_window_size: int,
    curvature_moving_average_window_size: int,
    back_distance: float,
    buffer_ending_downtrack: float,
    desired_controller_plugin: str = DEFAULT_CONTROLLER_PLUGIN,
) -> DetailedTrajConfig:
    """Build a DetailedTrajConfig from positional values.

    Raises:
        pydantic.ValidationError: If any value is out of range
    """
    return DetailedTrajConfig(
        trajectory_time_length=trajectory_time_length,
        curve_resample_step_size=curve_resample_step_size,
        minimum_speed=minimum_speed,
        max_accel=max_accel,
        lateral_accel_limit=lateral_accel_limit,
        speed_moving_average_window_size=speed_moving_average_window_size,
        curvature_moving_average_window_size=curvature_moving_average_window_size,
        back_distance=back_distance,
        buffer_ending_downtrack=buffer_ending_downtrack,
        desired_controller_plugin=desired_controller_plugin,
    )

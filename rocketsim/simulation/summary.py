"""Flight performance summary.

Reduces a FlightResult to headline numbers (apogee, peak speed, Mach and
acceleration, flight time, impact speed) and formats a text report.

Example:
    >>> from rocketsim.simulation import FlightSummary, format_flight_summary
    >>>
    >>> summary = FlightSummary.from_result(result)
    >>> print(format_flight_summary(result))
"""

from dataclasses import asdict, dataclass

import numpy as np
from beartype import beartype

from rocketsim.environment.gravity import G0
from rocketsim.simulation.simulator import FlightOutcome, FlightResult


@beartype
@dataclass(frozen=True)
class FlightSummary:
    """Headline numbers of a flight.

    Attributes:
        apogee: Highest altitude reached [m]
        apogee_time: Time of the highest altitude [s]
        max_speed: Peak speed [m/s]
        max_mach: Peak Mach number
        max_acceleration: Peak acceleration magnitude [m/s^2]
        max_acceleration_g: Peak acceleration in standard g
        flight_time: Time of the last state [s]
        impact_speed: Speed at landing [m/s], None if the flight did not land
        downrange: Horizontal distance from the pad at the last state [m]
        outcome: How the run ended
        target_apogee: Mission target apogee [m], if any
    """
    apogee: float
    apogee_time: float
    max_speed: float
    max_mach: float
    max_acceleration: float
    max_acceleration_g: float
    flight_time: float
    impact_speed: float | None
    downrange: float
    outcome: FlightOutcome
    target_apogee: float | None = None

    @classmethod
    def from_result(cls, result: FlightResult) -> "FlightSummary":
        """Compute the summary of a flight."""
        altitude = result.altitude
        time = result.time
        acceleration = result.acceleration
        i_apogee = int(np.argmax(altitude))
        final = result.final_state
        max_acc = float(acceleration.max())

        return cls(
            apogee=float(altitude[i_apogee]),
            apogee_time=float(time[i_apogee]),
            max_speed=float(result.speed.max()),
            max_mach=float(result.mach.max()),
            max_acceleration=max_acc,
            max_acceleration_g=max_acc / G0,
            flight_time=final.time,
            impact_speed=final.speed if result.completed else None,
            downrange=float(np.hypot(final.position[0], final.position[1])),
            outcome=result.outcome,
            target_apogee=result.mission.target_apogee,
        )

    @property
    def apogee_error(self) -> float | None:
        """Apogee minus target [m], None without a target."""
        if self.target_apogee is None:
            return None
        return self.apogee - self.target_apogee

    def to_dict(self) -> dict:
        """Plain dictionary form for JSON export."""
        data = asdict(self)
        data["outcome"] = self.outcome.value
        return data


@beartype
def format_flight_summary(result: FlightResult, sample_interval: float = 10.0) -> str:
    """Format a flight as a readable report.

    Args:
        result: Completed flight
        sample_interval: Spacing of the trajectory table rows [s]

    Returns:
        Formatted multi-line string
    """
    mission = result.mission
    summary = FlightSummary.from_result(result)

    lines = [
        f"{'=' * 60}",
        f"FLIGHT SUMMARY: {mission.name}",
        f"Controller: {result.controller_name}",
        f"Outcome: {result.outcome.value.upper()}",
        f"{'=' * 60}",
        "",
        "VEHICLE:",
        f"  {'Stage':<16}{'Wet [kg]':>10}{'Dry [kg]':>10}{'Thrust [N]':>12}{'Isp [s]':>9}{'Burn [s]':>10}",
    ]
    for stage in mission.stages:
        lines.append(
            f"  {stage.name:<16}{stage.wet_mass:>10.1f}{stage.dry_mass:>10.1f}"
            f"{stage.thrust:>12.0f}{stage.isp:>9.0f}{stage.burn_time:>10.2f}"
        )
    lines.extend([
        f"  Lift-off mass:     {mission.total_mass:.1f} kg",
        f"  Ideal delta-v:     {mission.total_delta_v:.0f} m/s",
        "",
        "EVENTS:",
    ])
    for event in result.events:
        lines.append(
            f"  T+{event.time:8.2f} s  {event.describe():<32} "
            f"alt {event.altitude:9.1f} m  v {event.speed:7.1f} m/s"
        )

    lines.extend([
        "",
        "PERFORMANCE:",
        f"  Apogee:            {summary.apogee:.1f} m at T+{summary.apogee_time:.2f} s",
        f"  Max speed:         {summary.max_speed:.1f} m/s (Mach {summary.max_mach:.2f})",
        f"  Max acceleration:  {summary.max_acceleration:.1f} m/s^2 ({summary.max_acceleration_g:.1f} g)",
        f"  Flight time:       {summary.flight_time:.2f} s",
        f"  Downrange:         {summary.downrange:.1f} m",
    ])
    if summary.impact_speed is not None:
        lines.append(f"  Impact speed:      {summary.impact_speed:.1f} m/s")
    if summary.apogee_error is not None:
        lines.append(
            f"  Target apogee:     {summary.target_apogee:.1f} m ({summary.apogee_error:+.1f} m)"
        )

    lines.extend([
        "",
        "TRAJECTORY:",
        f"  {'t [s]':>8}{'alt [m]':>11}{'v [m/s]':>10}{'Mach':>7}{'pitch':>8}{'mass':>8}{'stg':>5}",
    ])
    next_sample = 0.0
    for sample in result.samples():
        if sample.time + 1e-9 < next_sample:
            continue
        next_sample = sample.time + sample_interval
        lines.append(
            f"  {sample.time:>8.1f}{sample.altitude:>11.1f}{sample.speed:>10.1f}"
            f"{sample.mach:>7.2f}{np.degrees(sample.pitch):>8.1f}{sample.mass:>8.2f}"
            f"{sample.stage_index:>5d}"
        )

    if result.aborted:
        lines.extend(["", "ABORTED:", f"  {result.abort_reason}"])

    if result.faults:
        lines.extend(["", "FAULTS:"])
        for fault in result.faults:
            lines.append(f"  {fault}")

    lines.append(f"{'=' * 60}")

    return "\n".join(lines)

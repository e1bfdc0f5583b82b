"""Quaternion utilities.

Conventions:
- Scalar-first: q = [q0, q1, q2, q3] where q0 is the scalar part
- Vehicle attitude quaternions rotate body-frame vectors into the
  inertial frame: v_inertial = quaternion_to_dcm(q) @ v_body
"""

import numpy as np
from beartype import beartype
from numpy.typing import NDArray


@beartype
def normalize_quaternion(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Normalize a quaternion to unit length."""
    norm = np.linalg.norm(q)
    if norm < 1e-10:
        return np.array([1.0, 0.0, 0.0, 0.0])
    return q / norm


@beartype
def quaternion_multiply(q1: NDArray[np.float64], q2: NDArray[np.float64]) -> NDArray[np.float64]:
    """Multiply two quaternions (Hamilton product).

    Args:
        q1: First quaternion [q0, q1, q2, q3]
        q2: Second quaternion [q0, q1, q2, q3]

    Returns:
        Product quaternion q1 * q2
    """
    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2

    return np.array([
        w1*w2 - x1*x2 - y1*y2 - z1*z2,
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2,
    ])


@beartype
def quaternion_conjugate(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Compute quaternion conjugate (inverse for unit quaternions)."""
    return np.array([q[0], -q[1], -q[2], -q[3]])


@beartype
def quaternion_to_dcm(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rotation matrix of a quaternion.

    Args:
        q: Quaternion [q0, q1, q2, q3] rotating frame A vectors into frame B

    Returns:
        3x3 matrix R with v_B = R @ v_A
    """
    q0, q1, q2, q3 = normalize_quaternion(q)

    return np.array([
        [1 - 2*(q2**2 + q3**2), 2*(q1*q2 - q0*q3), 2*(q1*q3 + q0*q2)],
        [2*(q1*q2 + q0*q3), 1 - 2*(q1**2 + q3**2), 2*(q2*q3 - q0*q1)],
        [2*(q1*q3 - q0*q2), 2*(q2*q3 + q0*q1), 1 - 2*(q1**2 + q2**2)],
    ])


@beartype
def axis_angle_quaternion(axis: NDArray[np.float64], angle: float) -> NDArray[np.float64]:
    """Quaternion for a right-handed rotation of `angle` [rad] about `axis`."""
    axis = axis / np.linalg.norm(axis)
    half = 0.5 * angle
    return np.array([np.cos(half), *(np.sin(half) * axis)])


@beartype
def rotate_vector(q: NDArray[np.float64], v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rotate a 3-vector by a quaternion (q ⊗ v ⊗ q*)."""
    return quaternion_to_dcm(q) @ v

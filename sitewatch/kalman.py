"""Constant-velocity Kalman filter over (x, y, aspect ratio, height) boxes."""

from __future__ import annotations

from typing import Sequence

import numpy as np

# 0.95 quantile of the chi-square distribution for 1..9 degrees of freedom.
CHI2INV95 = (
    0.0,
    3.8415,
    5.9915,
    7.8147,
    9.4877,
    11.070,
    12.592,
    14.067,
    15.507,
    16.919,
)

_NDIM = 4
_DT = 1.0


class KalmanFilter:
    """Tracks a box as an 8-dimensional state: centre, aspect, height and their velocities."""

    chi2inv95 = CHI2INV95

    def __init__(self) -> None:
        self._motion_mat = np.eye(2 * _NDIM)
        for i in range(_NDIM):
            self._motion_mat[i, _NDIM + i] = _DT
        self._update_mat = np.eye(_NDIM, 2 * _NDIM)
        self._std_weight_position = 1.0 / 20
        self._std_weight_velocity = 1.0 / 160

    def initiate(self, measurement: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
        """Create a track state from an unassociated (x, y, a, h) measurement."""
        measurement = np.asarray(measurement, dtype=float)
        mean = np.concatenate([measurement, np.zeros(_NDIM)])
        height = measurement[3]
        std = np.array(
            [
                2 * self._std_weight_position * height,
                2 * self._std_weight_position * height,
                1e-2,
                2 * self._std_weight_position * height,
                10 * self._std_weight_velocity * height,
                10 * self._std_weight_velocity * height,
                1e-5,
                10 * self._std_weight_velocity * height,
            ]
        )
        return mean, np.diag(np.square(std))

    def predict(self, mean: np.ndarray, covariance: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Run the prediction step and return the new mean and covariance."""
        mean = np.asarray(mean, dtype=float)
        covariance = np.asarray(covariance, dtype=float)
        height = mean[3]
        std_pos = [
            self._std_weight_position * height,
            self._std_weight_position * height,
            1e-2,
            self._std_weight_position * height,
        ]
        std_vel = [
            self._std_weight_velocity * height,
            self._std_weight_velocity * height,
            1e-5,
            self._std_weight_velocity * height,
        ]
        motion_cov = np.diag(np.square(np.concatenate([std_pos, std_vel])))
        new_mean = self._motion_mat @ mean
        new_covariance = self._motion_mat @ covariance @ self._motion_mat.T + motion_cov
        return new_mean, new_covariance

    def project(self, mean: np.ndarray, covariance: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Project the state distribution into measurement space."""
        mean = np.asarray(mean, dtype=float)
        covariance = np.asarray(covariance, dtype=float)
        height = mean[3]
        std = np.array(
            [
                self._std_weight_position * height,
                self._std_weight_position * height,
                1e-1,
                self._std_weight_position * height,
            ]
        )
        projected_mean = self._update_mat @ mean
        projected_cov = self._update_mat @ covariance @ self._update_mat.T + np.diag(np.square(std))
        return projected_mean, projected_cov

    def update(
        self, mean: np.ndarray, covariance: np.ndarray, measurement: Sequence[float]
    ) -> tuple[np.ndarray, np.ndarray]:
        """Run the correction step against a measurement and return the new state."""
        mean = np.asarray(mean, dtype=float)
        covariance = np.asarray(covariance, dtype=float)
        projected_mean, projected_cov = self.project(mean, covariance)

        b = (covariance @ self._update_mat.T).T
        kalman_gain = np.linalg.solve(projected_cov, b).T
        innovation = np.asarray(measurement, dtype=float) - projected_mean

        new_mean = mean + innovation @ kalman_gain.T
        new_covariance = covariance - kalman_gain @ projected_cov @ kalman_gain.T
        return new_mean, new_covariance

    def gating_distance(
        self,
        mean: np.ndarray,
        covariance: np.ndarray,
        measurements: Sequence[Sequence[float]],
        only_position: bool = False,
    ) -> np.ndarray:
        """Squared distance between the projected state and each measurement."""
        if only_position:
            raise ValueError("gating on position only is not supported")
        projected_mean, projected_cov = self.project(mean, covariance)
        d = np.asarray(measurements, dtype=float).reshape(-1, _NDIM) - projected_mean
        factor = np.linalg.cholesky(projected_cov)
        # Solve z * L = d for z, one row per measurement.
        z = np.linalg.solve(factor.T, d.T)
        return np.sum(z * z, axis=0)
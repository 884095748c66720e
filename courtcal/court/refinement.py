"""
Homography refinement – Nelder-Mead polish of the DLT solution.

The DLT minimises an algebraic error. This optimiser starts from that
solution and minimises the weighted mean reprojection distance in
native pixels directly, over the 8 free entries of the world → image
matrix. Single deterministic start; the DLT result is returned
unchanged unless the polish strictly improves the error.
"""
from __future__ import annotations
import numpy as np
from scipy.optimize import minimize

from ..models.calibration import Homography
import config


class HomographyRefiner:
    """Refines a solved homography against its own point pairs."""

    def __init__(self, max_iter: int = config.REFINE_MAX_ITER):
        self.max_iter = max_iter

    def refine(
        self,
        homography: Homography,
        img: np.ndarray,
        world: np.ndarray,
        weights: np.ndarray,
        dims: np.ndarray,
    ) -> Homography:
        """
        Args:
            img:     (N, 2) normalised image points
            world:   (N, 2) world points in metres
            weights: (N,)   per-pair weights
            dims:    (N, 2) native (width, height) per pair
        """
        x0 = homography.inverse.flatten()[:8]
        base_cost = self._cost(x0, img, world, weights, dims)

        result = minimize(
            lambda p: self._cost(p, img, world, weights, dims),
            x0.astype(np.float64),
            method="Nelder-Mead",
            options={
                "maxiter": self.max_iter,
                "xatol": 1e-10,
                "fatol": 1e-9,
                "adaptive": True,
            },
        )
        if not np.isfinite(result.fun) or result.fun >= base_cost:
            return homography

        inverse = np.append(result.x, 1.0).reshape(3, 3)
        try:
            refined = Homography.from_matrix(np.linalg.inv(inverse))
        except (ValueError, np.linalg.LinAlgError):
            return homography
        return refined

    @staticmethod
    def _cost(params, img, world, weights, dims) -> float:
        M = np.append(params, 1.0).reshape(3, 3)
        homog = np.hstack([world, np.ones((len(world), 1))]) @ M.T
        denom = homog[:, 2:3]
        if np.any(np.abs(denom) < 1e-12):
            return float("inf")
        proj = homog[:, :2] / denom
        err = np.linalg.norm((proj - img) * dims, axis=1)
        return float(np.sum(weights * err) / np.sum(weights))

# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2019 Radio Astronomy Software Group
# Licensed under the 3-clause BSD License

import numpy as np

from .utils import InvalidParameterError, check_finite

# -----------------------
# Rigid rotations of antenna positions and lattice coordinates.
# -----------------------

_AXES = ('x', 'y', 'z')


def rotation_matrix(angle, axis='z'):
    """
    Rotation matrix for a right-handed rotation by angle (radians) about one coordinate axis.

    Args:
        angle : float, rotation angle [radians]
        axis : str, one of 'x', 'y', 'z'

    Returns:
        matrix : (3, 3) ndarray
    """
    check_finite("rotation angle", angle)
    if axis not in _AXES:
        raise InvalidParameterError("Rotation axis must be one of x, y, z, not " + str(axis))

    cosa, sina = np.cos(angle), np.sin(angle)
    i = _AXES.index(axis)
    j, k = [a for a in range(3) if a != i]

    matrix = np.eye(3)
    matrix[j, j] = cosa
    matrix[j, k] = -sina
    matrix[k, j] = sina
    matrix[k, k] = cosa
    # keep the handedness consistent for the y axis (z -> x)
    if axis == 'y':
        matrix[j, k], matrix[k, j] = sina, -sina

    return matrix


def transform_points(matrix, x, y, z=None):
    """
    Apply a 3x3 matrix to N points.

    Missing z coordinates are taken as zero, so a planar layout comes back as 3D points.

    Returns:
        x, y, z : ndarrays of shape (N,), in the dtype of the input x
    """
    x = np.asarray(x)
    y = np.asarray(y)
    dtype = x.dtype if np.issubdtype(x.dtype, np.floating) else np.float64
    if z is None:
        z = np.zeros(x.shape, dtype=dtype)
    z = np.asarray(z)
    if not x.shape == y.shape == z.shape:
        raise InvalidParameterError("Point coordinate arrays must have the same shape.")

    m = np.asarray(matrix, dtype=dtype)
    xr = m[0, 0] * x + m[0, 1] * y + m[0, 2] * z
    yr = m[1, 0] * x + m[1, 1] * y + m[1, 2] * z
    zr = m[2, 0] * x + m[2, 1] * y + m[2, 2] * z

    return xr.astype(dtype, copy=False), yr.astype(dtype, copy=False), zr.astype(dtype, copy=False)


def rotate_points(angle, x, y, z=None, axis='z'):
    """
    Rotate points rigidly by angle (radians) about the given axis.

    A zero angle returns the input coordinates unchanged, bit for bit.
    """
    if angle != 0:
        return transform_points(rotation_matrix(angle, axis), x, y, z)
    if axis not in _AXES:
        raise InvalidParameterError("Rotation axis must be one of x, y, z, not " + str(axis))

    x = np.asarray(x)
    dtype = x.dtype if np.issubdtype(x.dtype, np.floating) else np.float64
    if z is None:
        z = np.zeros(x.shape, dtype=dtype)
    x, y, z = [np.array(a, dtype=dtype) for a in (x, y, z)]
    if not x.shape == y.shape == z.shape:
        raise InvalidParameterError("Point coordinate arrays must have the same shape.")
    return x, y, z

# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2019 Radio Astronomy Software Group
# Licensed under the 3-clause BSD License

import os
import numpy as np
from scipy.spatial.distance import pdist

from .utils import (InvalidParameterError, ConstraintUnsatisfiableError,
                    check_positive, check_buffers)

# -----------------------
# Antenna layout generators.
#   Every generator has a two-phase interface: count() gives the number of
#   elements, generate(x, y) fills caller-allocated buffers of at least that size.
# -----------------------


class ArrayLayout(object):
    """
    Base class for antenna layout generators.

    Subclasses implement _walk(), which returns an (N, 2) array of positions
    in metres. It must be deterministic so that count() and generate() agree.
    """

    def _walk(self):
        raise NotImplementedError

    def count(self):
        """Number of antenna positions generate() will write."""
        return len(self._walk())

    def generate(self, x, y):
        """
        Fill x and y with the antenna positions.

        Args:
            x, y : writable 1D arrays with length >= count()

        Returns:
            Number of positions written.
        """
        pos = self._walk()
        Nants = len(pos)
        check_buffers(Nants, x, y)
        x[:Nants] = pos[:, 0]
        y[:Nants] = pos[:, 1]
        return Nants

    def positions(self, dtype=np.float64):
        """
        Run both phases and return read-only (x, y) arrays.
        """
        Nants = self.count()
        x = np.zeros(Nants, dtype=dtype)
        y = np.zeros(Nants, dtype=dtype)
        self.generate(x, y)
        x.flags.writeable = False
        y.flags.writeable = False
        return x, y


class RegularGrid(ArrayLayout):
    """
    Square n x n grid of antennas centred on the origin.

    Parameters
    ----------
    n: int
        Number of elements per side.
    sep: float
        Separation between neighbouring elements, in metres.
    """

    def __init__(self, n, sep):
        check_positive(n=n, sep=sep)
        if int(n) != n:
            raise InvalidParameterError("Grid size must be an integer, got {}".format(n))
        self.n = int(n)
        self.sep = float(sep)

    def count(self):
        return self.n ** 2

    def _walk(self):
        half = (self.n - 1) * self.sep / 2.0
        offsets = np.arange(self.n) * self.sep - half
        # element i = y + x * n
        gx, gy = np.meshgrid(offsets, offsets, indexing='ij')
        return np.column_stack((gx.ravel(), gy.ravel()))


class PerturbedCircular(ArrayLayout):
    """
    Randomly perturbed grid of antennas filling a circular aperture.

    Nominal positions lie on a regular grid centred on the origin. Each node is
    visited row by row and moved by a uniform random error; it is dropped if it
    lands outside the aperture, and redrawn if it lands closer than min_sep to an
    element already placed. The random sequence is seeded once and consumed in
    visiting order, so the same parameters always give the same layout.

    Parameters
    ----------
    seed: int
        Random seed, must be positive.
    radius: float
        Aperture radius in metres.
    xs, ys: float
        Nominal grid separations along x and y, in metres.
    xe, ye: float
        Maximum placement error along x and y, in metres.
    min_sep: float
        Minimum allowed distance between two elements, in metres.
        Defaults to half the smaller nominal separation.
    max_attempts: int
        Number of draws allowed per node before giving up.
    """

    def __init__(self, seed, radius, xs, ys, xe, ye, min_sep=None, max_attempts=100):
        check_positive(seed=seed, radius=radius, xs=xs, ys=ys)
        if int(seed) != seed:
            raise InvalidParameterError("Seed must be an integer, got {}".format(seed))
        if min_sep is None:
            min_sep = min(xs, ys) / 2.0
        for name, val in [('xe', xe), ('ye', ye), ('min_sep', min_sep)]:
            if not np.isfinite(val) or val < 0:
                raise InvalidParameterError("{} must be non-negative, got {}".format(name, val))
        if max_attempts < 1:
            raise InvalidParameterError("max_attempts must be at least 1")

        self.seed = int(seed)
        self.radius = float(radius)
        self.xs, self.ys = float(xs), float(ys)
        self.xe, self.ye = float(xe), float(ye)
        self.min_sep = float(min_sep)
        self.max_attempts = int(max_attempts)

    def grid_shape(self):
        """Number of nominal grid nodes along (x, y)."""
        nx = int(np.floor(2 * self.radius / self.xs)) + 1
        ny = int(np.floor(2 * self.radius / self.ys)) + 1
        return nx, ny

    def _walk(self):
        rng = np.random.default_rng(self.seed)
        nx, ny = self.grid_shape()
        x0 = (nx - 1) * self.xs / 2.0
        y0 = (ny - 1) * self.ys / 2.0
        r2 = self.radius ** 2
        s2 = self.min_sep ** 2

        placed = np.zeros((nx * ny, 2))
        Nants = 0
        for iy in range(ny):
            for ix in range(nx):
                for attempt in range(self.max_attempts):
                    ex, ey = rng.uniform(-1.0, 1.0, 2)
                    px = ix * self.xs - x0 + self.xe * ex
                    py = iy * self.ys - y0 + self.ye * ey
                    if px ** 2 + py ** 2 > r2:
                        break   # outside the aperture, node dropped
                    if Nants > 0:
                        d2 = (placed[:Nants, 0] - px) ** 2 + (placed[:Nants, 1] - py) ** 2
                        if d2.min() < s2:
                            continue
                    placed[Nants] = px, py
                    Nants += 1
                    break
                else:
                    raise ConstraintUnsatisfiableError(
                        "Could not place grid node ({:d}, {:d}) at least {:.3f} m from its neighbours "
                        "in {:d} attempts".format(ix, iy, self.min_sep, self.max_attempts))

        return placed[:Nants]


def min_separation(x, y):
    """
    Smallest distance between any two antennas (inf for fewer than two).
    """
    pos = np.column_stack((np.asarray(x, dtype=float), np.asarray(y, dtype=float)))
    if len(pos) < 2:
        return np.inf
    return pdist(pos).min()


def write_layout(filename, x, y, history=None, clobber=False):
    """
    Write antenna positions as fixed-width text, one "x y" record per antenna.
    """
    if os.path.exists(filename) and not clobber:
        raise ValueError("File {} exists and clobber is False.".format(filename))
    header = '' if history is None else history
    np.savetxt(filename, np.column_stack((x, y)), fmt='%12.3f%12.3f', header=header)


def read_layout(filename):
    """
    Read antenna positions written by write_layout.

    Returns:
        x, y : 1D float ndarrays [metres]
    """
    if not os.path.exists(filename):
        raise ValueError("File {} not found.".format(filename))
    data = np.loadtxt(filename, ndmin=2)
    if data.shape[1] < 2:
        raise ValueError("Layout file {} must have at least two columns.".format(filename))
    return data[:, 0], data[:, 1]

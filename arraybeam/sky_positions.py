# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2019 Radio Astronomy Software Group
# Licensed under the 3-clause BSD License

import warnings
from enum import IntEnum

import numpy as np

from .rotation import rotate_points
from .utils import InvalidParameterError, check_positive, check_finite, check_buffers

# -----------------------
# Sky sample positions.
#   Lays out a regular lattice of (longitude, latitude) directions over a
#   rectangular sector or a hemisphere. Same count()/generate() protocol as
#   the layout generators.
# -----------------------

# Tolerance for lattice edges, so that a half-width that is a whole number of
# spacings keeps its end points despite rounding.
_EPS = 1e-9


class Projection(IntEnum):
    """
    Map from lattice coordinates to the sphere.

    NONE adds the lattice offsets to the centre longitude and latitude.
    SIN, TAN and ARC treat the offsets as coordinates in the orthographic,
    gnomonic or zenithal equidistant plane tangent to the sphere at the centre.
    """
    NONE = 0
    SIN = 1
    TAN = 2
    ARC = 3

    @classmethod
    def parse(cls, value):
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise InvalidParameterError("Unknown projection: " + value)
        try:
            return cls(value)
        except ValueError:
            raise InvalidParameterError("Unknown projection: " + str(value))


def _axis_offsets(half_width, spacing, centre_point=False):
    """
    Lattice offsets along one axis.

    By default there are floor(2 * half_width / spacing) + 1 points placed
    symmetrically about zero. With centre_point the lattice is anchored at zero
    instead, giving 2 * floor(half_width / spacing) + 1 points.
    """
    if centre_point:
        m = int(np.floor(half_width / spacing + _EPS))
        return np.arange(-m, m + 1) * spacing
    n = int(np.floor(2 * half_width / spacing + _EPS)) + 1
    return (np.arange(n) - (n - 1) / 2.0) * spacing


def deproject(x, y, lon0, lat0, projection):
    """
    Map tangent-plane lattice coordinates around (lon0, lat0) onto the sphere.

    Args:
        x, y : ndarrays, lattice offsets [radians] along longitude and latitude
        lon0, lat0 : float, centre of the lattice [radians]
        projection : Projection

    Returns:
        lon, lat : ndarrays [radians]
        valid : bool ndarray, False where the point has no image on the sphere
    """
    projection = Projection.parse(projection)
    if projection == Projection.NONE:
        lat = lat0 + y
        valid = np.abs(lat) <= np.pi / 2 + _EPS
        return lon0 + x, lat, valid

    r = np.hypot(x, y)
    if projection == Projection.SIN:
        valid = r <= 1.0 + _EPS
        theta = np.arcsin(np.clip(r, 0.0, 1.0))
    elif projection == Projection.TAN:
        valid = np.ones(r.shape, dtype=bool)
        theta = np.arctan(r)
    else:
        valid = r <= np.pi + _EPS
        theta = r
    # position angle, zero towards increasing latitude
    phi = np.arctan2(x, y)

    sin_t, cos_t = np.sin(theta), np.cos(theta)
    sin_lat0, cos_lat0 = np.sin(lat0), np.cos(lat0)
    lat = np.arcsin(np.clip(sin_lat0 * cos_t + cos_lat0 * sin_t * np.cos(phi), -1.0, 1.0))
    lon = lon0 + np.arctan2(sin_t * np.sin(phi), cos_lat0 * cos_t - sin_lat0 * sin_t * np.cos(phi))

    return lon, lat, valid


class SkyPositions(object):
    """
    Regular lattice of sky directions.

    Parameters
    ----------
    center_lon, center_lat: float
        Centre of the lattice, radians.
    half_width_lon, half_width_lat: float
        Half-widths of the sector along each axis, radians.
    spacing_lon, spacing_lat: float
        Lattice spacing along each axis, radians. Clipped to the half-width.
    rho: float
        Rotation of the lattice about its centre, radians.
    centre_point: bool
        Anchor the lattice on the centre so that the centre is always a sample.
    above_horizon: bool
        Drop samples with negative latitude.
    mirror: str or None
        'lon' or 'lat': reflect the lattice across that axis.
    projection: Projection, str or int
        Map from lattice coordinates to the sphere.
    """

    def __init__(self, center_lon, center_lat, half_width_lon, half_width_lat,
                 spacing_lon, spacing_lat, rho=0.0, centre_point=False,
                 above_horizon=False, mirror=None, projection=Projection.NONE):
        check_positive(half_width_lon=half_width_lon, half_width_lat=half_width_lat,
                       spacing_lon=spacing_lon, spacing_lat=spacing_lat)
        check_finite("lattice centre", center_lon, center_lat, rho)
        if mirror not in (None, 'lon', 'lat'):
            raise InvalidParameterError("mirror must be None, 'lon' or 'lat', not " + str(mirror))
        self.projection = Projection.parse(projection)

        if spacing_lon > half_width_lon:
            warnings.warn("Longitude spacing exceeds the half-width; clipping it to the half-width.")
            spacing_lon = half_width_lon
        if spacing_lat > half_width_lat:
            warnings.warn("Latitude spacing exceeds the half-width; clipping it to the half-width.")
            spacing_lat = half_width_lat

        self.center_lon = center_lon
        self.center_lat = center_lat
        self.half_width_lon = half_width_lon
        self.half_width_lat = half_width_lat
        self.spacing_lon = spacing_lon
        self.spacing_lat = spacing_lat
        self.rho = rho
        self.centre_point = centre_point
        self.above_horizon = above_horizon
        self.mirror = mirror

    @classmethod
    def hemisphere(cls, spacing_lon, spacing_lat, **kwargs):
        """
        Lattice covering the whole sky above the horizon.
        """
        kwargs.setdefault('above_horizon', True)
        return cls(np.pi, np.pi / 4, np.pi, np.pi / 4, spacing_lon, spacing_lat, **kwargs)

    def lattice_shape(self):
        """Number of lattice points along (lat, lon) before any samples are dropped."""
        return (_axis_offsets(self.half_width_lat, self.spacing_lat, self.centre_point).size,
                _axis_offsets(self.half_width_lon, self.spacing_lon, self.centre_point).size)

    def _walk(self):
        lon_off = _axis_offsets(self.half_width_lon, self.spacing_lon, self.centre_point)
        lat_off = _axis_offsets(self.half_width_lat, self.spacing_lat, self.centre_point)

        # outer loop over latitude rows, inner loop over longitude
        dy, dx = np.meshgrid(lat_off, lon_off, indexing='ij')
        x, y, _ = rotate_points(self.rho, dx.ravel(), dy.ravel())
        if self.mirror == 'lon':
            x = -x
        elif self.mirror == 'lat':
            y = -y

        lon, lat, valid = deproject(x, y, self.center_lon, self.center_lat, self.projection)
        if self.above_horizon:
            valid &= lat >= -_EPS

        return lon[valid], lat[valid]

    def count(self):
        """Number of sky samples generate() will write."""
        return self._walk()[0].size

    def generate(self, lon, lat):
        """
        Fill lon and lat with the sample directions [radians].

        Only the first count() elements of each buffer are written, so a caller can
        reserve extra slots for fixed points by passing slices.

        Returns:
            Number of samples written.
        """
        slon, slat = self._walk()
        Nsamples = slon.size
        check_buffers(Nsamples, lon, lat)
        lon[:Nsamples] = slon
        lat[:Nsamples] = slat
        return Nsamples

    def positions(self, dtype=np.float64):
        """
        Run both phases and return (lon, lat) arrays.
        """
        Nsamples = self.count()
        lon = np.zeros(Nsamples, dtype=dtype)
        lat = np.zeros(Nsamples, dtype=dtype)
        self.generate(lon, lat)
        return lon, lat

# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2019 Radio Astronomy Software Group
# Licensed under the 3-clause BSD License

import numpy as np
import pytest

from arraybeam import sky_positions, utils
from arraybeam.sky_positions import SkyPositions, Projection
import arraybeam.tests as simtest


def test_axis_counts():
    # floor(2W/S) + 1 points per axis
    for W, S in [(1.0, 0.25), (1.0, 0.3), (0.5, 0.5), (0.75, 0.2)]:
        pos = SkyPositions(0.0, 0.0, W, W / 2, S, S / 2)
        nlat, nlon = pos.lattice_shape()
        assert nlon == int(np.floor(2 * W / S)) + 1
        assert nlat == int(np.floor(2 * (W / 2) / (S / 2))) + 1
        assert pos.count() == nlat * nlon


def test_count_matches_generate():
    pos = SkyPositions(0.0, np.radians(50), np.radians(30), np.radians(30),
                       np.radians(0.5), np.radians(0.5))
    Ns = pos.count()
    lon = np.zeros(Ns)
    lat = np.zeros(Ns)
    assert pos.generate(lon, lat) == Ns
    lon2, lat2 = pos.positions()
    assert lon2.size == Ns
    assert np.all(lon == lon2) and np.all(lat == lat2)

    # repeated generation gives the same ordering
    lon3, lat3 = pos.positions()
    assert lon3.tobytes() == lon2.tobytes()

    simtest.assert_raises_message(utils.BufferTooSmallError, 'required', pos.generate,
                                  np.zeros(Ns - 1), np.zeros(Ns))


def test_lattice_order_and_symmetry():
    pos = SkyPositions(1.0, 0.2, 0.2, 0.1, 0.1, 0.1)
    lon, lat = pos.positions()
    assert pos.lattice_shape() == (3, 5)
    # latitude is the outer loop, longitude the inner loop
    assert np.allclose(lat[:5], 0.1)
    assert np.allclose(lon[:5], [0.8, 0.9, 1.0, 1.1, 1.2])
    # centred on the given direction
    assert np.isclose(lon.mean(), 1.0)
    assert np.isclose(lat.mean(), 0.2)


def test_spacing_clipped():
    with pytest.warns(UserWarning, match="clipping"):
        pos = SkyPositions(0.0, 0.0, 0.1, 0.1, 0.5, 0.05)
    assert pos.spacing_lon == 0.1
    assert pos.lattice_shape() == (5, 3)


def test_centre_point():
    # 2W/S = 2 * 1.0 / 0.4 = 5 -> 6 points, centre not included
    pos = SkyPositions(0.5, 0.5, 1.0, 0.2, 0.4, 0.2)
    lon, lat = pos.positions()
    assert not np.any(np.isclose(lon, 0.5) & np.isclose(lat, 0.5))

    pos = SkyPositions(0.5, 0.5, 1.0, 0.2, 0.4, 0.2, centre_point=True)
    lon, lat = pos.positions()
    assert pos.lattice_shape() == (3, 5)
    assert np.any(np.isclose(lon, 0.5) & np.isclose(lat, 0.5))


def test_rho_and_mirror():
    base = SkyPositions(0.0, 0.0, 0.2, 0.1, 0.1, 0.1)
    lon0, lat0 = base.positions()

    # quarter-turn of the lattice swaps the axes
    lon, lat = SkyPositions(0.0, 0.0, 0.2, 0.1, 0.1, 0.1, rho=np.pi / 2).positions()
    assert np.allclose(lon, -lat0)
    assert np.allclose(lat, lon0)

    lon, lat = SkyPositions(0.0, 0.0, 0.2, 0.1, 0.1, 0.1, mirror='lon').positions()
    assert np.allclose(lon, -lon0)
    assert np.allclose(lat, lat0)
    lon, lat = SkyPositions(0.0, 0.0, 0.2, 0.1, 0.1, 0.1, mirror='lat').positions()
    assert np.allclose(lat, -lat0)

    simtest.assert_raises_message(utils.InvalidParameterError, "mirror must be None",
                                  SkyPositions, 0.0, 0.0, 0.2, 0.1, 0.1, 0.1, mirror='x')


def test_hemisphere():
    spacing = np.radians(5.0)
    pos = SkyPositions.hemisphere(spacing, spacing)
    lon, lat = pos.positions()
    assert np.all(lat >= -1e-9)
    assert np.all(lat <= np.pi / 2 + 1e-9)
    assert np.isclose(lon.min(), 0.0)
    assert np.isclose(lon.max(), 2 * np.pi)
    nlat, nlon = pos.lattice_shape()
    assert (nlat, nlon) == (19, 73)
    assert lon.size == nlat * nlon

    # a sector reaching below the horizon loses those rows
    pos = SkyPositions(0.0, 0.0, 0.2, 0.2, 0.1, 0.1, above_horizon=True)
    lon, lat = pos.positions()
    assert pos.count() == 15
    assert np.all(lat >= 0)


def test_prepended_zenith():
    pos = SkyPositions.hemisphere(np.radians(10), np.radians(10))
    Ns = 1 + pos.count()
    lon = np.zeros(Ns)
    lat = np.zeros(Ns)
    lon[0], lat[0] = 0.0, np.pi / 2
    pos.generate(lon[1:], lat[1:])
    assert lat[0] == np.pi / 2
    lon2, lat2 = pos.positions()
    assert np.all(lon[1:] == lon2)
    assert np.all(lat[1:] == lat2)


@pytest.mark.parametrize("projection", [Projection.SIN, Projection.TAN, Projection.ARC])
def test_projections(projection):
    lon0, lat0 = 0.3, 0.6
    pos = SkyPositions(lon0, lat0, 0.2, 0.2, 0.05, 0.05, projection=projection)
    lon, lat = pos.positions()
    assert lon.size == 81

    # the centre maps onto the centre
    centre = lon.size // 2
    assert np.isclose(lon[centre], lon0)
    assert np.isclose(lat[centre], lat0)

    # angular distance from the centre equals the projected radius
    x = np.tile(np.arange(-4, 5) * 0.05, 9)
    y = np.repeat(np.arange(-4, 5) * 0.05, 9)
    r = np.hypot(x, y)
    v0 = np.array([np.cos(lat0) * np.cos(lon0), np.cos(lat0) * np.sin(lon0), np.sin(lat0)])
    v = np.stack([np.cos(lat) * np.cos(lon), np.cos(lat) * np.sin(lon), np.sin(lat)], axis=-1)
    dist = np.arctan2(np.linalg.norm(np.cross(v, v0), axis=-1), v @ v0)
    expected = {Projection.SIN: np.arcsin(r), Projection.TAN: np.arctan(r), Projection.ARC: r}[projection]
    assert np.allclose(dist, expected)


def test_projection_none_poles():
    # lattice running over the pole is cut at the pole
    pos = SkyPositions(0.0, np.radians(80), 0.5, np.radians(20), 0.1, np.radians(5))
    lon, lat = pos.positions()
    assert np.all(lat <= np.pi / 2 + 1e-9)
    nlat, nlon = pos.lattice_shape()
    assert lon.size == 7 * nlon

    # orthographic plane beyond unit radius does not reach the sphere
    pos = SkyPositions(0.0, np.pi / 2, 1.5, 0.1, 0.5, 0.1, projection='sin')
    lon, lat = pos.positions()
    assert pos.count() == 3 * 3 + 2


def test_projection_parse():
    assert Projection.parse('none') == Projection.NONE
    assert Projection.parse('Tan') == Projection.TAN
    assert Projection.parse(3) == Projection.ARC
    assert Projection.parse(Projection.SIN) == Projection.SIN
    simtest.assert_raises_message(utils.InvalidParameterError, 'Unknown projection: merc',
                                  Projection.parse, 'merc')
    with pytest.raises(utils.InvalidParameterError):
        SkyPositions(0.0, 0.0, 0.1, 0.1, 0.1, 0.1, projection=7)


def test_errors():
    for args, msg in [
        ((0.0, 0.0, 0.0, 0.1, 0.1, 0.1), 'half_width_lon must be positive'),
        ((0.0, 0.0, 0.1, -0.1, 0.1, 0.1), 'half_width_lat must be positive'),
        ((0.0, 0.0, 0.1, 0.1, 0.0, 0.1), 'spacing_lon must be positive'),
        ((0.0, 0.0, 0.1, 0.1, 0.1, np.nan), 'spacing_lat must be positive'),
    ]:
        simtest.assert_raises_message(utils.InvalidParameterError, msg, SkyPositions, *args)
    with pytest.raises(utils.NonFiniteInputError):
        SkyPositions(np.inf, 0.0, 0.1, 0.1, 0.1, 0.1)


def test_deproject_none():
    lon, lat, valid = sky_positions.deproject(np.array([0.1, 0.0]), np.array([0.0, 2.0]), 1.0, 0.0, 'none')
    assert np.allclose(lon, [1.1, 1.0])
    assert np.allclose(lat, [0.0, 2.0])
    assert valid.tolist() == [True, False]

# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2019 Radio Astronomy Software Group
# Licensed under the 3-clause BSD License

import numpy as np
import pytest

from arraybeam import utils
import arraybeam.tests as simtest


def test_error_hierarchy():
    for err in [utils.InvalidParameterError, utils.BufferTooSmallError, utils.NonFiniteInputError]:
        assert issubclass(err, utils.ArrayBeamError)
        assert issubclass(err, ValueError)
    assert issubclass(utils.ConstraintUnsatisfiableError, utils.ArrayBeamError)
    assert issubclass(utils.ConstraintUnsatisfiableError, RuntimeError)


def test_resolve_dtype():
    assert utils.resolve_dtype('single') == np.float32
    assert utils.resolve_dtype('DOUBLE') == np.float64
    assert utils.resolve_dtype(np.float32) == np.float32
    simtest.assert_raises_message(utils.InvalidParameterError, 'Unknown precision: half',
                                  utils.resolve_dtype, 'half')
    simtest.assert_raises_message(utils.InvalidParameterError, 'Precision must be float32 or float64',
                                  utils.resolve_dtype, np.int32)


def test_checks():
    utils.check_positive(a=1.0, b=2)
    simtest.assert_raises_message(utils.InvalidParameterError, 'b must be positive',
                                  utils.check_positive, a=1.0, b=0.0)
    with pytest.raises(utils.InvalidParameterError):
        utils.check_positive(a=np.nan)

    utils.check_finite("stuff", np.arange(3), 1.0)
    simtest.assert_raises_message(utils.NonFiniteInputError, 'Non-finite values in stuff',
                                  utils.check_finite, "stuff", np.array([0.0, np.inf]))

    utils.check_buffers(3, np.zeros(3), np.zeros(4))
    simtest.assert_raises_message(utils.BufferTooSmallError, 'holds 2 elements, 3 required',
                                  utils.check_buffers, 3, np.zeros(3), np.zeros(2))
    with pytest.raises(utils.BufferTooSmallError):
        utils.check_buffers(1, None)


def test_wavenumber():
    # 1 GHz -> wavelength of ~0.3 m
    k = utils.wavenumber(1e9)
    assert np.isclose(2 * np.pi / k, 0.299792458)
    ks = utils.wavenumber([1e8, 2e8])
    assert np.isclose(ks[1], 2 * ks[0])


def test_image_to_complex():
    image = np.array([1.0, 2.0, -3.0, 0.5], dtype=np.float32)
    vals = utils.image_to_complex(image)
    assert vals.dtype == np.complex64
    assert np.allclose(vals, [1 + 2j, -3 + 0.5j])
    assert utils.image_to_complex(np.zeros(0)).size == 0
    with pytest.raises(utils.InvalidParameterError):
        utils.image_to_complex(np.zeros(3))


# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2019 Radio Astronomy Software Group
# Licensed under the 3-clause BSD License

import numpy as np
from astropy.constants import c

c_ms = c.to('m/s').value

# -----------------------
# Error types shared by the generators and the beam pattern kernel.
# -----------------------


class ArrayBeamError(Exception):
    """Base class for all errors raised by arraybeam."""


class InvalidParameterError(ArrayBeamError, ValueError):
    """A parameter is out of range (non-positive spacing, radius, wavenumber, no antennas...)."""


class BufferTooSmallError(ArrayBeamError, ValueError):
    """An output buffer is smaller than the count it has to hold."""


class NonFiniteInputError(ArrayBeamError, ValueError):
    """A position, direction or angle contains NaN or Inf."""


class ConstraintUnsatisfiableError(ArrayBeamError, RuntimeError):
    """A layout cannot meet its separation constraint within the allowed attempts."""


PRECISIONS = {'single': np.float32, 'double': np.float64}


def resolve_dtype(precision):
    """
    Map a precision name ('single' or 'double') or a numpy float dtype to a numpy dtype.
    """
    if isinstance(precision, str):
        try:
            return np.dtype(PRECISIONS[precision.lower()])
        except KeyError:
            raise InvalidParameterError("Unknown precision: " + precision)
    try:
        dtype = np.dtype(precision)
    except TypeError:
        raise InvalidParameterError("Unknown precision: " + str(precision))
    if dtype not in (np.dtype(np.float32), np.dtype(np.float64)):
        raise InvalidParameterError("Precision must be float32 or float64, not " + str(dtype))
    return dtype


def check_positive(**kwargs):
    """
    Raise InvalidParameterError for any keyword value that is not a finite number > 0.
    """
    for name, value in kwargs.items():
        if not np.isfinite(value) or value <= 0:
            raise InvalidParameterError("{} must be positive, got {}".format(name, value))


def check_finite(name, *arrays):
    """
    Raise NonFiniteInputError if any of the arrays contains NaN or Inf.
    """
    for arr in arrays:
        if not np.all(np.isfinite(arr)):
            raise NonFiniteInputError("Non-finite values in " + name)


def check_buffers(required, *buffers):
    """
    Confirm every output buffer can hold `required` elements.
    """
    for buf in buffers:
        if buf is None or len(buf) < required:
            size = 0 if buf is None else len(buf)
            raise BufferTooSmallError(
                "Output buffer holds {:d} elements, {:d} required".format(size, required))


def wavenumber(freq_Hz):
    """
    Angular wavenumber k = 2 pi f / c, in rad per metre.

    Args:
        freq_Hz : float or ndarray of frequencies [Hz]
    """
    return 2 * np.pi * np.asarray(freq_Hz, dtype=float) / c_ms


def image_to_complex(image):
    """
    Convert an interleaved real/imaginary image of length 2 * Ns to a complex array of length Ns.
    """
    image = np.asarray(image)
    if image.size % 2:
        raise InvalidParameterError("Interleaved image must have an even length.")
    dtype = np.complex64 if image.dtype == np.float32 else np.complex128
    return image[0::2] + 1j * image[1::2].astype(dtype)


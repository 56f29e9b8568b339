# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2019 Radio Astronomy Software Group
# Licensed under the 3-clause BSD License

import time
import multiprocessing as mp

import numpy as np

from .utils import (InvalidParameterError, resolve_dtype, check_positive,
                    check_finite, check_buffers)

# -----------------------
# Beam pattern of a planar phased array in the horizontal frame.
#   Every sky sample is independent: samples are split into chunks, each chunk is
#   evaluated (optionally in a worker process) as a dense (Nsamples, Nants) phase
#   matrix summed over antennas.
# -----------------------

# Upper bound on the number of phase matrix elements held per chunk.
MAX_CHUNK_ELEMENTS = 2 ** 22


def direction_cosines(az, el):
    """
    Direction cosines (l, m) in the local horizontal frame.

    Azimuth is measured from north (y) towards east (x); el is the elevation.
    The output dtype follows the input dtype.
    """
    cos_el = np.cos(el)
    return cos_el * np.sin(az), cos_el * np.cos(az)


def _af_chunk(ax, ay, dl, dm, k, acc_dtype):
    """
    Array factor for one chunk of sky samples.

    dl, dm are direction cosine differences (sample - boresight).
    Returns the real and imaginary sums over antennas.
    """
    phase = k * (np.outer(dl, ax) + np.outer(dm, ay))
    re = np.cos(phase).sum(axis=1, dtype=acc_dtype)
    im = np.sin(phase).sum(axis=1, dtype=acc_dtype)
    return re, im


def evaluate(ax, ay, slon, slat, beam_az, beam_el, wavenumber, image=None,
             precision='single', accumulate=None, Nprocs=1, log=None):
    """
    Evaluate the complex array factor of a planar array at a set of sky directions.

    For sample s, with direction cosine differences (dl, dm) between the sample and
    the boresight, AF(s) = sum_a exp(i k (dl x_a + dm y_a)).

    Args:
        ax, ay : 1D arrays, antenna positions in the horizontal plane [metres]
        slon, slat : 1D arrays, sample azimuths and elevations [radians]
        beam_az, beam_el : float, boresight azimuth and elevation [radians]
        wavenumber : float, 2 pi f / c [rad / metre]
        image : 1D array of length >= 2 * Nsamples to write into (optional)
        precision : 'single', 'double' or a numpy float dtype for the phase calculation
        accumulate : precision of the sum over antennas. Defaults to precision.
        Nprocs : int, number of worker processes
        log : callable taking a message string, for progress reports (optional)

    Returns:
        image : 1D array, real and imaginary parts interleaved, image[2s] + 1j * image[2s+1] = AF(s)
    """
    dtype = resolve_dtype(precision)
    acc_dtype = dtype if accumulate is None else resolve_dtype(accumulate)

    ax = np.asarray(ax)
    ay = np.asarray(ay)
    slon = np.asarray(slon)
    slat = np.asarray(slat)
    if ax.size == 0:
        raise InvalidParameterError("At least one antenna is required.")
    if ax.shape != ay.shape:
        raise InvalidParameterError("Antenna x and y arrays must have the same shape.")
    if slon.shape != slat.shape:
        raise InvalidParameterError("Sample longitude and latitude arrays must have the same shape.")
    check_finite("antenna positions", ax, ay)
    check_finite("sky directions", slon, slat)
    check_finite("boresight direction", beam_az, beam_el)
    check_positive(wavenumber=wavenumber)
    if int(Nprocs) != Nprocs or Nprocs < 1:
        raise InvalidParameterError("Nprocs must be a positive integer.")

    Nants = ax.size
    Nsamples = slon.size
    if image is None:
        image = np.zeros(2 * Nsamples, dtype=acc_dtype)
    else:
        check_buffers(2 * Nsamples, image)
    if Nsamples == 0:
        return image

    ax = ax.ravel().astype(dtype)
    ay = ay.ravel().astype(dtype)
    sl, sm = direction_cosines(slon.ravel().astype(dtype), slat.ravel().astype(dtype))
    bl, bm = direction_cosines(dtype.type(beam_az), dtype.type(beam_el))
    dl = sl - bl
    dm = sm - bm
    k = dtype.type(wavenumber)

    chunk_size = max(1, MAX_CHUNK_ELEMENTS // Nants)
    Nchunks = max(int(np.ceil(Nsamples / chunk_size)), int(Nprocs))
    chunks = [c for c in np.array_split(np.arange(Nsamples), Nchunks) if c.size > 0]
    args = [(ax, ay, dl[c], dm[c], k, acc_dtype) for c in chunks]

    time0 = time.time()
    if Nprocs > 1:
        with mp.Pool(int(Nprocs)) as pool:
            results = pool.starmap(_af_chunk, args)
    else:
        results = (_af_chunk(*a) for a in args)

    Nfin = 0
    for c, (re, im) in zip(chunks, results):
        image[2 * c] = re
        image[2 * c + 1] = im
        Nfin += c.size
        if log is not None and len(chunks) > 1:
            log("Finished: {:d}/{:d} samples, Elapsed {:.2f}s".format(
                Nfin, Nsamples, time.time() - time0))

    return image

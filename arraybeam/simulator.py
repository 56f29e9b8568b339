# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2019 Radio Astronomy Software Group
# Licensed under the 3-clause BSD License

import os
import sys
import copy
import warnings

import numpy as np
import yaml
from astropy.coordinates import Angle
from astropy import units

from . import array_factor, layout, sky_positions, rotation, utils
from .version import history_string

# -----------------------
# Methods to parse obsparam dictionaries and run a beam pattern frequency sweep.
# -----------------------


def stdout_log(message):
    """Progress reporter that writes to standard output."""
    sys.stdout.write(message + "\n")
    sys.stdout.flush()


def _to_rad(value):
    """Angle in radians from a number of degrees or an astropy-parsable angle string."""
    return Angle(value, unit=units.deg).rad


def parse_layout_params(layout_params, config_path=""):
    """
    Parse the "layout" section of an obsparam.

    The "type" key selects the layout:
        grid : requires n and sep
        circular : requires seed, radius, xs, ys, xe, ye. Optional min_sep, max_attempts.
        anything else : path to a layout text file (see layout.write_layout),
            relative to config_path if not found as given.
    An optional "rotation" key (degrees) rotates the layout about the vertical axis.

    Args:
        layout_params: Dictionary of layout parameters
        config_path: Directory used to resolve relative layout file paths

    Returns:
        dict of layout properties:
            |  layout_type: (str) grid, circular or the layout file path
            |  Nants: (int) Number of antennas
            |  antenna_x, antenna_y: (ndarray) Antenna positions in metres
            |  rotation: (float) Applied rotation in radians
    """
    params = dict(layout_params)
    layout_type = params.pop("type")
    rot = _to_rad(params.pop("rotation", 0.0))

    if layout_type == "grid":
        for key in ["n", "sep"]:
            if key not in params:
                raise KeyError("{} required for grid layout".format(key))
        gen = layout.RegularGrid(params["n"], params["sep"])
    elif layout_type == "circular":
        for key in ["seed", "radius", "xs", "ys", "xe", "ye"]:
            if key not in params:
                raise KeyError("{} required for circular layout".format(key))
        gen = layout.PerturbedCircular(**params)
    else:
        layout_file = layout_type
        if not os.path.exists(layout_file):
            layout_file = os.path.join(config_path, layout_type)
        if not os.path.exists(layout_file):
            raise ValueError("layout file from yaml does not exist: {}".format(layout_type))
        gen = None
        ax, ay = layout.read_layout(layout_file)

    if gen is not None:
        ax, ay = gen.positions()
    ax, ay, _ = rotation.rotate_points(rot, ax, ay)

    return_dict = {}
    return_dict["layout_type"] = layout_type
    return_dict["Nants"] = ax.size
    return_dict["antenna_x"] = ax
    return_dict["antenna_y"] = ay
    return_dict["rotation"] = rot

    return return_dict


def parse_sky_params(sky_params):
    """
    Parse the "sky" section of an obsparam.

    The "type" key selects the sampling:
        sector : requires center_lon, center_lat, half_width_lon, half_width_lat,
            spacing_lon, spacing_lat (degrees)
        hemisphere : requires spacing_lon, spacing_lat (degrees)
    Optional keys: rho (degrees), centre_point, above_horizon, mirror, projection,
    and include_zenith, which puts an extra sample at the zenith in front of the lattice.

    Returns:
        dict of sky sample properties:
            |  sky_type: (str) sector or hemisphere
            |  Nsamples: (int) Number of sky samples
            |  sample_lon, sample_lat: (ndarray) Sample directions in radians
    """
    params = dict(sky_params)
    sky_type = params.pop("type")
    include_zenith = params.pop("include_zenith", False)
    for key in ["center_lon", "center_lat", "half_width_lon", "half_width_lat",
                "spacing_lon", "spacing_lat", "rho"]:
        if key in params:
            params[key] = _to_rad(params[key])

    for key in ["spacing_lon", "spacing_lat"]:
        if key not in params:
            raise KeyError("{} required for sky sampling".format(key))

    if sky_type == "hemisphere":
        # the hemisphere fixes its own centre and extent
        for key in ["center_lon", "center_lat", "half_width_lon", "half_width_lat"]:
            if key in params:
                raise ValueError("{} cannot be set for hemisphere sky sampling".format(key))
        pos = sky_positions.SkyPositions.hemisphere(**params)
    elif sky_type == "sector":
        for key in ["center_lon", "center_lat", "half_width_lon", "half_width_lat"]:
            if key not in params:
                raise KeyError("{} required for sector sky sampling".format(key))
        pos = sky_positions.SkyPositions(**params)
    else:
        raise ValueError("Sky type {} not available.".format(sky_type))

    # two-phase generation, leaving room for the zenith sample in slot 0
    offset = 1 if include_zenith else 0
    Nsamples = offset + pos.count()
    slon = np.zeros(Nsamples)
    slat = np.zeros(Nsamples)
    if include_zenith:
        slon[0], slat[0] = 0.0, np.pi / 2
    pos.generate(slon[offset:], slat[offset:])

    return_dict = {}
    return_dict["sky_type"] = sky_type
    return_dict["Nsamples"] = Nsamples
    return_dict["sample_lon"] = slon
    return_dict["sample_lat"] = slat

    return return_dict


def parse_beam_params(beam_params):
    """
    Parse the "beam" section of an obsparam.

    Returns:
        dict with beam_az, beam_el (radians) and precision.
    """
    for key in ["azimuth", "elevation"]:
        if key not in beam_params:
            raise KeyError("{} required for the beam direction".format(key))
    precision = beam_params.get("precision", None)
    if precision is None:
        warnings.warn("No precision specified. Defaulting to single")
        precision = "single"
    utils.resolve_dtype(precision)

    return_dict = {}
    return_dict["beam_az"] = _to_rad(beam_params["azimuth"])
    return_dict["beam_el"] = _to_rad(beam_params["elevation"])
    return_dict["precision"] = precision
    return_dict["accumulate"] = beam_params.get("accumulate", None)

    return return_dict


def parse_frequency_params(freq_params):
    """
    Parse the "freq" section of an obsparam into the channel centres of the sweep.

    An explicit 'freq_array' list takes precedence. Otherwise the first complete
    combination, checked in this order, defines evenly spaced channels:
          i) start_freq, Nfreqs & channel_width
         ii) start_freq, Nfreqs & bandwidth
        iii) start_freq, Nfreqs & end_freq  (end_freq is the last channel centre)
         iv) start_freq, channel_width & end_freq

    Returns:
        dict with Nfreqs, freq_array (Hz), channel_width (Hz) and bandwidth
        (channel_width * Nfreqs, Hz).
    """
    has = dict((key, key in freq_params) for key in
               ["freq_array", "start_freq", "end_freq", "Nfreqs", "channel_width", "bandwidth"])

    if has["freq_array"]:
        freq_arr = np.array(freq_params["freq_array"], dtype=float).ravel()
        Nfreqs = freq_arr.size
        if Nfreqs > 1:
            channel_width = np.diff(freq_arr)[0]
        else:
            # a single frequency has no channel structure
            channel_width = freq_params.get("channel_width", 0.0)
        bandwidth = channel_width * Nfreqs

    else:
        if not has["start_freq"]:
            raise KeyError("Couldn't find any proper combination of keys in freq_params")
        start_freq = freq_params["start_freq"]

        if has["Nfreqs"] and has["channel_width"]:
            Nfreqs = freq_params["Nfreqs"]
            channel_width = freq_params["channel_width"]
        elif has["Nfreqs"] and has["bandwidth"]:
            Nfreqs = freq_params["Nfreqs"]
            channel_width = float(freq_params["bandwidth"]) / Nfreqs
        elif has["Nfreqs"] and has["end_freq"]:
            Nfreqs = freq_params["Nfreqs"]
            channel_width = float(freq_params["end_freq"] - start_freq) / max(Nfreqs - 1, 1)
        elif has["channel_width"] and has["end_freq"]:
            channel_width = freq_params["channel_width"]
            nchan = float(freq_params["end_freq"] - start_freq) / channel_width + 1
            if not np.isclose(nchan, np.round(nchan)):
                raise ValueError("end_freq - start_freq must be evenly divisible by channel_width")
            Nfreqs = int(np.round(nchan))
        else:
            raise KeyError("Couldn't find any proper combination of keys in freq_params")

        if int(Nfreqs) != Nfreqs or Nfreqs < 1:
            raise ValueError("Nfreqs must be a positive integer, got {}".format(Nfreqs))
        Nfreqs = int(Nfreqs)
        if Nfreqs > 1 and channel_width == 0:
            raise ValueError("channel_width must be non-zero for more than one channel.")
        bandwidth = channel_width * Nfreqs
        freq_arr = start_freq + channel_width * np.arange(Nfreqs)

    if np.any(freq_arr <= 0):
        raise ValueError("Frequencies must be positive.")

    return_dict = {}
    return_dict["Nfreqs"] = Nfreqs
    return_dict["freq_array"] = freq_arr
    return_dict["channel_width"] = channel_width
    return_dict["bandwidth"] = bandwidth

    return return_dict


def beam_pattern_sweep(ax, ay, slon, slat, beam_az, beam_el, freqs, **kwargs):
    """
    Evaluate the beam pattern once per frequency.

    Each frequency is an independent call to array_factor.evaluate, with a fresh
    image. kwargs are passed through to it (precision, accumulate, Nprocs, log).

    Yields:
        (freq, image) for each frequency in freqs [Hz]
    """
    for freq in np.atleast_1d(freqs):
        k = utils.wavenumber(freq)
        image = array_factor.evaluate(ax, ay, slon, slat, beam_az, beam_el, k, **kwargs)
        yield freq, image


def write_beam_pattern(filename, slon, slat, image, history=None, clobber=False):
    """
    Write a beam pattern as fixed-width text.

    One record per sky sample: longitude [deg], latitude [deg], real part, imaginary part.
    """
    Nsamples = np.size(slon)
    utils.check_buffers(2 * Nsamples, image)
    if os.path.exists(filename) and not clobber:
        raise ValueError("File {} exists and clobber is False.".format(filename))
    image = np.asarray(image)
    data = np.column_stack((np.degrees(slon), np.degrees(slat),
                            image[0:2 * Nsamples:2], image[1:2 * Nsamples:2]))
    header = '' if history is None else history
    np.savetxt(filename, data, fmt='%12.3f%12.3f%16.4e%16.4e', header=header)


def read_beam_pattern(filename):
    """
    Read a beam pattern written by write_beam_pattern.

    Returns:
        slon, slat : sample directions [radians]
        beam : complex ndarray of array factor values
    """
    if not os.path.exists(filename):
        raise ValueError("File {} not found.".format(filename))
    data = np.loadtxt(filename, ndmin=2)
    return np.radians(data[:, 0]), np.radians(data[:, 1]), data[:, 2] + 1j * data[:, 3]


def frequency_labels(freqs):
    """
    File name labels for a set of frequencies, in MHz.

    Uses the fewest decimal places (up to Hz resolution) that keep every label
    distinct. Frequencies that are still equal at Hz resolution get their channel
    index appended.
    """
    mhz = np.atleast_1d(freqs) / 1e6
    for ndec in range(7):
        labels = ["{:.{}f}".format(f, ndec) for f in mhz]
        if len(set(labels)) == len(labels):
            return labels
    return ["{}_{:d}".format(label, i) for i, label in enumerate(labels)]


def run_simulation(param_file, Nprocs=1, add_to_history="", log=stdout_log):
    """
    Parse input parameter file, build the antenna layout and sky samples, and run the frequency sweep.

    Writes the antenna layout and one beam pattern file per frequency into filing:outdir,
    named <prefix>_layout.dat and <prefix>_<MHz>.dat (see frequency_labels). Without
    clobber, nothing is written if any of these files already exists.

    Returns:
        list of written file names, layout file first.
    """
    # parse parameter dictionary
    config_path = ""
    if isinstance(param_file, str):
        config_path = os.path.dirname(param_file)
        with open(param_file, "r") as yfile:
            param_dict = yaml.safe_load(yfile)
    else:
        param_dict = copy.deepcopy(param_file)

    if "config_path" in param_dict:
        config_path = param_dict["config_path"]

    layout_dict = parse_layout_params(param_dict["layout"], config_path=config_path)
    sky_dict = parse_sky_params(param_dict["sky"])
    beam_dict = parse_beam_params(param_dict["beam"])
    freq_dict = parse_frequency_params(param_dict["freq"])
    filing_params = dict(param_dict["filing"])

    if "Nprocs" in param_dict:
        Nprocs = param_dict["Nprocs"]

    ax, ay = layout_dict["antenna_x"], layout_dict["antenna_y"]
    slon, slat = sky_dict["sample_lon"], sky_dict["sample_lat"]
    if log is not None:
        log("Nants: {:d}, min separation {:.3f} m".format(
            layout_dict["Nants"], layout.min_separation(ax, ay)))
        log("Nsamples: {:d}, Nfreqs: {:d}, Nprocs: {}".format(
            sky_dict["Nsamples"], freq_dict["Nfreqs"], Nprocs))

    # ---------------------------
    # Output files
    # ---------------------------
    outdir = filing_params.get("outdir", ".")
    prefix = filing_params.get("outfile_prefix", "beam_pattern")
    clobber = filing_params.get("clobber", False)
    if outdir != "" and not os.path.exists(outdir):
        os.makedirs(outdir)

    layout_file = os.path.join(outdir, prefix + "_layout.dat")
    beam_files = [os.path.join(outdir, "{}_{}.dat".format(prefix, label))
                  for label in frequency_labels(freq_dict["freq_array"])]
    if not clobber:
        for outfile in [layout_file] + beam_files:
            if os.path.exists(outfile):
                raise ValueError("File {} exists and clobber is False.".format(outfile))

    param_history = (
        "\nPARAMETER FILE:\nLAYOUT\n{layout}\nSKY\n{sky}\nBEAM\n{beam}\nFREQ\n{freq}\n".format(
            layout=param_dict["layout"],
            sky=param_dict["sky"],
            beam=param_dict["beam"],
            freq=param_dict["freq"],
        )
    )
    history = history_string(notes=add_to_history + param_history)

    written = []
    layout.write_layout(layout_file, ax, ay, history=history, clobber=clobber)
    written.append(layout_file)

    # ---------------------------
    # Run simulation
    # ---------------------------
    sweep = beam_pattern_sweep(
        ax, ay, slon, slat, beam_dict["beam_az"], beam_dict["beam_el"],
        freq_dict["freq_array"], precision=beam_dict["precision"],
        accumulate=beam_dict["accumulate"], Nprocs=Nprocs, log=log,
    )
    for outfile, (_, image) in zip(beam_files, sweep):
        if log is not None:
            log("...writing {}".format(outfile))
        write_beam_pattern(outfile, slon, slat, image, history=history, clobber=clobber)
        written.append(outfile)

    return written

# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2018 Radio Astronomy Software Group
# Licensed under the 2-clause BSD License

from setuptools import setup


def branch_scheme(version):
    """
    Local version scheme that adds the branch name for absolute reproducibility.
    If and when this is added to setuptools_scm this function and file can be removed.
    """
    if version.exact or version.node is None:
        return version.format_choice("", "+d{time:{time_format}}", time_format="%Y%m%d")
    else:
        if version.branch == "main":
            return version.format_choice("+{node}", "+{node}.dirty")
        else:
            return version.format_choice("+{node}.{branch}", "+{node}.{branch}.dirty")


setup_args = {
    "name": "arraybeam",
    "author": "Radio Astronomy Software Group",
    "license": "BSD",
    "description": "Beam pattern simulator for planar phased arrays",
    "packages": ["arraybeam", "arraybeam.data", "arraybeam.tests"],
    "package_data": {"arraybeam": ["data/configs/*"]},
    "scripts": ["scripts/beam_pattern_sim.py"],
    "python_requires": ">=3.8",
    "install_requires": ["numpy", "scipy", "astropy", "pyyaml"],
    "extras_require": {"test": ["pytest"]},
    "use_scm_version": {"local_scheme": branch_scheme, "fallback_version": "0.1.0"},
}

setup(**setup_args)

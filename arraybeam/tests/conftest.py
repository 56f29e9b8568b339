# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2019 Radio Astronomy Software Group
# Licensed under the 3-clause BSD License

"""Testing environment setup and teardown for pytest."""
import os
import shutil

import pytest

from arraybeam.tests import TESTDATA_PATH


@pytest.fixture(autouse=True, scope="session")
def setup_and_teardown_package():
    """Make data/test directory to put test output files in."""
    if not os.path.exists(TESTDATA_PATH):
        os.mkdir(TESTDATA_PATH)

    # yield to allow tests to run
    yield

    # clean up the test directory after
    if os.path.exists(TESTDATA_PATH):
        shutil.rmtree(TESTDATA_PATH)

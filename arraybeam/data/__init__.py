# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2019 Radio Astronomy Software Group
# Licensed under the 3-clause BSD License

import os

DATA_PATH = os.path.dirname(os.path.realpath(__file__))

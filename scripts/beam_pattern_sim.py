#!/usr/bin/env python
# -*- mode: python; coding: utf-8 -*
# Copyright (c) 2019 Radio Astronomy Software Group
# Licensed under the 3-clause BSD License

"""
Calculate the beam pattern of a planar phased array for:
    > Regular grid, perturbed circular or file antenna layout
    > Sky sector or hemisphere sampling
    > One or more frequencies

and save each pattern as a fixed-width text file.
"""

import os
import sys
import argparse

from arraybeam import simulator

parser = argparse.ArgumentParser()

parser.add_argument(dest='param', help='obsparam yaml file')
parser.add_argument('-n', '--Nprocs', help='Number of worker processes. Overridden by the obsparam.', default=None, type=int)
parser.add_argument('--add_to_history', help='Notes to add to the output file headers.', default='', type=str)

args = parser.parse_args()

# ---------------------------
# Parallelization
# ---------------------------
if args.Nprocs is not None:
    Nprocs = args.Nprocs
elif 'SLURM_CPUS_PER_TASK' in os.environ:
    Nprocs = int(os.environ['SLURM_CPUS_PER_TASK'])
else:
    Nprocs = 1

history = ' '.join(sys.argv)
if args.add_to_history:
    history += '\n' + args.add_to_history

written = simulator.run_simulation(args.param, Nprocs=Nprocs, add_to_history=history)
print("Wrote {:d} files.".format(len(written)))

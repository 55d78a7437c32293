# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Concurrent single molecule localization microscopy analysis"""
from . import config, loc, sim  # noqa: F401
from .frames import FrameStack  # noqa: F401

__version__ = "0.1.0"

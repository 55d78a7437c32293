# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""API for the M2LE localization algorithm

Provides the standard :py:func:`locate` and :py:func:`batch` functions.
"""
import multiprocessing

from .. import config
from ..frames import FrameStack
from .data import to_dataframe
from .pipeline import Pipeline


num_threads = multiprocessing.cpu_count()


def _make_options(options, kwargs):
    if options is None:
        return config.Options(**kwargs)
    if kwargs:
        return options.replace(**kwargs)
    return options


@config.set_columns
def locate(raw_image, options=None, seed=None, bit_depth=None, columns={},
           **kwargs):
    """Locate single molecules in an image

    Parameters
    ----------
    raw_image : array-like
        Raw image data
    options : config.Options or None, optional
        Localization options. If `None`, use the defaults from
        :py:attr:`config.rc`.
    seed : int or None, optional
        Seed for the Monte-Carlo estimation of third moments. Pass the same
        value to get reproducible results.
    bit_depth : int or None, optional
        Bits per pixel of the camera. If `None`, use 8 for 8-bit integer
        data and 16 else.
    **kwargs
        Override individual options, e.g. ``snr_cutoff=5.``

    Returns
    -------
    pandas.DataFrame
        Localization data. Coordinates ("x", "y") are in pixels, where the
        center of the upper left pixel is at (0, 0). "x_nm" and "y_nm" give
        the same in nm. "signal_x", "signal_y", "bg_x", "bg_y", "size_x",
        "size_y" are the fitted intensity, background and width parameters.
        "ecc", "major_axis", and "minor_axis" describe the shape, and
        "third_sum" and "third_diff" are the third moment invariants.

    Other parameters
    ----------------
    columns : dict, optional
        Override default column names as defined in
        :py:attr:`config.columns`.
    """
    ret = batch([raw_image], options, num_threads=1, seed=seed,
                bit_depth=bit_depth, columns=columns, **kwargs)
    return ret.drop(columns=columns["time"])


@config.set_columns
def batch(frames, options=None, num_threads=num_threads, seed=None,
          bit_depth=None, columns={}, **kwargs):
    """Locate single molecules in a series of images

    Frames are distributed among `num_threads` lanes in contiguous blocks.
    Molecules are searched for, tested, fitted and de-duplicated in each
    lane independently.

    Parameters
    ----------
    frames : iterable of images
        Iterable of array-like objects that represent image data
    options : config.Options or None, optional
        Localization options. If `None`, use the defaults from
        :py:attr:`config.rc`.
    num_threads : int, optional
        Number of CPU threads to use. Defaults to the number of CPUs.
    seed : int or None, optional
        Seed for the Monte-Carlo estimation of third moments. Pass the same
        value to get reproducible results.
    bit_depth : int or None, optional
        Bits per pixel of the camera. If `None`, use 8 for 8-bit integer
        data and 16 else.
    **kwargs
        Override individual options, e.g. ``snr_cutoff=5.``

    Returns
    -------
    pandas.DataFrame
        Localization data as described in :py:func:`locate`, with an
        additional "frame" column. Rows are in the order in which results
        became available.

    Other parameters
    ----------------
    columns : dict, optional
        Override default column names as defined in
        :py:attr:`config.columns`.
    """
    opts = _make_options(options, kwargs)
    stack = FrameStack(frames, opts.saturation, bit_depth)
    with Pipeline(stack, opts, num_threads, seed) as p:
        result = p.run()
    return to_dataframe(result, opts.pixel_size, stack.frame_nos,
                        columns=columns)

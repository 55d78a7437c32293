# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Localization options and default DataFrame column names
=========================================================

All tunable quantities of the localization pipeline (detection threshold,
optical properties of the microscope, convergence criteria of the fit, …)
are collected in the :py:attr:`rc` dict. :py:class:`Options` instances are
created from it, optionally overriding single entries. Changing an item of
:py:attr:`rc` changes the defaults for all :py:class:`Options` created
afterwards.

Column names of the resulting :py:class:`pandas.DataFrame` are taken from
:py:attr:`columns`. Functions decorated with :py:func:`set_columns` accept a
`columns` dict argument which allows for overriding individual names.


Examples
--------

>>> opts = Options(snr_cutoff=5., pixel_size=160.)
>>> opts.snr_cutoff
5.0
>>> opts.wavelength
550.0
>>> rc["wavelength"] = 670.
>>> Options().wavelength
670.0


Programming reference
---------------------

.. autoclass:: Options
    :members:
.. autofunction:: set_columns
.. autodata:: columns
.. autodata:: rc
.. autodata:: units
"""
import inspect
import functools
import math


rc = dict(
    snr_cutoff=4.0,
    min_noise=2.0,
    pixel_size=110.0,
    saturation=65535.0,
    ecc_threshold=0.9,
    ecc_disabled=False,
    third_threshold=0.9,
    third_disabled=False,
    wavelength=550.0,
    numerical_aperture=1.0,
    usable_pixel=90.0,
    fixed_width=True,
    pos_epsilon=1e-4,
    int_epsilon=0.01,
    width_epsilon=1e-4,
    max_iterations=50,
    max_noise_multiplier=2.0,
    min_noise_bound=1.0,
    max_width=3.0,
    min_width=1.5)
"""Global default localization options"""


units = dict(
    min_noise="photons",
    pixel_size="nm",
    saturation="DN",
    wavelength="nm",
    usable_pixel="%",
    pos_epsilon="nm",
    int_epsilon="%",
    min_noise_bound="photons",
    max_width="px",
    min_width="px")
"""Units of the entries in :py:attr:`rc` (where applicable)"""


_true_strings = {"true", "yes", "on", "1"}
_false_strings = {"false", "no", "off", "0"}


def _convert(name, value):
    """Convert `value` to the type of the default of option `name`"""
    default = rc[name]
    if not isinstance(default, bool):
        return type(default)(value)
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _true_strings:
            return True
        if v in _false_strings:
            return False
    elif value in (True, False):
        # also accepts 0, 1 and numpy bools
        return bool(value)
    raise ValueError("Invalid value for boolean option {}: {!r}".format(
        name, value))


columns = dict(
    coords=["x", "y"],
    coords_nm=["x_nm", "y_nm"],
    time="frame",
    signal=["signal_x", "signal_y"],
    bg=["bg_x", "bg_y"],
    size=["size_x", "size_y"],
    ecc="ecc",
    axes=["major_axis", "minor_axis"],
    third_moments=["third_sum", "third_diff"])
"""Default column names in :py:class:`pandas.DataFrame`"""


class Options:
    """Named localization options

    Every key of :py:attr:`rc` is available as an attribute. Values not
    passed to the constructor are taken from :py:attr:`rc` at the time of
    instantiation and converted to the type of the default value.

    Parameters
    ----------
    **kwargs
        Values overriding the defaults from :py:attr:`rc`

    Raises
    ------
    ValueError
        If an option name is not a key of :py:attr:`rc` or a value for a
        boolean option is not a boolean, 0, 1, or a string such as "true"
        or "no".
    """
    def __init__(self, **kwargs):
        unknown = set(kwargs) - set(rc)
        if unknown:
            raise ValueError("Unknown option(s): {}".format(
                ", ".join(sorted(unknown))))
        for name, default in rc.items():
            value = kwargs.get(name, default)
            object.__setattr__(self, name, _convert(name, value))

    def __setattr__(self, name, value):
        if name not in rc:
            raise AttributeError("Unknown option: {}".format(name))
        object.__setattr__(self, name, _convert(name, value))

    def __eq__(self, other):
        if not isinstance(other, Options):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        changed = ["{}={!r}".format(k, v) for k, v in self.to_dict().items()
                   if v != rc[k]]
        return "Options({})".format(", ".join(changed))

    def to_dict(self):
        """Get all options as a dict"""
        return {k: getattr(self, k) for k in rc}

    def replace(self, **kwargs):
        """Create a copy with some options changed

        Parameters
        ----------
        **kwargs
            Options to change

        Returns
        -------
        Options
            New instance
        """
        d = self.to_dict()
        d.update(kwargs)
        return Options(**d)

    @property
    def wavenumber(self):
        """Optical wavenumber (2π NA / wavelength) in 1/nm"""
        return 2 * math.pi * self.numerical_aperture / self.wavelength

    @property
    def aperture(self):
        """Light-collecting length of a pixel in nm"""
        return self.pixel_size * self.usable_pixel / 100

    def describe(self):
        """List of lines describing all options and their units

        Suitable for writing to a log.
        """
        ret = []
        for k, v in self.to_dict().items():
            u = units.get(k)
            ret.append("{}: {}{}".format(k, v, " " + u if u else ""))
        return ret


def set_columns(func):
    """Decorator to set default column names for DataFrames

    Use this on functions that accept a dict as the `columns` argument.
    Values from :py:attr:`columns` will be added for any key not present in
    the dict argument.

    Parameters
    ----------
    func : function
        Function to be decorated

    Returns
    -------
    function
        Modified function

    Examples
    --------
    >>> @set_columns
    ... def get_ecc(data, columns={}):
    ...     return data[columns["ecc"]]
    >>> get_ecc(df)  # returns the "ecc" column
    >>> get_ecc(df, columns={"ecc": "eccentricity"})
    """
    sig = inspect.signature(func)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        ba = sig.bind(*args, **kwargs)
        ba.apply_defaults()

        cols = columns.copy()
        cols.update(ba.arguments["columns"])
        ba.arguments["columns"] = cols

        return func(*ba.args, **ba.kwargs)

    wrapper.__signature__ = sig
    return wrapper

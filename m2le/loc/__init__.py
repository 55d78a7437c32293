# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Single molecule localization using M2LE
=======================================

M2LE (multiple maximum likelihood estimation) locates single fluorescent
molecules with sub-pixel accuracy. Each frame is processed in several steps:

1. Pixels brighter than a multiple of the local noise level (estimated
   from 16x16 pixel tiles) become candidates.
2. Candidates whose eccentricity, computed from second moments, is too
   large are rejected.
3. Projections of the signal onto the x and y axes are fitted with a
   pixel-integrated Gaussian by maximizing the Poisson likelihood.
4. Fits with large third moments are rejected.
5. Of overlapping candidates, only the one whose fitted position is closest
   to its pixel center is kept.

Acceptance thresholds for steps 2 and 4 depend on the number of photons and
on a configurable acceptance probability.

Frames are processed concurrently by several worker threads.

The API is similar to the one of the other localization algorithms: there is
a ``locate`` function for locating molecules in a single image and a
``batch`` function for image sequences.


Examples
--------

Simulate an image with a single molecule:

>>> img = m2le.sim.simulate_gauss([64, 64], [[30.2, 20.7]], 200, 1.,
...                              background=10.)

Localize:

>>> locate(img, seed=0)
          x          y         x_nm  ...  third_sum  third_diff
0  30.20...  20.70...  3322.0...    ...

Localize in a sequence of images:

>>> batch([img] * 2, num_threads=2, seed=0)


Programming reference
---------------------

.. autofunction:: locate
.. autofunction:: batch
.. autoclass:: Pipeline
    :members:
"""
from .api import batch, locate  # noqa: F401
from .pipeline import Pipeline  # noqa: F401

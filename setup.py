# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

from setuptools import setup, find_packages


setup(
    name="m2le",
    version="0.1.0",
    description="Concurrent single molecule localization using multiple "
                "maximum likelihood estimation",
    python_requires=">=3.9",
    install_requires=["numpy>=1.17",
                      "pandas",
                      "scipy>0.18", ],
    extras_require={"test": ["pytest"]},
    packages=find_packages(include=["m2le*"]),
)

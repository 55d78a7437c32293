# SPDX-FileCopyrightText: 2020 Lukas Schrangl <lukas.schrangl@tuwien.ac.at>
#
# SPDX-License-Identifier: BSD-3-Clause

"""Collection of exception classes"""


class StageError(Exception):
    """A pipeline stage failed in at least one lane

    Attributes
    ----------
    stage : str
        Name of the stage
    lane_errors : dict of int -> Exception
        Map of lane number to the exception raised in that lane
    """
    def __init__(self, stage, lane_errors):
        """Parameters
        ----------
        stage : str
            Set the :py:attr:`stage` attribute.
        lane_errors : dict of int -> Exception
            Set the :py:attr:`lane_errors` attribute.
        """
        lanes = ", ".join(str(i) for i in sorted(lane_errors))
        super().__init__(f"Stage \"{stage}\" failed in lane(s) {lanes}")
        self.stage = stage
        self.lane_errors = lane_errors

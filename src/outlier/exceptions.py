"""
Errors raised by the outlier detector query API.
"""


class OutlierDetectorError(Exception):
    """Base class for all outlier detector errors"""


class UnknownGroupError(OutlierDetectorError, KeyError):
    """A rate or status query named a group that was never marked"""

    def __init__(self, group_id: str):
        super().__init__(group_id)
        self.group_id = group_id

    def __str__(self) -> str:
        return f"No group with id found {self.group_id!r}. Mark the group first"


class NoGroupsRegisteredError(OutlierDetectorError, LookupError):
    """A threshold comparison was attempted while no group is registered"""

    def __init__(self, group_id: str):
        super().__init__(group_id)
        self.group_id = group_id

    def __str__(self) -> str:
        return f"No groups registered. Register the group {self.group_id!r} first"


class UnsupportedAlgorithmError(OutlierDetectorError, ValueError):
    """An unrecognized rate algorithm reached the rate computation path"""

    def __init__(self, algorithm):
        super().__init__(algorithm)
        self.algorithm = algorithm

    def __str__(self) -> str:
        return f"Unsupported rate algorithm {self.algorithm!r}"

class RankViewerError(Exception):
    """Base exception for all rank_viewer errors"""
    pass


class ConfigError(RankViewerError):
    """Invalid or inconsistent global.json / dataset config"""
    pass


class DatasetLoadError(RankViewerError):
    """A dataset file could not be read or parsed into records"""
    pass


class UnknownControlError(RankViewerError, KeyError):
    """
    A filter control name that the current dataset does not declare.
    The filter state is left untouched.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown filter control '{name}'")

    def __str__(self) -> str:
        return self.args[0]


class InvalidControlValueError(RankViewerError, ValueError):
    """A value that the targeted control cannot accept"""
    pass


class RenderError(RankViewerError):
    """
    DerivedSeries shape is unusable for the plotting engine
    (misaligned columns, missing or non-finite values, unknown chart type)
    """
    pass

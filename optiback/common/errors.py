"""
Exceptions shared across the optiback packages.
"""


class ConfigurationError(ValueError):
    """
    A precondition on the inputs of an operation was violated, for example an unbounded
    timeframe passed to a windowing operation or a live broker used for back testing.
    """


class MissingParameterError(KeyError):
    """
    A parameter was read from a Params instance that doesn't contain it.
    """

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Missing key '{self.name}' in params"

class PageSmithException(Exception):
    pass


class ToolStoreError(PageSmithException):
    """The persisted tool array could not be read back"""


class InvalidGateTransitionError(PageSmithException):
    pass


class GenerationError(PageSmithException):
    def __init__(self, message: str, *, blocked_by_safety: bool = False) -> None:
        super().__init__(message)
        self.blocked_by_safety = blocked_by_safety


class ScriptEvaluationError(PageSmithException):
    """The page engine rejected a script before it could run, e.g. a syntax error"""

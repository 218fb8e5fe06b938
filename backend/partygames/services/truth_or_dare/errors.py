class EmptyQuestionPool(Exception):
    """No active question matches the requested type and mode."""

    def __init__(self, type, mode):
        super().__init__(f'No active {type} questions for mode {mode!r}')
        self.type = type
        self.mode = mode


class InvalidTransition(RuntimeError):
    """An operation was invoked in a stage that does not allow it."""

    def __init__(self, operation, stage):
        super().__init__(f'{operation} is not allowed while {stage}')
        self.operation = operation
        self.stage = stage

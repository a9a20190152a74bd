class QuizError(Exception):
    """Base class for errors raised by the quiz core."""


class InvalidInputError(QuizError, ValueError):
    pass


class SessionStateError(QuizError):
    """An action is not allowed in the current phase of a play session."""


class NotFoundError(QuizError):
    def __init__(self, what: str, ident: str) -> None:
        super().__init__(f"{what} not found: {ident}")
        self.what = what
        self.ident = ident

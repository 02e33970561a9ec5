"""Custom exceptions for analysis context."""


class InvalidInputError(ValueError):
    """
    Exception raised when an analysis request is missing its inputs.

    Raised before any network call when the resume text or job description
    is missing or blank.
    """

    pass

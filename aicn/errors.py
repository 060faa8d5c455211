"""Exceptions raised by the content pipeline."""


class AicnError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(AicnError):
    """Required configuration is missing or invalid."""


class LLMResponseError(AicnError):
    """The LLM returned output that does not match the expected schema."""


class OperationAlreadyRunningError(AicnError):
    """A manual operation was started while another one is running."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"An operation is already running: {operation}")
        self.operation = operation


class ArticleNotFoundError(AicnError):
    """No article exists with the requested id."""

    def __init__(self, article_id: int) -> None:
        super().__init__(f"Article #{article_id} not found")
        self.article_id = article_id


class CategoryNotFoundError(AicnError):
    """No category exists with the requested slug."""


class InvalidSettingsError(AicnError):
    """A settings update violates the content limits."""


class EditorialNotFoundError(AicnError):
    """No editorial exists with the requested id."""

    def __init__(self, editorial_id: int) -> None:
        super().__init__(f"Editorial #{editorial_id} not found")
        self.editorial_id = editorial_id

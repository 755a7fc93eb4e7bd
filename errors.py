class TaskBoardError(Exception):
    """Base class for every failure the task board knows how to report"""


class TransportError(TaskBoardError):
    """Network or auth failure while reaching Notion or Claude"""


class ValidationError(TaskBoardError):
    """A collaborator answered with data that does not match the expected shape"""


class EmptyResultError(TaskBoardError):
    """The AI call succeeded but produced nothing usable"""


class PreconditionError(TaskBoardError):
    """Required input was empty, rejected before any network call"""


class StoreError(TaskBoardError):
    """Any failure coming back from the task store"""


class StoreValidationError(StoreError, ValidationError):
    """A Notion page is missing the properties a task needs"""

"""PostHog Wizard exception hierarchy.

All public exceptions inherit from WizardError, giving callers a single
base class to catch when they want to handle any wizard-specific failure
without swallowing unrelated errors.
"""


class WizardError(Exception):
    """Base exception for all wizard errors."""


class PathTraversalError(WizardError):
    """Raised when a path escapes the working directory.

    Covers ``../`` escapes and absolute paths pointing elsewhere. The
    check happens before any file is read or written.
    """


class QueryError(WizardError):
    """Raised when a request to the LLM gateway fails."""


class QueryValidationError(QueryError):
    """Raised when the LLM gateway returns data that does not match the schema."""


class RateLimitError(QueryError):
    """Raised when the LLM gateway reports that the usage limit was reached."""


class ProjectDataError(WizardError):
    """Raised when the PostHog project cannot be resolved from the API key."""


class ProjectFileError(WizardError):
    """Raised when a project file cannot be read as UTF-8 text."""


class AgentError(WizardError):
    """Raised when the integration agent fails or reports a blocking signal.

    Covers a missing MCP server, a missing setup resource, and API
    errors surfaced by the agent SDK.
    """


class PackageManagerError(WizardError):
    """Raised when a package manager command cannot be run or fails."""


class UserCancelledError(WizardError):
    """Raised when the user aborts an interactive prompt.

    The CLI exits with status 0 and no traceback for this error.
    """


class McpMissingError(AgentError):
    """Raised when the agent reports that the PostHog MCP server is unreachable."""


class ResourceMissingError(AgentError):
    """Raised when the agent cannot find a setup skill for the project."""

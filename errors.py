"""Exception types for the computer-use agent."""


class AgentError(Exception):
    """Base exception for fatal agent errors."""


class ConfigError(AgentError):
    """Raised when required configuration (e.g. the API key) is missing or invalid."""


class BrowserStartupError(AgentError):
    """Raised when the browser cannot open the starting location."""


class DecisionServiceError(AgentError):
    """Raised when a call to the decision service fails or returns an unusable body."""


class CaptureError(AgentError):
    """Raised when the screenshot or current URL cannot be read after an action."""


class ActionError(AgentError):
    """Raised when a browser primitive fails while executing an action."""


class MultiplePagesError(AgentError):
    """Raised when the browser ends up with more than the single owned page."""

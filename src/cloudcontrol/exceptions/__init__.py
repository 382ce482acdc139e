"""
Custom exception hierarchy for Cloud Control.

## Exception Hierarchy

```
CloudControlError (base)
├── ConfigurationError
│   ├── ConfigFileInvalidError
│   └── ConfigValidationError
├── ClusterError
│   ├── ClusterConnectionError
│   ├── UnsupportedOrchestratorError
│   └── ScaleRequestError
└── SlotIndexError (also an IndexError)
```

All custom exceptions carry a `user_message` for the console, a
`technical_message` for the log file, a `recoverable` flag and an optional
`recovery_hint`. See `cloudcontrol.exceptions.handlers` for the helpers
that turn them into console output.
"""

from .base import CloudControlError
from .cluster import (
    ClusterConnectionError,
    ClusterError,
    ScaleRequestError,
    SlotIndexError,
    UnsupportedOrchestratorError,
)
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .handlers import (
    ErrorContext,
    format_error_for_display,
    handle_errors,
    wrap_pydantic_error,
)

__all__ = [
    # Base
    "CloudControlError",
    # Cluster
    "ClusterConnectionError",
    "ClusterError",
    "ScaleRequestError",
    "SlotIndexError",
    "UnsupportedOrchestratorError",
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    # Handlers
    "ErrorContext",
    "format_error_for_display",
    "handle_errors",
    "wrap_pydantic_error",
]

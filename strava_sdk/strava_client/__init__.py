"""Request-dispatch components (rate limiter, error classifier, session, dispatcher)."""

from .dispatcher import Dispatcher, TokenSource, encode_body, encode_params  # noqa: F401
from .rate_limiter import RateLimiter, parse_rate_limit_headers  # noqa: F401
from .response_handling import (  # noqa: F401
    classify_error,
    classify_response,
    describe_error,
)
from .session import create_default_session  # noqa: F401

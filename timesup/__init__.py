"""TimesUp: a play-session time limiter."""

__version__ = "0.1.0"

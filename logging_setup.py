import logging
import sys

# Third-party loggers that are too chatty at INFO
_NOISY = ("httpx", "httpcore", "anthropic", "notion_client")


class _ThirdPartyNoiseFilter(logging.Filter):
    """Let our own modules through, keep library chatter to warnings and up"""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.split(".")[0] in _NOISY:
            return record.levelno >= logging.WARNING
        return True


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once, before the first log line"""
    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    handler.addFilter(_ThirdPartyNoiseFilter())
    root.addHandler(handler)

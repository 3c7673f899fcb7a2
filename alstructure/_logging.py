import logging
import sys

import structlog

# handler on the package logger only, the root logger and the global structlog
# configuration are left to the caller
_handler = logging.StreamHandler(sys.stderr)
_handler.setFormatter(logging.Formatter("%(message)s"))
_stdlib_logger = logging.getLogger("alstructure")
_stdlib_logger.addHandler(_handler)
_stdlib_logger.setLevel(logging.INFO)
_stdlib_logger.propagate = False

logger = structlog.wrap_logger(
    _stdlib_logger,
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
        structlog.dev.ConsoleRenderer(colors=False),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
)


def log_params(name, params):
    logger.info(
        f"Received parameters: \n{name}\n  "
        + "\n  ".join(f"--{k}={v}" for k, v in params.items())
    )

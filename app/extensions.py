import logging

from flask.logging import default_handler
from pythonjsonlogger.json import JsonFormatter


def configure_logging(app):
    # Structured JSON logs; app.logger is shared by every app instance,
    # so attach the handler only once.
    app.logger.removeHandler(default_handler)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    if any(isinstance(h.formatter, JsonFormatter) for h in app.logger.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        JsonFormatter(
            "%(levelname)s %(message)s %(name)s",
            rename_fields={"levelname": "level", "message": "msg"},
        )
    )
    app.logger.addHandler(handler)

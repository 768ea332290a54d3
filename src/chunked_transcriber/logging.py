import logging
import sys

from pythonjsonlogger import jsonlogger

_NOISY_LOGGERS = ["pika", "urllib3", "httpx", "google_genai"]


def setup_logging():
    """
    Configures structured JSON logging for the transcriber.

    Every record is written to stdout as a single JSON object carrying the
    timestamp, level, logger name, message and any ``extra`` fields, plus the
    trace_id and span_id injected by ddtrace when the worker runs traced.
    Chatty third-party client loggers are capped at WARNING so chunk-level
    progress stays readable.

    Returns:
        logging.Logger: The configured root logger instance.
    """
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s"
    )
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers = []
    root_logger.addHandler(stream_handler)

    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    return root_logger

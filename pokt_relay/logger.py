"""
pokt_relay.logger
-----------------
JSON-lines logging for relay components. Every record becomes one JSON
object per line (UTC ``ts``, ``level``, ``name``, ``msg``), so server bodies
and error messages with quotes or newlines stay parseable.
"""

import logging, json, sys, time, os


class JsonLineFormatter(logging.Formatter):
    converter = time.gmtime  # UTC timestamps

    def __init__(self, datefmt="%Y-%m-%dT%H:%M:%SZ"):
        super().__init__(datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        line = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            line["exc"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False)


def get_logger(name="pokt", level=logging.INFO, to_file=None):
    """Relay logger writing JSON lines to stdout and, optionally, a file."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = JsonLineFormatter()
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger

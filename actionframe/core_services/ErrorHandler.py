import logging
from contextlib import contextmanager

LOG_FORMAT = '[%(asctime)s] %(levelname)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ErrorHandler:
    def __init__(self, name="actionframe", log_to_console=True, log_to_file=None, log_level=None):
        """
        :param name: logger name
        :param log_to_console: whether to log to the terminal
        :param log_to_file: filepath string to enable file logging
        :param log_level: log level (e.g., logging.DEBUG); an unset logger defaults to INFO
        """
        self.logger = logging.getLogger(name)
        if log_level is not None:
            self.logger.setLevel(log_level)
        elif self.logger.level == logging.NOTSET:
            self.logger.setLevel(logging.INFO)

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        if log_to_console and not self._has_handler(logging.StreamHandler):
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if log_to_file and not self._has_handler(logging.FileHandler, log_to_file):
            file_handler = logging.FileHandler(log_to_file)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def _has_handler(self, handler_type, filename=None):
        for handler in self.logger.handlers:
            if isinstance(handler, handler_type):
                if isinstance(handler, logging.FileHandler):
                    return handler.baseFilename == filename
                return True
        return False

    @contextmanager
    def handle_errors(self, exception_map, fallback=None, log_level=logging.ERROR):
        """
        Swallow the mapped exceptions raised inside the block, logging them with
        the mapped message. Exceptions not in the map propagate.
        """
        try:
            yield
        except tuple(exception_map.keys()) as e:
            message = next(
                (msg for exc_type, msg in exception_map.items() if isinstance(e, exc_type)),
                "An error occurred."
            )
            self.logger.log(log_level, f"{message} | Exception: {type(e).__name__}: {e}")
            if fallback:
                fallback(message, e)

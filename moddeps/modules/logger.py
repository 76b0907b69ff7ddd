# moddeps/modules/logger.py
"""
Small per-module logger configured from the [logging] config section.

Console lines go to stderr so command output on stdout stays clean.
The log file (log_to_file = true) and its directory are created on the
first record written; when max_log_size_kb is set the file is moved to
<log_file>.1 once it grows past that size.
"""

import datetime
import json
import os
import sys
import threading

from moddeps.modules.config import config as _default_config

# level name -> (severity, ANSI color)
LEVELS = {
    "DEBUG": (10, "\033[90m"),
    "INFO": (20, "\033[94m"),
    "SUCCESS": (25, "\033[92m"),
    "WARNING": (30, "\033[93m"),
    "ERROR": (40, "\033[91m"),
}
RESET = "\033[0m"


class Logger:
    def __init__(self, name="moddeps", conf=None):
        conf = conf or _default_config
        self.name = name
        self.min_level = LEVELS.get(conf.get("logging", "level", fallback="warning").upper(), LEVELS["WARNING"])[0]
        self.log_format = conf.get("logging", "log_format", fallback="text").lower()
        self.use_utc = conf.getboolean("logging", "timestamp_utc", fallback=False)
        self.to_console = conf.getboolean("logging", "log_to_console", fallback=True)
        self.color_output = conf.getboolean("logging", "color_output", fallback=True) and self.log_format == "text"
        self.max_bytes = conf.getint("logging", "max_log_size_kb", fallback=0) * 1024

        # None means no file logging
        self.log_file = None
        if conf.getboolean("logging", "log_to_file", fallback=False):
            self.log_file = conf.getpath("logging", "log_file")
        self._lock = threading.Lock()

    # -----------------------
    # Formatting
    # -----------------------
    def _timestamp(self):
        tz = datetime.timezone.utc if self.use_utc else None
        return datetime.datetime.now(tz).strftime("%Y-%m-%d %H:%M:%S")

    def format(self, level, message):
        if self.log_format == "json":
            return json.dumps({"timestamp": self._timestamp(), "logger": self.name,
                               "level": level, "message": message})
        return f"[{self._timestamp()}] [{self.name}] [{level}] {message}"

    # -----------------------
    # Outputs
    # -----------------------
    def _emit_console(self, level, line):
        if self.color_output:
            line = f"{LEVELS[level][1]}{line}{RESET}"
        print(line, file=sys.stderr)

    def _emit_file(self, line):
        try:
            directory = os.path.dirname(self.log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            if self.max_bytes and os.path.isfile(self.log_file) \
                    and os.path.getsize(self.log_file) > self.max_bytes:
                os.replace(self.log_file, self.log_file + ".1")
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            # one complaint, then keep logging to the console only
            print(f"Logger: disabling log file {self.log_file}: {e}", file=sys.stderr)
            self.log_file = None

    # -----------------------
    # Public API
    # -----------------------
    def log(self, level, message):
        level = level.upper()
        if level not in LEVELS or LEVELS[level][0] < self.min_level:
            return
        line = self.format(level, message)
        with self._lock:
            if self.to_console:
                self._emit_console(level, line)
            if self.log_file:
                self._emit_file(line)

    def debug(self, message):
        self.log("DEBUG", message)

    def info(self, message):
        self.log("INFO", message)

    def success(self, message):
        self.log("SUCCESS", message)

    def warning(self, message):
        self.log("WARNING", message)

    def error(self, message):
        self.log("ERROR", message)

# moddeps/modules/config.py
import configparser
import os

DEFAULT_LOCATIONS = [
    "/etc/moddeps/moddeps.conf",
    os.path.expanduser("~/.config/moddeps/moddeps.conf"),
    os.path.join(os.getcwd(), "moddeps.conf"),
]

ENV_VAR = "MODDEPS_CONF"

DEFAULTS = {
    "moddeps": {
        "mods_dir": "",
        "game_path": "",
        "output_file": "mod-dependencies.dgml",
        "group_content_packs": "true",
        "render_png": "false",
        "dgml_image": os.path.join("lib", "DgmlImage", "DgmlImage.exe"),
        "case_insensitive_paths": "true",
    },
    "logging": {
        "level": "warning",
        "log_to_console": "true",
        "log_to_file": "false",
        "log_file": os.path.expanduser("~/.local/state/moddeps/moddeps.log"),
        "color_output": "true",
        "log_format": "text",
        "max_log_size_kb": "0",
        "timestamp_utc": "false",
    },
}


class ModDepsConfig:
    def __init__(self, locations=None):
        self.locations = locations if locations is not None else self._default_locations()
        self.config = configparser.ConfigParser()
        self.loaded_from = None
        self.reload()

    @staticmethod
    def _default_locations():
        env_path = os.environ.get(ENV_VAR)
        if env_path:
            return [env_path] + DEFAULT_LOCATIONS
        return list(DEFAULT_LOCATIONS)

    def reload(self):
        """(Re)load defaults, then the first config file found, if any."""
        self.config = configparser.ConfigParser()
        self.config.read_dict(DEFAULTS)
        self.loaded_from = None
        for path in self.locations:
            if os.path.isfile(path):
                self.config.read(path, encoding="utf-8")
                self.loaded_from = path
                return

    def get(self, section, option, fallback=None):
        try:
            return self.config.get(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def getboolean(self, section, option, fallback=False):
        try:
            return self.config.getboolean(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return fallback

    def getint(self, section, option, fallback=0):
        try:
            return self.config.getint(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return fallback

    def getlist(self, section, option, fallback=None, delimiter=","):
        raw = self.get(section, option, fallback="")
        if raw:
            return [item.strip() for item in raw.split(delimiter) if item.strip()]
        return fallback or []

    def getpath(self, section, option, fallback=None):
        """Return a user-expanded path, or fallback when the option is blank."""
        raw = (self.get(section, option, fallback="") or "").strip()
        if not raw:
            return fallback
        return os.path.expanduser(raw)

    def __getitem__(self, section):
        if section in self.config:
            return dict(self.config[section])
        raise KeyError(f"Section '{section}' not found.")

    def __contains__(self, section):
        return section in self.config


# default global instance shared by the other modules
config = ModDepsConfig()

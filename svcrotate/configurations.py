"""
Supports loading svcrotate's settings from one or more INI-style configuration files.
"""


import ast
import collections
import configparser
import logging
import os
import threading


from .exceptions import InvalidConfigurationError, verify_type, verify_callable


__author__ = 'Aaron Hosford'
__all__ = [
    "CONFIG_FILE_NAME_BASE",
    "get_default_config_search_dirs",
    "iter_config_search_paths",
    "load_config",
    "config_loader",
    "ConfigManager",
    "RotationSettings",
    "get_config_manager",
]


CONFIG_FILE_NAME_BASE = 'svcrotate'

CONFIG_EXTENSIONS = (
    '.ini',
    '.cfg',
    '.conf',
)

# Registered loaders, by name. Option values are converted from strings with these.
CONFIG_LOADERS = {}

# This is underscored because it should not be accessed directly.
_config_manager = None
_GLOBALS_LOCK = threading.RLock()


def config_loader(name):
    """
    A decorator for in-line registration of config loaders.

        @config_loader('port')
        def parse_port(string):
            ...

    :param name: The name to register the loader under.
    :return: A decorator which registers the function and returns it unchanged.
    """
    verify_type(name, str, non_empty=True)

    def registrar(function):
        verify_callable(function)
        CONFIG_LOADERS[name.lower()] = function
        return function

    return registrar


@config_loader('int')
def parse_int(string):
    """
    Convert a string to an integer value.

    :param string: The string to be parsed as an integer.
    :return: The parsed integer value.
    """
    result = ast.literal_eval(string.strip())
    if not isinstance(result, int) or isinstance(result, bool):
        raise ValueError("Could not interpret string as integer: %r" % string)
    return result


@config_loader('number')
def parse_number(string):
    """
    Parses a number from a string. Returns either an integer or a float.

    :param string: The string to be parsed.
    :return: The integer or float that was parsed from the string.
    """
    value = ast.literal_eval(string.strip())
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValueError("Could not interpret string as a number: %r" % string)
    return value


@config_loader('log_level')
def parse_log_level(string):
    """
    Parse a log level, e.g. INFO, WARNING, etc.

    :param string: An integer or the name of a log level.
    :return: The integer value of the log level.
    """
    string = string.strip()
    if string.isdigit():
        return int(string)
    level = logging.getLevelName(string.upper())
    if not isinstance(level, int):
        raise ValueError("Unrecognized log level: %r" % string)
    return level


def get_default_config_search_dirs():
    """
    Return a list containing the default configuration file search directories, in order of
    descending precedence. No checking is performed, so the directories returned may not exist.
    """
    base_paths = [
        '.',
        os.environ.get(CONFIG_FILE_NAME_BASE.upper() + '_CONFIG'),
        '~',
        '~/.config/' + CONFIG_FILE_NAME_BASE,
        os.path.dirname(__file__),
    ]
    return [base_path for base_path in base_paths if base_path is not None]


def iter_config_search_paths(file_name_base=CONFIG_FILE_NAME_BASE, dirs=None, extensions=None):
    """
    Iterate over the search paths for a configuration file. Only paths that actually exist are
    included.

    :param file_name_base: The name of the config file, minus the extension.
    :param dirs: The directories in which to search.
    :param extensions: The file name extensions to check for.
    :return: An iterator over the config files in order of descending precedence.
    """
    if dirs is None:
        dirs = get_default_config_search_dirs()
    if extensions is None:
        extensions = CONFIG_EXTENSIONS
    covered = set()
    for base_path in dirs:
        base_path = os.path.expanduser(base_path)
        base_path = os.path.expandvars(base_path)
        base_path = os.path.abspath(base_path)
        base_path = os.path.normcase(base_path)
        base_path = os.path.normpath(base_path)
        if not os.path.isdir(base_path):
            continue
        for extension in extensions:
            full_path = os.path.join(base_path, file_name_base + extension)
            if full_path not in covered:
                covered.add(full_path)
                if os.path.isfile(full_path):
                    yield full_path


def load_config(file_name_base=CONFIG_FILE_NAME_BASE, dirs=None, extensions=None, extra_paths=(),
                error=False):
    """
    Load one or more configuration files in order of precedence. Files of lower precedence are
    read first, so that values in files of higher precedence override them. Extra paths take
    precedence over everything found in the search directories.

    :param file_name_base: The name of the config file(s), minus the extension.
    :param dirs: The directories in which to search.
    :param extensions: The file name extensions to check for.
    :param extra_paths: Explicitly requested config files, in order of descending precedence.
    :param error: Whether to raise exceptions when the parser cannot read a config file.
    :return: A configparser.ConfigParser instance containing the loaded parameters.
    """
    config = configparser.ConfigParser()
    paths = list(extra_paths) + list(iter_config_search_paths(file_name_base, dirs, extensions))
    for path in reversed(paths):
        if not os.path.isfile(path):
            if error:
                raise FileNotFoundError(path)
            continue
        try:
            config.read(path, encoding='utf-8')
        except configparser.Error:
            if error:
                raise
    return config


class ConfigManager:
    """
    A ConfigManager converts the string values of a configuration into the objects they represent.
    """

    def __init__(self, config, loaders=None):
        if isinstance(config, str):
            path = config
            config = configparser.ConfigParser()
            config.read(path, encoding='utf-8')
        verify_type(config, configparser.ConfigParser)

        self._config = config
        self._loaders = CONFIG_LOADERS if loaders is None else loaders
        self._config_lock = threading.RLock()

    def get_loader(self, name):
        """
        Lookup a loader by name.

        :param name: The name of the loader.
        :return: The loader.
        """
        verify_type(name, str, non_empty=True)
        if name.lower() not in self._loaders:
            raise KeyError(name)
        return self._loaders[name.lower()]

    def get_option(self, section, option, default=NotImplemented):
        """
        Return the raw string value of the option.

        :param section: The section name.
        :param option: The option name.
        :param default: The default value to return if no such option exists.
        :return: The raw string value of the option, or the default if it doesn't exist.
        """
        verify_type(section, str, non_empty=True)
        verify_type(option, str, non_empty=True)
        with self._config_lock:
            if self._config.has_option(section, option):
                return self._config.get(section, option, raw=True)
            if default is NotImplemented:
                if self._config.has_section(section):
                    raise KeyError(option)
                else:
                    raise KeyError(section)
            return default

    def load_option(self, section, option, loader=None, default=NotImplemented):
        """
        Load an option from a specific section as an object. An empty value is treated as
        missing.

        :param section: The name of the section where the option appears.
        :param option: The name of the option to load.
        :param loader: The (optional) loader used to convert the option's value. The loader can be
            a function or the name of a registered loader.
        :param default: The default value to use if the section or option does not exist. If no
            default value is specified, or the default is set to NotImplemented, an exception will
            be raised if the section or option does not exist. (Using NotImplemented for this
            instead of None enables the use of None as a default value.)
        :return: The loaded object, or the default value.
        """
        try:
            content = self.get_option(section, option)
        except KeyError:
            if default is NotImplemented:
                raise
            return default

        if not content.strip():
            if default is NotImplemented:
                raise KeyError(option)
            return default

        if isinstance(loader, str):
            loader = self.get_loader(loader)
        elif loader is None:
            loader = str

        try:
            return loader(content)
        except (ValueError, SyntaxError) as exc:
            raise InvalidConfigurationError(
                "Invalid value for option %r in section %r: %r" % (option, section, content)
            ) from exc


class RotationSettings(collections.namedtuple('RotationSettings',
                                              'max_workers liveness_port liveness_timeout '
                                              'liveness_attempts liveness_interval '
                                              'restart_wait_seconds vault_directory '
                                              'log_level log_file log_format')):
    """
    The settings that control a rotation run.
    """

    __slots__ = ()

    @classmethod
    def load(cls, manager):
        """
        Load the settings through a config manager. Missing options take their defaults.

        :param manager: A ConfigManager instance.
        :return: A new RotationSettings instance.
        """
        verify_type(manager, ConfigManager)

        settings = cls(
            max_workers=manager.load_option('Inventory', 'Max Workers', 'int', None),
            liveness_port=manager.load_option('Inventory', 'Liveness Port', 'int', 135),
            liveness_timeout=manager.load_option('Inventory', 'Liveness Timeout', 'number', 2),
            liveness_attempts=manager.load_option('Inventory', 'Liveness Attempts', 'int', 1),
            liveness_interval=manager.load_option('Inventory', 'Liveness Interval', 'number', 1),
            restart_wait_seconds=manager.load_option('Rotation', 'Restart Wait Seconds', 'number', 30),
            vault_directory=manager.load_option('Vault', 'Vault Directory', str, None),
            log_level=manager.load_option('Logging', 'Level', 'log_level', logging.INFO),
            log_file=manager.load_option('Logging', 'File', str, None),
            log_format=manager.load_option('Logging', 'Format', str, None),
        )
        settings.validate()
        return settings

    @classmethod
    def defaults(cls):
        """Return the settings used when no configuration is present."""
        return cls.load(ConfigManager(configparser.ConfigParser()))

    def validate(self):
        """Raise an InvalidConfigurationError if any setting is out of range."""
        if self.max_workers is not None and self.max_workers < 1:
            raise InvalidConfigurationError("Max Workers must be at least 1.")
        if not 0 < self.liveness_port < 65536:
            raise InvalidConfigurationError("Liveness Port must be a valid TCP port.")
        if self.liveness_timeout <= 0:
            raise InvalidConfigurationError("Liveness Timeout must be positive.")
        if self.liveness_attempts < 1:
            raise InvalidConfigurationError("Liveness Attempts must be at least 1.")
        if self.liveness_interval < 0:
            raise InvalidConfigurationError("Liveness Interval cannot be negative.")
        if self.restart_wait_seconds <= 0:
            raise InvalidConfigurationError("Restart Wait Seconds must be positive.")


def get_config_manager(extra_paths=(), refresh=False):
    """
    Get the configuration manager for svcrotate.

    :param extra_paths: Explicitly requested config files, which take precedence over the search
        directories. Providing any forces a refresh.
    :param refresh: Whether to reload the configuration information from disk.
    :return: A ConfigManager instance.
    """
    with _GLOBALS_LOCK:
        global _config_manager
        if refresh or extra_paths or _config_manager is None:
            config = load_config(extra_paths=extra_paths, error=bool(extra_paths))
            _config_manager = ConfigManager(config)
        assert isinstance(_config_manager, ConfigManager)
        return _config_manager

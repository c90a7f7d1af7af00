class BulletlogError(Exception):
    """Base for errors the CLI reports and exits on."""


class LogFileError(BulletlogError):
    """The log file or its temporary replacement could not be created, read or written."""


class MalformedHeaderError(BulletlogError):
    """A non-empty log does not start with a valid `## YYYYMMDD` header."""


class ConfigError(BulletlogError):
    """A configured value (e.g. the date override) is invalid."""


class HeaderParseError(ValueError):
    pass


class TaskIndexError(ValueError):
    pass

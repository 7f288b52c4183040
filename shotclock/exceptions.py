class ShotClockError(Exception):
    pass


class SettingsValidationError(ShotClockError, ValueError):
    pass


class ActionFormatError(ShotClockError, ValueError):
    pass


class SessionFormatError(ShotClockError, ValueError):
    pass

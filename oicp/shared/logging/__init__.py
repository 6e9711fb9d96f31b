import logging

LOG_LEVEL = "INFO"
# Below DEBUG; the XML codec logs every payload it handles at this level
TRACE = logging.DEBUG - 5


def _init_logger(log_level: str = LOG_LEVEL):
    """
    Sets the level of the root logger, e.g. to the LOG_LEVEL read by the EMP
    or CPO Config, and registers the TRACE level
    """
    logging.getLogger().setLevel(log_level)

    def trace(self, message, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, message, args, **kwargs)

    level_name = "TRACE"
    logging.addLevelName(TRACE, level_name)
    setattr(logging, level_name, TRACE)
    setattr(logging.getLoggerClass(), level_name.lower(), trace)

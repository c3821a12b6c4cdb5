"""Logger hierarchy for simpleforce.

Every module logs to a child of the ``simpleforce`` logger. The library never
installs handlers beyond a ``NullHandler``; configuring output is left to the
application.
"""

import logging

PACKAGE_LOGGER_NAME = "simpleforce"

pkg_root = logging.getLogger(PACKAGE_LOGGER_NAME)
pkg_root.addHandler(logging.NullHandler())


def getLogger(name: str | None = None) -> logging.Logger:
    if not name:
        return pkg_root
    if name.startswith(PACKAGE_LOGGER_NAME + "."):
        name = name[len(PACKAGE_LOGGER_NAME) + 1 :]
    return pkg_root.getChild(name)

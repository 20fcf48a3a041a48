"""Version string reported by the health endpoint.

``APP_VERSION`` overrides the installed package version, which is used
when the variable is unset.
"""

import os
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("tabletop-server")
    except PackageNotFoundError:
        return "dev"


APP_VERSION: str = os.environ.get("APP_VERSION") or _package_version()

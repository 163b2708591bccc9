"""Configuration package for termprofile.

All constants live in `config.settings`; they are re-exported here so that
`from config import DEFAULT_RECENTS_SIZE` keeps working.
"""

from .settings import *  # noqa: F401,F403
from .settings import __all__  # noqa: F401

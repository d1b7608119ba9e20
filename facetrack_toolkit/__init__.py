"""Top-level package for FaceTrack Toolkit.

Manages named configurations of tracking modules and keeps the enabled /
disabled module folders on disk in line with the active one. Front-ends
(GUI, CLI) should only depend on the public API exposed here.
"""

from .core.models import Configuration
from .core.services import ConfigurationRepository

__all__: list[str] = [
    "Configuration",
    "ConfigurationRepository",
]

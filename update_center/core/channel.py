import logging
from typing import Optional, Sequence

from update_center.models.app_version import AppVersionPackage

logger = logging.getLogger(__name__)


def select_package(
    packages: Sequence[AppVersionPackage], channel: Optional[str]
) -> Optional[AppVersionPackage]:
    """Pick the package to hand out for ``channel``.

    An enabled package on the exact channel wins. When the channel has no package
    the first enabled package is used instead, in catalog order. Returns None when
    the version has no enabled package at all.
    """
    enabled = [pkg for pkg in packages or () if pkg.enabled]

    exact = next((pkg for pkg in enabled if pkg.channel == channel), None)
    if exact is not None:
        return exact

    # channel absent on this version: first enabled package
    fallback = enabled[0] if enabled else None
    if fallback is not None:
        logger.debug("No %r package, falling back to channel %r", channel, fallback.channel)
    return fallback

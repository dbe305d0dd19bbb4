"""Client-facing update decisions: check, latest and history.

``UpdateResolver.resolve`` is a small state machine::

    EVALUATING -> UP_TO_DATE
    EVALUATING -> UPDATE_OFFERED
    EVALUATING -> GRAY_EXCLUDED_FALLBACK -> UP_TO_DATE | UPDATE_OFFERED

The resolver holds no mutable state of its own; every call reads the injected
catalog and returns a fresh result.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from update_center.config import settings
from update_center.core import rollout, version_codec
from update_center.core.channel import select_package
from update_center.core.errors import NotFoundError
from update_center.core.localization import resolve_description
from update_center.models.app_version import AppVersion, AppVersionPackage, Platform, UpdateType
from update_center.schemas.update import (
    CheckUpdateRequest,
    CheckUpdateResponse,
    LatestVersionResponse,
    VersionHistoryItem,
    VersionHistoryResponse,
)
from update_center.services.catalog import VersionCatalog

logger = logging.getLogger(__name__)


class ResolutionState(str, enum.Enum):
    EVALUATING = "evaluating"
    GRAY_EXCLUDED_FALLBACK = "gray_excluded_fallback"
    UP_TO_DATE = "up_to_date"
    UPDATE_OFFERED = "update_offered"


TERMINAL_STATES = frozenset({ResolutionState.UP_TO_DATE, ResolutionState.UPDATE_OFFERED})


@dataclass
class _Evaluation:
    request: CheckUpdateRequest
    channel: str
    current_code: int
    candidate: Optional[AppVersion] = None
    package: Optional[AppVersionPackage] = None


@dataclass
class Resolution:
    state: ResolutionState
    current_code: int
    version: Optional[AppVersion] = None
    package: Optional[AppVersionPackage] = None
    path: Tuple[ResolutionState, ...] = field(default_factory=tuple)

    @property
    def need_update(self) -> bool:
        return self.state is ResolutionState.UPDATE_OFFERED


def effective_update_type(version: AppVersion, current_code: int) -> UpdateType:
    """Stored update type, escalated to FORCE below the minimum supported version."""
    if version.min_support_version_code is not None and current_code < version.min_support_version_code:
        return UpdateType.FORCE
    return version.update_type or UpdateType.OPTIONAL


class UpdateResolver:
    def __init__(
        self,
        catalog: VersionCatalog,
        default_channel: Optional[str] = None,
        gray_fail_open: Optional[bool] = None,
    ):
        self.catalog = catalog
        self.default_channel = default_channel or settings.DEFAULT_CHANNEL
        self.gray_fail_open = settings.GRAY_RELEASE_FAIL_OPEN if gray_fail_open is None else gray_fail_open
        self._transitions: Dict[ResolutionState, Callable[[_Evaluation], ResolutionState]] = {
            ResolutionState.EVALUATING: self._evaluate,
            ResolutionState.GRAY_EXCLUDED_FALLBACK: self._fall_back,
        }

    # ==================== state machine ====================

    def resolve(self, request: CheckUpdateRequest) -> Resolution:
        evaluation = _Evaluation(
            request=request,
            channel=request.channel or self.default_channel,
            current_code=version_codec.encode(request.current_version),
        )
        state = ResolutionState.EVALUATING
        path = [state]
        while state not in TERMINAL_STATES:
            state = self._transitions[state](evaluation)
            path.append(state)

        if state is ResolutionState.UP_TO_DATE:
            return Resolution(state, evaluation.current_code, path=tuple(path))
        return Resolution(
            state,
            evaluation.current_code,
            version=evaluation.candidate,
            package=evaluation.package,
            path=tuple(path),
        )

    def _evaluate(self, evaluation: _Evaluation) -> ResolutionState:
        request = evaluation.request
        candidate = self.catalog.latest_published(request.platform)
        if candidate is None or candidate.version_code <= evaluation.current_code:
            return ResolutionState.UP_TO_DATE

        evaluation.candidate = candidate
        evaluation.package = select_package(self.catalog.packages_of(candidate.id), evaluation.channel)

        if not candidate.is_partial_gray:
            return ResolutionState.UPDATE_OFFERED

        if not request.device_id:
            # no identifier to bucket
            if self.gray_fail_open:
                return ResolutionState.UPDATE_OFFERED
            logger.info(f"Gray release {candidate.version} withheld from device without id")
            return ResolutionState.GRAY_EXCLUDED_FALLBACK

        if rollout.is_included(request.device_id, candidate.gray_percent):
            return ResolutionState.UPDATE_OFFERED

        logger.info(
            f"Device {request.device_id} outside gray wave of {candidate.version} "
            f"({candidate.gray_percent}%)"
        )
        return ResolutionState.GRAY_EXCLUDED_FALLBACK

    def _fall_back(self, evaluation: _Evaluation) -> ResolutionState:
        fallback = self.catalog.latest_published(
            evaluation.request.platform,
            min_version_code_exclusive=evaluation.current_code,
            require_full_release=True,
        )
        if fallback is None:
            evaluation.candidate = None
            evaluation.package = None
            return ResolutionState.UP_TO_DATE

        evaluation.candidate = fallback
        evaluation.package = select_package(self.catalog.packages_of(fallback.id), evaluation.channel)
        return ResolutionState.UPDATE_OFFERED

    # ==================== client operations ====================

    def check_update(self, request: CheckUpdateRequest) -> CheckUpdateResponse:
        resolution = self.resolve(request)
        if not resolution.need_update:
            return CheckUpdateResponse(need_update=False)

        version = resolution.version
        package = resolution.package
        update_type = effective_update_type(version, resolution.current_code)
        if update_type is UpdateType.FORCE and version.update_type is not UpdateType.FORCE:
            logger.info(
                f"Update to {version.version} forced: {request.current_version} "
                f"is below {version.min_support_version}"
            )

        return CheckUpdateResponse(
            need_update=True,
            latest_version=version.version,
            update_type=update_type,
            title=version.title,
            description=resolve_description(version.description, version.i18n_description, request.language),
            download_url=package.download_url if package else "",
            file_size=int(package.file_size or 0) if package else 0,
            checksum=(package.checksum or None) if package else None,
            min_support_version=version.min_support_version,
        )

    def get_latest_version(
        self,
        platform: Optional[Platform] = None,
        channel: Optional[str] = None,
        language: Optional[str] = None,
    ) -> LatestVersionResponse:
        """Top published version regardless of gray status."""
        version = self.catalog.latest_published(platform)
        if version is None:
            raise NotFoundError("No published version available")

        package = select_package(self.catalog.packages_of(version.id), channel or self.default_channel)

        return LatestVersionResponse(
            version=version.version,
            version_code=version.version_code,
            platform=version.platform,
            title=version.title,
            description=resolve_description(version.description, version.i18n_description, language),
            update_type=version.update_type,
            release_date=version.release_date,
            download_url=package.download_url if package else "",
            file_size=int(package.file_size or 0) if package else 0,
            checksum=(package.checksum or None) if package else None,
            min_support_version=version.min_support_version,
        )

    def get_version_history(
        self,
        platform: Optional[Platform] = None,
        page: int = 1,
        page_size: int = 10,
        language: Optional[str] = None,
    ) -> VersionHistoryResponse:
        page = max(page, 1)
        page_size = max(page_size, 1)
        versions, total = self.catalog.published_page(platform, (page - 1) * page_size, page_size)

        items: List[VersionHistoryItem] = [
            VersionHistoryItem(
                version=v.version,
                version_code=v.version_code,
                platform=v.platform,
                title=v.title,
                description=resolve_description(v.description, v.i18n_description, language),
                update_type=v.update_type,
                release_date=v.release_date,
            )
            for v in versions
        ]
        return VersionHistoryResponse(list=items, total=total, page=page, page_size=page_size)

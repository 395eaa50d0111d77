"""
Dashboard State Module

Immutable screen state plus a pure reducer. The Streamlit app keeps one
DashboardState in the session and replaces it through `reduce()`; nothing
else mutates it.

Window fetches are tagged with a generation number. Switching granularity
or refreshing bumps the generation, and a WindowLoaded carrying an older
generation is dropped, so a slow stale fetch cannot overwrite fresher data.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Union

from Field_Reference.level_thresholds import LEVEL_THRESHOLDS
from .samples import Granularity, LiveReading, SeriesType
from .statistics import WaterStatistics, compute_statistics
from .window_loader import WindowResult


# -----------------------------------------------------------------------------
# Enums & Data Classes
# -----------------------------------------------------------------------------

class Tab(Enum):
    DASHBOARD = "dashboard"
    ANALISIS = "analisis"
    PENGATURAN = "pengaturan"


def _default_settings() -> Dict[str, Any]:
    d = LEVEL_THRESHOLDS['settings']
    return {
        'refresh_interval': d.REFRESH_INTERVAL_S,
        'theme': d.THEME,
        'location': d.LOCATION,
        'notifications_enabled': True,
        'email_notifications': True,
        'sms_notifications': False,
        'threshold_safe': d.SAFE_PERCENT,
        'threshold_warning': d.WARNING_PERCENT,
        'threshold_danger': d.DANGER_PERCENT,
        'profile_name': d.PROFILE_NAME,
        'profile_email': d.PROFILE_EMAIL,
        'profile_phone': d.PROFILE_PHONE,
    }


@dataclass(frozen=True)
class SettingsDraft:
    """Settings tab values. Local to the session, never persisted."""
    values: Dict[str, Any] = field(default_factory=_default_settings)

    def get(self, key: str) -> Any:
        return self.values[key]

    def updated(self, key: str, value: Any) -> "SettingsDraft":
        if key not in self.values:
            raise KeyError(f"Unknown setting: {key}")
        return SettingsDraft(values={**self.values, key: value})


@dataclass(frozen=True)
class DashboardState:
    active_tab: Tab = Tab.DASHBOARD
    granularity: Granularity = Granularity.DAILY
    series: SeriesType = SeriesType.HEIGHT
    result: Optional[WindowResult] = None
    statistics: WaterStatistics = field(default_factory=WaterStatistics)
    live: LiveReading = field(default_factory=LiveReading)
    error: Optional[str] = None
    loading: bool = True
    generation: int = 0
    settings: SettingsDraft = field(default_factory=SettingsDraft)

    @property
    def window(self):
        return self.result.window if self.result is not None else ()

    @property
    def current_height(self) -> float:
        limits = LEVEL_THRESHOLDS['instrument']
        return self.live.height if self.live.height is not None else limits.DEFAULT_HEIGHT

    @property
    def current_rate(self) -> float:
        limits = LEVEL_THRESHOLDS['instrument']
        return self.live.rate if self.live.rate is not None else limits.DEFAULT_RATE


# -----------------------------------------------------------------------------
# Actions
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TabSelected:
    tab: Tab


@dataclass(frozen=True)
class GranularitySelected:
    granularity: Granularity


@dataclass(frozen=True)
class SeriesSelected:
    series: SeriesType


@dataclass(frozen=True)
class RefreshRequested:
    pass


@dataclass(frozen=True)
class WindowLoaded:
    generation: int
    result: WindowResult


@dataclass(frozen=True)
class LiveReadingReceived:
    reading: LiveReading


@dataclass(frozen=True)
class ErrorDismissed:
    pass


@dataclass(frozen=True)
class SettingsChanged:
    key: str
    value: Any


Action = Union[TabSelected, GranularitySelected, SeriesSelected, RefreshRequested,
               WindowLoaded, LiveReadingReceived, ErrorDismissed, SettingsChanged]


# -----------------------------------------------------------------------------
# Reducer
# -----------------------------------------------------------------------------

def _recompute(state: DashboardState) -> WaterStatistics:
    return compute_statistics(state.window, state.current_height, state.current_rate)


def reduce(state: DashboardState, action: Action) -> DashboardState:
    """Return the next state; `state` is left untouched."""
    if isinstance(action, TabSelected):
        return replace(state, active_tab=action.tab)

    if isinstance(action, GranularitySelected):
        if action.granularity is state.granularity and state.result is not None:
            return state
        return replace(state, granularity=action.granularity, loading=True,
                       generation=state.generation + 1)

    if isinstance(action, RefreshRequested):
        return replace(state, loading=True, generation=state.generation + 1)

    if isinstance(action, SeriesSelected):
        return replace(state, series=action.series)

    if isinstance(action, WindowLoaded):
        if action.generation != state.generation:
            return state
        loaded = replace(state, result=action.result, loading=False,
                         error=action.result.error or state.error)
        return replace(loaded, statistics=_recompute(loaded))

    if isinstance(action, LiveReadingReceived):
        updated = replace(state, live=action.reading)
        return replace(updated, statistics=_recompute(updated))

    if isinstance(action, ErrorDismissed):
        return replace(state, error=None)

    if isinstance(action, SettingsChanged):
        return replace(state, settings=state.settings.updated(action.key, action.value))

    raise TypeError(f"Unknown action: {action!r}")

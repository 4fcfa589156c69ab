"""Board preference endpoints."""
from fastapi import APIRouter, Depends

from api.dependencies import get_preferences_service
from schemas.board import ThemePreference
from services.preferences_service import PreferencesService

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("/theme", response_model=ThemePreference)
async def get_theme(
    preferences: PreferencesService = Depends(get_preferences_service),
) -> ThemePreference:
    """Get the persisted theme choice."""
    return ThemePreference(is_dark_mode=preferences.is_dark_mode)


@router.put("/theme", response_model=ThemePreference)
async def set_theme(
    data: ThemePreference,
    preferences: PreferencesService = Depends(get_preferences_service),
) -> ThemePreference:
    """Set the theme choice."""
    return ThemePreference(is_dark_mode=preferences.set_dark_mode(data.is_dark_mode))


@router.post("/theme/toggle", response_model=ThemePreference)
async def toggle_theme(
    preferences: PreferencesService = Depends(get_preferences_service),
) -> ThemePreference:
    """Flip between light and dark."""
    return ThemePreference(is_dark_mode=preferences.toggle_theme())

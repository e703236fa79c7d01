"""Named spin presets."""

from spinwheel.models import SpinSettings

DEFAULT_SPIN_SETTINGS = SpinSettings(
    min_spins=8,
    max_spins=12,
    min_duration=5200,
    max_duration=7800,
)

# Longer, slower spin for single-shot reveals
DRAMATIC_SPIN_SETTINGS = SpinSettings(
    min_spins=14,
    max_spins=18,
    min_duration=9800,
    max_duration=14000,
)

"""
Predefined traffic configurations.
"""

from .models import GeneratorConfig

# Four groups with steady rates: two outliers under a 30% cap at threshold 40
SCENARIO_A_CONFIG = GeneratorConfig(
    group_rates={"A": 99.0, "B": 65.0, "C": 50.0, "D": 1.0},
    event_interval_seconds=1.0,
)


# Bursts for five rounds then silence, rates decay back to normal
GETTING_STARTED_CONFIG = GeneratorConfig(
    group_rates={"289": 99.0, "3434": 49.0, "3231": 64.0, "5643": 1.0},
    event_interval_seconds=1.0,
    active_rounds=5,
)


# Many quiet groups with random bursts, exercises promotion and swapping
BURSTY_CONFIG = GeneratorConfig(
    group_rates={f"tenant-{i + 1:02d}": 10.0 for i in range(20)},
    event_interval_seconds=1.0,
    jitter=0.2,
    burst_probability=0.05,
    burst_multiplier=8.0,
)


# Development/Testing (fast and small)
DEV_CONFIG = GeneratorConfig(
    group_rates={"dev-1": 50.0, "dev-2": 5.0},
    event_interval_seconds=0.5,
)

"""
experiments/scenarios.py

Named scenario overrides applied on top of config/baseline.yaml. Each entry is
merged recursively, so only the fields that change need to be listed.
"""

BASELINE = {
    "name": "baseline",
    "overrides": {},
}

EXTRA_LANE = {
    "name": "extra_lane",
    "overrides": {
        "params": {
            "num_stations": 3,
        },
    },
}

PEAK_HOUR = {
    "name": "peak_hour",
    "overrides": {
        "params": {
            "num_stations": 4,
            "arrival_rate": 40,
            "screen_prob": 0.05,
        },
    },
}

HEIGHTENED_SCREENING = {
    "name": "heightened_screening",
    "overrides": {
        "params": {
            "arrival_rate": 12,
            "mu1": 40,
            "sigma1": 15,
            "mu2": 180,
            "sigma2": 60,
            "screen_prob": 0.2,
        },
    },
}

SCENARIOS = [BASELINE, EXTRA_LANE, PEAK_HOUR, HEIGHTENED_SCREENING]

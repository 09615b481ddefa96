"""MASC module runner user configuration.

This is the user-facing configuration file. Modify settings here to choose
the data, date range and modules. Advanced settings are in
src/masclab/schemas/param.py

Usage:
    python scripts/run_masc_modules.py run scripts/user_config.py
    python scripts/run_masc_modules.py run scripts/user_config.py --modules flake_geometry
"""

CONFIG = {
    # ========================================================================
    # DATA
    # ========================================================================
    "PATH_TO_FLAKES": "/data/masc/2019",   # Root of flake images; cache/ lives here
    "QUALITY": "good",                     # "good" or "all"

    # ========================================================================
    # DATE RANGE (bare dates cover the whole day)
    # ========================================================================
    "DATESTART": "2019-01-10",
    "DATEEND": "2019-01-12",

    # ========================================================================
    # INSTRUMENT
    # ========================================================================
    "CAM_FOV": [33.65, 32.89, 36.80],      # px/mm for cameras 0, 1, 2
    "LINE_FILL": 200,                      # Largest gap closed when filling, in microns

    # ========================================================================
    # MODULES (run in this order)
    # ========================================================================
    "MODULES": ["flake_geometry", "flake_shape"],

    "LOG_LEVEL": "INFO",
}

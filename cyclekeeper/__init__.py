"""CycleKeeper — offline-first menstrual cycle journal.

Subpackages:
    models/    — Canonical cycle record, input and tagged identifier models
    services/  — Supabase remote store adapter and on-device cache
    sync/      — Connectivity monitor, session state, sync coordinator, export
    analytics/ — Averages, variation ranges, irregularity flag, trend series
    routers/   — FastAPI endpoints exposing the collaborator contract

Core modules:
    config        — Environment settings (pydantic-settings)
    config_loader — Load/validate/hot-reload tracker_config.yaml
    exceptions    — Validation, lookup and remote store errors
"""

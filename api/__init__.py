"""
FastAPI layer for the pest diagnosis service.

Exposes:
- `main`    : app factory (`create_app`) and the `main()` server entry point
- `config`  : environment-driven `Settings`
- `uploads` : upload filtering and scoped temporary storage
- `schemas` : response models
"""

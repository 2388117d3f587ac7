#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Uses the SQLite file from DATABASE_URL (or the default under backend/), so
tables are created on startup and no migration step is needed locally.
"""
import os
from pathlib import Path
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

os.environ.setdefault("BOOKING_LOCK_BACKEND", "local")

import uvicorn

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    print(f"Starting menu booking API on http://localhost:{port}")
    print(f"API Docs: http://localhost:{port}/docs")

    uvicorn.run("menu_booking.main:app", host="0.0.0.0", port=port, reload=True, log_level="info")

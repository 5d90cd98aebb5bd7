#!/usr/bin/env python3
# backend/run_celery_beat.py
"""
Development Celery beat + worker runner for the closed-hours job.

Use this instead of the API's in-process scheduler (set SCHEDULER_ENABLED=false).
"""
import os
from pathlib import Path
import subprocess
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

if __name__ == "__main__":
    print("🚀 Starting Celery worker with embedded beat…")
    print("⏰ Closed hours are written at local midnight")
    print("")

    cmd = [
        sys.executable,
        "-m",
        "celery",
        "-A",
        "seatbook.tasks.celery_app",
        "worker",
        "--beat",
        "--loglevel=info",
        "--concurrency=1",
    ]

    subprocess.run(cmd)

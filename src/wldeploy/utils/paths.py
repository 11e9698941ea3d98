"""Deployment log file locations."""
from pathlib import Path


def deployment_log_file(build, task_id: str) -> Path:
    """Per-run log file: <log_dir>/<job_name>/<build_id>/deployment-<task_id>.log"""
    return Path(build.log_dir) / build.job_name / str(build.build_id) / f"deployment-{task_id}.log"

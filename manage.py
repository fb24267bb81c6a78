#!/usr/bin/env python
"""
Command line entry point for the MediSync clinic backend.

Points Django at ``medisync.settings`` and hands control to the
management utility (``runserver``, ``migrate``, ``ensure_sample_users``,
``check_db_health`` and friends).
"""
import os
import sys


def main() -> None:
    """Run administrative tasks for the clinic backend."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'medisync.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Is it installed and available on your "
            "PYTHONPATH? Did you forget to activate a virtual environment?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()

"""
Main module entry point.

``python -m iiot_coordinator.main`` starts the Celery worker.
"""

from .worker import main

if __name__ == "__main__":
    main()

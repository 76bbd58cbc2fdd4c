"""
Infrastructure Layer

Adapters for the ports declared by the domain: MongoDB repositories, the
HTTP device registry gateway, the Celery command channel and tasks, and the
dependency health checks.
"""

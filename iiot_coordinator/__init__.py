"""
IIoT Coordinator

Alert classification and command coordination for production lines.

Layer Structure:
- Domain: Alerts, decisions, commands and the pure rule engine
- Application: Use cases wiring the directory, engine and dispatcher
- Infrastructure: Registry client, MongoDB, Celery tasks and channels
- Presentation: Operational HTTP endpoints
- Shared: Logging, environment handling and the TTL cache
- Main: Composition root, configuration and entry points
"""

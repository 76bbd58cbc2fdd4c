"""
Presentation Layer

HTTP surface of the coordinator. Alerts arrive through the Celery worker;
this layer only carries operational endpoints.
"""

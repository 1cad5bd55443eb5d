"""Infrastructure layer for the Challenge Evaluation Engine.

Modules:
    metrics     Prometheus metrics registry and evaluation recording helpers.
"""

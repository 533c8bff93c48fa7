"""
Demo Service

Minimal HTTP workload for exercising deployment, health check and metrics
collection tooling.
"""

__version__ = "1.0.0"

"""Eventline Resource Provider Package.

To use the API client:
    from eventline_provider.core.eventline import EventlineClient, ProjectService

To reconcile declared resources:
    from eventline_provider.resources import ProjectReconciler, JobReconciler
"""
# Note: subpackages are not imported here so that the client library can be
# used without loading configuration from the environment.

__version__ = "0.1.0"

"""Metrics sinks. Import the backend module you need:

    from authzrules.metrics.prometheus import PrometheusMetrics
    from authzrules.metrics.otel import OpenTelemetryMetrics
"""

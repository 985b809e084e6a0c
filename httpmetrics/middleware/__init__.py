from httpmetrics.middleware.metrics import PrometheusMiddleware

__all__ = ["PrometheusMiddleware"]

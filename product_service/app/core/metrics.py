"""Prometheus counters for product mutations."""

from dataclasses import dataclass
from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, Counter, generate_latest


@dataclass
class ProductMetrics:
    created: Counter
    deleted: Counter

    @classmethod
    def build(cls, registry: CollectorRegistry, prefix: str = "products") -> "ProductMetrics":
        # prometheus_client appends the _total suffix on exposition
        return cls(
            created=Counter(
                f"{prefix}_created",
                "Total number of products created",
                registry=registry,
            ),
            deleted=Counter(
                f"{prefix}_deleted",
                "Total number of products deleted",
                registry=registry,
            ),
        )


_product_metrics: Optional[ProductMetrics] = None


def get_product_metrics() -> ProductMetrics:
    """Process-wide counters registered on the default registry"""
    global _product_metrics
    if _product_metrics is None:
        _product_metrics = ProductMetrics.build(REGISTRY)
    return _product_metrics


def render_metrics(registry: CollectorRegistry = REGISTRY) -> tuple[bytes, str]:
    return generate_latest(registry), CONTENT_TYPE_LATEST

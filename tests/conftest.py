import pytest

from harborwright.core.config import ConfigStore, CONFIG_REGISTRY_ENCRYPTION_COST_KEY
from harborwright.core.context import ReconcileContext
from harborwright.core.models import (
    ComponentSpec,
    ExternalRedisSpec,
    Harbor,
    HarborSpec,
    ImageChartStorage,
    LogLevel,
    ObjectMeta,
    RegistryComponentSpec,
    StorageMiddleware,
    StorageRedirect,
)
from harborwright.graph.resources import InMemoryGraph

# Lowest cost bcrypt accepts, keeps the suite fast
FAST_COST = 4


def make_harbor(name="demo", namespace="ns1", redis=None, storage=None, log_level=LogLevel.INFO):
    return Harbor(
        metadata=ObjectMeta(name=name, namespace=namespace),
        spec=HarborSpec(
            registry=RegistryComponentSpec(
                component=ComponentSpec(replicas=2, resources={"requests": {"cpu": "100m"}}),
                storage_middlewares=(StorageMiddleware(name="cloudfront", options={"baseurl": "https://cdn/"}),),
                relative_urls=True,
            ),
            image_chart_storage=storage or ImageChartStorage(
                driver="s3", options={"bucket": "blobs"}, redirect=StorageRedirect(disable=True),
            ),
            log_level=log_level,
            redis=redis or ExternalRedisSpec(host="redis.ns1.svc", password_ref="demo-redis-password"),
        ),
    )


@pytest.fixture
def harbor():
    return make_harbor()


@pytest.fixture
def config():
    return ConfigStore({CONFIG_REGISTRY_ENCRYPTION_COST_KEY: FAST_COST})


@pytest.fixture
def ctx():
    return ReconcileContext()


@pytest.fixture
def graph():
    return InMemoryGraph()


@pytest.fixture
def harbor_factory():
    return make_harbor

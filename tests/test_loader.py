from pathlib import Path

import pytest

from harborwright.core.errors import SpecLoadError
from harborwright.core.loader import load_harbor
from harborwright.core.models import LogLevel

SAMPLE = Path(__file__).parent.parent / "samples" / "demo-harbor.yaml"


def test_load_sample_file():
    harbor = load_harbor(SAMPLE)

    assert harbor.name == "demo"
    assert harbor.namespace == "ns1"
    assert harbor.spec.log_level is LogLevel.INFO
    assert harbor.spec.registry.component.replicas == 2
    assert harbor.spec.registry.relative_urls is True
    assert harbor.spec.registry.storage_middlewares[0].name == "cloudfront"
    assert harbor.spec.image_chart_storage.driver == "s3"
    assert harbor.spec.image_chart_storage.options["bucket"] == "harbor-demo"
    assert harbor.spec.image_chart_storage.redirect.disable is True
    assert harbor.spec.redis.host == "redis.ns1.svc"
    assert harbor.spec.redis.password_ref == "demo-redis-password"


def test_load_from_text_with_defaults():
    harbor = load_harbor("metadata:\n  name: mini\n  namespace: default\n")

    assert harbor.spec.image_chart_storage.driver == "filesystem"
    assert harbor.spec.registry.relative_urls is None
    assert harbor.spec.redis.host is None


@pytest.mark.parametrize("text", [
    "metadata:\n  name: demo\n",
    "- just\n- a list\n",
    "metadata:\n  name: demo\n  namespace: ns1\nspec:\n  logLevel: loud\n",
    "metadata:\n  name: demo\n  namespace: ns1\nspec:\n  registry: [1, 2]\n",
    "metadata:\n  name: demo\n  namespace: ns1\nspec:\n  persistence:\n    imageChartStorage:\n      s3: {}\n      gcs: {}\n",
    "metadata:\n  name: demo\n  namespace: ns1\nspec:\n  redis:\n    port: many\n",
    "metadata: {name: demo, namespace: ns1\n",
    "metadata:\n  name: demo\n  namespace: ns1\nspec:\n  persistence:\n    imageChartStorage:\n      filesystem: /data\n",
    "metadata:\n  name: demo\n  namespace: ns1\nspec:\n  registry:\n    nodeSelector: [a, b]\n",
    "metadata:\n  name: demo\n  namespace: ns1\nspec:\n  registry:\n    resources: lots\n",
    "metadata:\n  name: demo\n  namespace: ns1\nspec:\n  registry:\n    storageMiddlewares:\n      - name: cloudfront\n        options: fast\n",
    "metadata:\n  name: demo\n  namespace: ns1\nspec:\n  redis:\n    dsn: 6379\n",
    "metadata:\n  name: demo\n  namespace: ns1\nspec:\n  redis:\n    host: 123\n",
])
def test_malformed_documents(text):
    with pytest.raises(SpecLoadError):
        load_harbor(text)


def test_malformed_section_is_named():
    text = "metadata:\n  name: demo\n  namespace: ns1\nspec:\n  registry:\n    storageMiddlewares:\n      - name: cloudfront\n        options: fast\n"
    with pytest.raises(SpecLoadError, match=r"spec\.registry\.storageMiddlewares\[0\]\.options must be a mapping"):
        load_harbor(text)

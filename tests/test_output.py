from ruamel.yaml import YAML

from harborwright.core.engine import RegistryReconciler
from harborwright.core.models import SHARED_SECRET_KEY
from harborwright.graph.resources import InMemoryGraph
from harborwright.render.exporter import REDACTED, ManifestExporter
from harborwright.rules.validator import ManifestValidator


def _objects(ctx, harbor, config):
    graph = InMemoryGraph()
    RegistryReconciler(graph, config).reconcile(ctx, harbor)
    return graph.objects()


def test_derived_batch_is_valid(ctx, harbor, config):
    ok, problems = ManifestValidator().validate(_objects(ctx, harbor, config))
    assert ok, problems


def test_inlined_secret_value_is_caught(ctx, harbor, config):
    """
    SEPARATION TEST: a registry manifest carrying a secret value is rejected
    and the value is not echoed in the report.
    """
    auth, http, registry = _objects(ctx, harbor, config)
    leaked = registry.to_manifest()
    leaked["spec"]["http"]["secret"] = http.string_data[SHARED_SECRET_KEY]

    ok, problems = ManifestValidator().validate([auth, http, leaked])
    assert not ok
    assert any("spec.http.secret" in p for p in problems)
    assert not any(http.string_data[SHARED_SECRET_KEY] in p for p in problems)


def test_dangling_reference_is_caught(ctx, harbor, config):
    auth, http, registry = _objects(ctx, harbor, config)

    ok, problems = ManifestValidator().validate([auth, registry])
    assert not ok
    assert any("http.secretRef" in p for p in problems)


def test_missing_identity_is_caught():
    ok, problems = ManifestValidator().validate([{"kind": "Secret"}])
    assert not ok


def test_export_redacts_by_default(ctx, harbor, config):
    objects = _objects(ctx, harbor, config)
    text = ManifestExporter().export(objects)
    docs = list(YAML(typ="safe").load_all(text))

    assert [d["kind"] for d in docs] == ["Secret", "Secret", "Registry"]
    assert list(docs[0].keys())[:3] == ["apiVersion", "kind", "metadata"]
    assert set(docs[1]["stringData"].values()) == {REDACTED}
    assert objects[1].string_data[SHARED_SECRET_KEY] not in text
    assert docs[2]["spec"]["http"]["secretRef"] == objects[1].name


def test_export_with_secrets(ctx, harbor, config):
    objects = _objects(ctx, harbor, config)
    docs = list(YAML(typ="safe").load_all(ManifestExporter().export(objects, redact=False)))

    assert docs[1]["stringData"][SHARED_SECRET_KEY] == objects[1].string_data[SHARED_SECRET_KEY]
    assert docs[1]["immutable"] is True
    assert docs[0]["immutable"] is False

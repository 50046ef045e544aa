from harborwright.core.naming import MAX_NAME_LENGTH, normalize_name


def test_joins_suffixes():
    assert normalize_name(None, "demo", "registry", "http") == "demo-registry-http"
    assert normalize_name(None, "demo") == "demo"


def test_lowercases_and_replaces_invalid_characters():
    assert normalize_name(None, "My_Harbor", "registry") == "my-harbor-registry"


def test_long_names_stay_distinct_and_valid():
    base = "h" * 70
    a = normalize_name(None, base, "registry", "basicauth")
    b = normalize_name(None, base, "registry", "http")

    assert len(a) <= MAX_NAME_LENGTH and len(b) <= MAX_NAME_LENGTH
    assert a != b
    assert a == normalize_name(None, base, "registry", "basicauth")

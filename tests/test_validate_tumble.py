from tumbler.core.validate.validate_tumble import validate_tumble


def _doc(levels, **extra):
    doc = {"schema_version": "0.1.0", "levels": levels, "__file__": "t.yaml"}
    doc.update(extra)
    return doc


def test_validate_happy_path():
    spec, errors = validate_tumble(
        _doc(
            [
                {"name": "color", "variants": {"red": 42, "blue": 19}},
                {"name": "shape", "variants": {"circle": 1}, "only_when": {"color": ["red"]}},
            ],
            payload={"seed": True},
        )
    )
    assert errors == []
    assert spec is not None
    assert spec.level_names == ["color", "shape"]
    assert spec.levels[1].only_when == {"color": ["red"]}
    assert spec.payload == {"seed": True}
    assert len(spec.providers) == 2


def test_validate_missing_schema_version():
    doc = _doc([])
    doc["schema_version"] = None
    spec, errors = validate_tumble(doc)
    assert spec is None
    assert [e.code for e in errors] == ["E_REQUIRED_FIELD"]
    assert errors[0].path == "schema_version"


def test_validate_levels_must_be_list():
    spec, errors = validate_tumble(_doc({"color": {}}))
    assert spec is None
    assert any(e.code == "E_REQUIRED_FIELD" and e.path == "levels" for e in errors)


def test_validate_level_shapes():
    spec, errors = validate_tumble(
        _doc(
            [
                "not-a-level",
                {"variants": {"a": 1}},
                {"name": "v", "variants": ["a"]},
                {"name": "k", "variants": {1: "a"}},
            ]
        )
    )
    assert spec is None
    by_path = {e.path: e.code for e in errors}
    assert by_path == {
        "levels[0]": "E_INVALID_TYPE",
        "levels[1].name": "E_REQUIRED_FIELD",
        "levels[2].variants": "E_INVALID_TYPE",
        "levels[3].variants": "E_INVALID_TYPE",
    }


def test_validate_duplicate_level():
    spec, errors = validate_tumble(
        _doc([{"name": "color", "variants": {"a": 1}}, {"name": "color", "variants": {"b": 2}}])
    )
    assert spec is None
    assert [e.code for e in errors] == ["E_DUPLICATE_LEVEL"]


def test_validate_only_when_unknown_level_and_variant():
    spec, errors = validate_tumble(
        _doc(
            [
                {"name": "color", "variants": {"red": 1}},
                {"name": "shape", "variants": {"circle": 1}, "only_when": {"size": ["big"]}},
                {"name": "fill", "variants": {"solid": 1}, "only_when": {"color": ["green"]}},
            ]
        )
    )
    assert spec is None
    codes = sorted(e.code for e in errors)
    assert codes == ["E_UNKNOWN_LEVEL", "E_UNKNOWN_VARIANT"]


def test_validate_only_when_cannot_reference_later_level():
    spec, errors = validate_tumble(
        _doc(
            [
                {"name": "shape", "variants": {"circle": 1}, "only_when": {"color": ["red"]}},
                {"name": "color", "variants": {"red": 1}},
            ]
        )
    )
    assert spec is None
    assert [e.code for e in errors] == ["E_UNKNOWN_LEVEL"]


def test_validate_only_when_shape():
    spec, errors = validate_tumble(
        _doc(
            [
                {"name": "color", "variants": {"red": 1}},
                {"name": "shape", "variants": {"circle": 1}, "only_when": {"color": "red"}},
            ]
        )
    )
    assert spec is None
    assert [e.code for e in errors] == ["E_INVALID_TYPE"]


def test_validate_errors_sorted():
    spec, errors = validate_tumble(_doc(["x", "y"], schema_version=""))
    assert spec is None
    assert [e.path for e in errors] == ["levels[0]", "levels[1]", "schema_version"]

from admincore.calllog.fields import Fields


def test_set_then_as_dict():
    fields = Fields()
    fields.set("system", "grpc")
    assert fields.as_dict() == {"system": "grpc"}


def test_constructor_takes_mapping():
    fields = Fields({"span.kind": "server"})
    assert fields.as_dict() == {"span.kind": "server"}
    assert "span.kind" in fields


def test_set_replaces_value():
    fields = Fields({"a": 1})
    fields.set("a", 2)
    assert fields.as_dict() == {"a": 2}


def test_merge_adds_and_overrides():
    fields = Fields({"a": 1, "b": 2})
    fields.merge(Fields({"b": 3, "c": 4}))
    assert fields.as_dict() == {"a": 1, "b": 3, "c": 4}


def test_merge_accepts_mapping():
    fields = Fields({"a": 1})
    fields.merge({"b": 2})
    assert fields.as_dict() == {"a": 1, "b": 2}


def test_merge_empty_leaves_fields_unchanged():
    fields = Fields({"a": 1})
    fields.merge(Fields())
    assert fields.as_dict() == {"a": 1}


def test_copy_is_independent():
    original = Fields({"a": 1})
    duplicate = original.copy()
    duplicate.set("b", 2)
    assert original.as_dict() == {"a": 1}
    assert duplicate.as_dict() == {"a": 1, "b": 2}


def test_as_dict_returns_copy():
    fields = Fields({"a": 1})
    snapshot = fields.as_dict()
    snapshot["a"] = 99
    assert fields.as_dict() == {"a": 1}


def test_equality_and_length():
    assert Fields({"a": 1}) == Fields({"a": 1})
    assert len(Fields({"a": 1, "b": 2})) == 2
"""Unit tests for declaration validation."""

from pathlib import Path

import pytest

from declcapture.exceptions import (
    DeclarationError,
    InvalidArgumentError,
    InvalidChildrenShapeError,
    InvalidParentShapeError,
    InvalidStringOrListError,
    MissingKeysError,
)
from declcapture.models.declaration import Declaration, declare
from declcapture.services.normalizer import (
    DeclarationValidator,
    coerce_forest,
    is_string_or_string_list,
)


@pytest.fixture
def validator():
    return DeclarationValidator()


class TestStringOrList:

    @pytest.mark.parametrize("value", ["x", "", ["a", "b"], ("a",), []])
    def test_accepted(self, value):
        assert is_string_or_string_list(value)

    @pytest.mark.parametrize("value", [1, None, ["a", 2], {"a": "b"}, [["a"]]])
    def test_rejected(self, value):
        assert not is_string_or_string_list(value)


class TestCoerceForest:

    def test_mixed_mappings_and_declarations(self):
        nodes = coerce_forest([{"name": "A", "keys": "a"}, declare("B", keys="b")])
        assert [node.name for node in nodes] == ["A", "B"]
        assert all(isinstance(node, Declaration) for node in nodes)

    @pytest.mark.parametrize("forest", [{"name": "A", "keys": "a"}, "abc", None, 3])
    def test_non_list_rejected(self, forest):
        with pytest.raises(InvalidArgumentError) as exc_info:
            coerce_forest(forest)
        assert exc_info.value.argument_name == "forest"

    def test_non_declaration_element(self):
        with pytest.raises(InvalidArgumentError, match="element 1"):
            coerce_forest([{"name": "A", "keys": "a"}, 42])


class TestKeysRule:

    def test_missing_keys(self, validator):
        with pytest.raises(MissingKeysError) as exc_info:
            validator.validate(declare("Todo", file="x.org"))
        error = exc_info.value
        assert error.declaration_name == "Todo"
        assert error.error_code == "USER_MISSING_KEYS"
        assert "Todo" in error.message
        assert "keys" in error.message

    @pytest.mark.parametrize("keys", ["", None, 5, ["t"]])
    def test_invalid_keys(self, validator, keys):
        with pytest.raises(MissingKeysError):
            validator.validate(declare("Todo", keys=keys))

    def test_path_recorded_in_context(self, validator):
        parent = declare("Work", keys="w", children=[])
        with pytest.raises(MissingKeysError) as exc_info:
            validator.validate(declare("Task"), (parent,))
        assert exc_info.value.context["path"] == "Work/Task"

    def test_name_is_required(self, validator):
        node = Declaration.from_mapping({"keys": "x"})
        with pytest.raises(DeclarationError, match="name is required"):
            validator.validate(node)


class TestParentShape:

    def test_valid_parent(self, validator):
        node = declare("Work", keys="w", children=[declare("Task", keys="t")])
        assert validator.validate(node) is node

    def test_parent_with_template(self, validator):
        node = declare("Work", keys="w", template="x", children=[declare("Task", keys="t")])
        with pytest.raises(InvalidParentShapeError) as exc_info:
            validator.validate(node)
        assert exc_info.value.extra_attributes == ["template"]
        assert "template" in exc_info.value.message

    def test_parent_with_type(self, validator):
        with pytest.raises(InvalidParentShapeError):
            validator.validate(declare("Work", keys="w", type="entry", children=[declare("Task", keys="t")]))

    def test_empty_children_is_a_leaf(self, validator):
        node = declare("A", keys="a", children=[], file="x.org")
        assert validator.validate(node) is node
        assert validator.children_of(node) == []


class TestChildrenShape:

    def test_single_mapping_child(self, validator):
        node = declare("Work", keys="w", children={"name": "Task", "keys": "t"})
        children = validator.children_of(node)
        assert len(children) == 1
        assert children[0].name == "Task"

    def test_scalar_children(self, validator):
        with pytest.raises(InvalidChildrenShapeError, match="got str"):
            validator.validate(declare("Work", keys="w", children="Task"))

    def test_bad_element(self, validator):
        with pytest.raises(InvalidChildrenShapeError, match="element 1"):
            validator.validate(declare("Work", keys="w", children=[{"name": "A", "keys": "a"}, 7]))


class TestStringOrListAttributes:

    def test_olp_number(self, validator):
        with pytest.raises(InvalidStringOrListError) as exc_info:
            validator.validate(declare("X", keys="x", file="a.org", olp=3))
        assert exc_info.value.attribute == "olp"
        assert exc_info.value.context["value_type"] == "int"

    def test_template_list_with_number(self, validator):
        with pytest.raises(InvalidStringOrListError) as exc_info:
            validator.validate(declare("X", keys="x", template=["ok", 1]))
        assert exc_info.value.attribute == "template"

    def test_template_file_must_be_a_path(self, validator):
        with pytest.raises(InvalidStringOrListError) as exc_info:
            validator.validate(declare("X", keys="x", template_file=["a", "b"]))
        assert exc_info.value.attribute == "template-file"

    def test_path_objects_accepted(self, validator):
        node = declare("X", keys="x", template_file=Path("t.txt"))
        assert validator.validate(node) is node

    def test_valid_leaf(self, validator):
        node = declare("X", keys="x", file="a.org", olp=["A", "B"], template=["1", "2"])
        assert validator.validate(node) is node

    @pytest.mark.parametrize("attribute", ["olp", "template", "template-file"])
    def test_false_counts_as_absent(self, validator, attribute):
        node = Declaration.from_mapping({"name": "X", "keys": "x", "file": "a.org", attribute: False})
        assert validator.validate(node) is node


class TestCheckForest:

    def test_valid_forest(self, validator, sample_forest):
        result = validator.check_forest(sample_forest)
        assert result.is_valid
        assert result.checked == 4
        assert result.errors == []
        assert result.suggestions == ["All 4 declarations are valid"]

    def test_collects_every_error(self, validator):
        forest = [
            declare("NoKeys", file="a.org"),
            declare("Group", keys="g", children=[
                declare("Fine", keys="f"),
                declare("BadOlp", keys="b", file="a.org", olp=1),
            ]),
            declare("BadParent", keys="p", file="x.org", children=[declare("Child", keys="c")]),
        ]
        result = validator.check_forest(forest)
        assert not result.is_valid
        assert [error.field_name for error in result.errors] == ["NoKeys", "Group/BadOlp", "BadParent"]
        assert [error.error_code for error in result.errors] == [
            "USER_MISSING_KEYS", "USER_INVALID_STRING_OR_LIST", "USER_INVALID_PARENT",
        ]
        assert result.checked == 5

    def test_invalid_parent_children_not_visited(self, validator):
        forest = [declare("BadParent", keys="p", file="x.org", children=[declare("Child")])]
        result = validator.check_forest(forest)
        assert len(result.errors) == 1
        assert result.checked == 1

    def test_forest_shape_error(self, validator):
        result = validator.check_forest("not a forest")
        assert not result.is_valid
        assert result.errors[0].field_name == "forest"
        assert result.errors[0].error_code == "USER_INVALID_ARGUMENT"

    def test_multiple_locations_warning(self, validator):
        result = validator.check_forest([declare("X", keys="x", clock=True, file="a.org")])
        assert result.is_valid
        assert [warning.warning_code for warning in result.warnings] == ["MULTIPLE_LOCATIONS"]
        assert "'clock'" in result.warnings[0].message

    def test_function_refining_file_is_not_a_conflict(self, validator):
        result = validator.check_forest([declare("X", keys="x", file="a.org", function=print)])
        assert result.warnings == []

    def test_multiple_templates_warning(self, validator):
        result = validator.check_forest([declare("X", keys="x", template="t", template_file="f.txt")])
        assert [warning.warning_code for warning in result.warnings] == ["MULTIPLE_TEMPLATES"]

    def test_zero_id_counts_as_a_location(self, validator):
        result = validator.check_forest([declare("X", keys="x", id=0, file="a.org")])
        assert [warning.warning_code for warning in result.warnings] == ["MULTIPLE_LOCATIONS"]
        assert "'id'" in result.warnings[0].message

    def test_empty_template_counts_as_a_source(self, validator):
        result = validator.check_forest([declare("X", keys="x", template="", template_file="f.txt")])
        assert [warning.warning_code for warning in result.warnings] == ["MULTIPLE_TEMPLATES"]

    def test_false_members_are_not_reported(self, validator):
        result = validator.check_forest([declare("X", keys="x", clock=False, file="a.org", template=False)])
        assert result.warnings == []

"""Declaration normalizer and validator.

DeclarationValidator checks the structural rules of one declaration node
before the compiler resolves it:

- keys must be a non-empty string
- a node with children carries only name, keys and children
- children is a list of declarations (a single child is normalized to a list)
- olp and template are a string or a list of strings; template-file is a path

validate() is pure and fails fast with a typed DeclarationError.
check_forest() walks a whole forest and collects every problem into a
ValidationResult for reporting.
"""

import logging
import os
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

from ..exceptions import (
    DeclarationError,
    InvalidArgumentError,
    InvalidChildrenShapeError,
    InvalidParentShapeError,
    InvalidStringOrListError,
    MissingKeysError,
)
from ..models.declaration import (
    LOCATION_KEYWORDS,
    STRUCTURAL_KEYWORDS,
    TEMPLATE_KEYWORDS,
    Declaration,
    declaration_path,
    is_set,
)
from ..models.validation import ValidationResult

logger = logging.getLogger(__name__)

Ancestors = Tuple[Declaration, ...]


def is_string_or_string_list(value: Any) -> bool:
    """True for a string or a list/tuple made only of strings."""
    if isinstance(value, str):
        return True
    return isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value)


def coerce_forest(forest: Iterable[Any]) -> List[Declaration]:
    """Convert a forest of mappings/Declarations into Declarations.

    Raises:
        InvalidArgumentError: If forest is not a list or holds a non-declaration
    """
    if isinstance(forest, (str, bytes, Mapping, Declaration)) or not isinstance(forest, (list, tuple)):
        raise InvalidArgumentError(
            f"Declarations must be given as a list, got {type(forest).__name__}",
            argument_name="forest",
        )

    declarations = []
    for index, item in enumerate(forest):
        node = Declaration.coerce(item)
        if node is None:
            raise InvalidArgumentError(
                f"Forest element {index} is a {type(item).__name__}, not a declaration",
                argument_name="forest",
            )
        declarations.append(node)
    return declarations


class DeclarationValidator:
    """Structural validation for declaration nodes."""

    def validate(self, node: Declaration, ancestors: Ancestors = ()) -> Declaration:
        """Validate a single declaration node.

        Args:
            node: Declaration to check
            ancestors: Already-validated ancestors, root first

        Returns:
            The confirmed node

        Raises:
            MissingKeysError: keys absent or empty
            InvalidParentShapeError: node with children carries other attributes
            InvalidChildrenShapeError: children is not a list of declarations
            InvalidStringOrListError: olp/template/template-file has the wrong shape
        """
        keys = node.keys
        if not isinstance(keys, str) or not keys:
            raise MissingKeysError(node.name, context={"path": declaration_path(node, ancestors)})

        if node.name is None:
            raise DeclarationError("name is required", node.name,
                                   context={"path": declaration_path(node, ancestors)})

        if node.has_children:
            extra = [attribute for attribute in node.attributes if attribute not in STRUCTURAL_KEYWORDS]
            if extra:
                raise InvalidParentShapeError(node.name, extra_attributes=extra)
            self.children_of(node)
            return node

        for attribute in ("olp", "template"):
            value = node.get(attribute)
            if is_set(value) and not is_string_or_string_list(value):
                raise InvalidStringOrListError(node.name, attribute=attribute, value=value)

        template_file = node.get("template-file")
        if is_set(template_file) and not isinstance(template_file, (str, os.PathLike)):
            raise InvalidStringOrListError(node.name, attribute="template-file", value=template_file)

        return node

    def children_of(self, node: Declaration) -> List[Declaration]:
        """Normalize a node's children attribute to a list of Declarations.

        Raises:
            InvalidChildrenShapeError: children is not a list of declarations
        """
        raw = node.get("children")
        single = Declaration.coerce(raw)
        if single is not None:
            return [single]

        if not isinstance(raw, (list, tuple)):
            raise InvalidChildrenShapeError(node.name, detail=f"got {type(raw).__name__}")

        children = []
        for index, item in enumerate(raw):
            child = Declaration.coerce(item)
            if child is None:
                raise InvalidChildrenShapeError(
                    node.name, detail=f"element {index} is a {type(item).__name__}"
                )
            children.append(child)
        return children

    def check_forest(self, forest: Sequence[Any]) -> ValidationResult:
        """Validate every declaration in a forest without stopping at the first error.

        Args:
            forest: Declarations as mappings or Declaration objects

        Returns:
            ValidationResult with one error per invalid node
        """
        result = ValidationResult(is_valid=True)
        try:
            roots = coerce_forest(forest)
        except InvalidArgumentError as e:
            result.add_error("forest", e.error_code, e.message, e.suggested_fix)
            return result

        for root in roots:
            self._check_node(root, (), result)

        if not result.has_errors():
            result.add_suggestion(f"All {result.checked} declarations are valid")
        logger.debug("Checked %d declarations: %d errors, %d warnings",
                     result.checked, len(result.errors), len(result.warnings))
        return result

    def _check_node(self, node: Declaration, ancestors: Ancestors, result: ValidationResult) -> None:
        result.checked += 1
        path = declaration_path(node, ancestors)
        try:
            self.validate(node, ancestors)
        except DeclarationError as e:
            result.add_error(path, e.error_code, e.message, e.suggested_fix)
            return

        if node.has_children:
            for child in self.children_of(node):
                self._check_node(child, (*ancestors, node), result)
            return

        self._warn_on_ignored(node, path, result)

    def _warn_on_ignored(self, node: Declaration, path: str, result: ValidationResult) -> None:
        """Warn when lower-priority members of an exclusive group are ignored."""
        locations = [keyword for keyword in LOCATION_KEYWORDS if is_set(node.get(keyword))]
        # With a file, function refines the file instead of competing with it
        if "file" in locations and "function" in locations:
            locations.remove("function")
        if len(locations) > 1:
            result.add_warning(
                path,
                "MULTIPLE_LOCATIONS",
                f"Several locations declared ({', '.join(locations)}); only '{locations[0]}' is used",
            )

        templates = [keyword for keyword in TEMPLATE_KEYWORDS if is_set(node.get(keyword))]
        if len(templates) > 1:
            result.add_warning(
                path,
                "MULTIPLE_TEMPLATES",
                f"Several template sources declared ({', '.join(templates)}); only '{templates[0]}' is used",
            )

"""End-to-end scenarios: declaration files through compilation and hook dispatch."""

import pytest

import declcapture
from declcapture import (
    HookRegistry,
    MissingKeysError,
    configure,
    declare,
    declare_templates,
    get_registry,
    load_declarations,
    remove_hooks,
    validate_declarations,
)
from declcapture.api import resolve_reference
from declcapture.exceptions import DeclarationLoadError, InvalidArgumentError


@pytest.fixture
def personal_templates(tmp_path):
    path = tmp_path / "capture.yml"
    path.write_text(
        "- name: Inbox\n"
        "  keys: i\n"
        "  file: inbox.org\n"
        "  template:\n"
        "    - '* %?'\n"
        "    - ':PROPERTIES:'\n"
        "    - ':CREATED: %U'\n"
        "    - ':END:'\n"
        "  empty_lines: 1\n"
        "- name: Projects\n"
        "  keys: p\n"
        "  children:\n"
        "    - name: Note\n"
        "      keys: n\n"
        "      file: projects.org\n"
        "      function: builtins:dict\n"
        "      template-function: builtins:str\n"
        "    - name: Clocked\n"
        "      keys: c\n"
        "      clock: true\n"
        "      type: item\n"
        "      template: '- %?'\n"
        "      before-finalize: builtins:list\n"
        "- name: Contacts\n"
        "  keys: C\n"
        "  type: table-line\n"
        "  id: 6A3F-CONTACTS\n"
        "  template: '| %^{Name} | %^{Phone} |'\n"
        "  table-line-pos: I+1\n"
        "  contact-group: friends\n",
        encoding="utf-8",
    )
    return path


class TestDeclarationFiles:

    def test_load_and_compile(self, personal_templates):
        forest = load_declarations(personal_templates)
        records = declare_templates(forest)

        assert records == [
            ["i", "Inbox", "entry", ["file", "inbox.org"], "* %?\n:PROPERTIES:\n:CREATED: %U\n:END:",
             "empty-lines", 1],
            ["p", "Projects"],
            ["pn", "Note", "entry", ["file+function", "projects.org", dict], ["function", str]],
            ["pc", "Clocked", "item", ["clock"], "- %?"],
            ["C", "Contacts", "table-line", ["id", "6A3F-CONTACTS"], "| %^{Name} | %^{Phone} |",
             "table-line-pos", "I+1", "contact-group", "friends"],
        ]

    def test_hooks_installed_and_dispatched(self, personal_templates):
        declare_templates(load_declarations(personal_templates))
        registry = get_registry()

        assert len(registry) == 1
        assert registry.known_names() == {"declcapture-hook/before-finalize/pc"}
        # builtins:list called with no arguments
        assert registry.dispatch("before-finalize", "pc") == 1
        assert registry.dispatch("before-finalize", "pn") == 0

    def test_validate_file(self, personal_templates):
        result = validate_declarations(load_declarations(personal_templates))
        assert result.is_valid
        assert result.checked == 5

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "capture.toml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(DeclarationLoadError, match="Unsupported"):
            load_declarations(path)

    def test_top_level_must_be_a_list(self, tmp_path):
        path = tmp_path / "capture.yaml"
        path.write_text("name: Lonely\nkeys: l\n", encoding="utf-8")
        with pytest.raises(DeclarationLoadError, match="list of declarations"):
            load_declarations(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_declarations(tmp_path / "nope.json")

    def test_resolve_reference(self):
        assert resolve_reference("os.path:join.__name__") == "join"
        with pytest.raises(DeclarationLoadError):
            resolve_reference("os:no_such_attribute")


class TestHookLifecycle:

    def test_redeclaring_replaces_handlers(self, recorder):
        forest = [declare("Todo", keys="t", file="todo.org", after_finalize=recorder)]
        declare_templates(forest)
        declare_templates(forest)
        assert len(get_registry()) == 1

        get_registry().dispatch("after-finalize", "t", "buffer")
        assert recorder.calls == [("buffer",)]

    def test_remove_by_pattern_then_forget(self, recorder):
        declare_templates([
            declare("Work", keys="w", children=[
                declare("Task", keys="t", hook=recorder, after_finalize=recorder),
                declare("Meeting", keys="m", hook=recorder),
            ]),
            declare("Journal", keys="j", hook=recorder),
        ])
        assert len(get_registry()) == 4

        removed = remove_hooks("^w", phases="mode")
        assert sorted(removed) == ["declcapture-hook/mode/wm", "declcapture-hook/mode/wt"]
        assert get_registry().dispatch("mode", "wt") == 0
        assert get_registry().dispatch("after-finalize", "wt") == 1
        assert "declcapture-hook/mode/wt" in get_registry().known_names()

        remove_hooks(forget=True)
        assert len(get_registry()) == 0
        assert get_registry().known_names() == {
            "declcapture-hook/mode/wt", "declcapture-hook/mode/wm",
        }

    def test_explicit_registry(self, recorder):
        registry = HookRegistry()
        declare_templates([declare("X", keys="x", hook=recorder)], registry=registry)
        assert len(registry) == 1
        assert len(get_registry()) == 0
        assert remove_hooks(registry=registry) == ["declcapture-hook/mode/x"]

    def test_failed_compile_installs_nothing(self, recorder):
        forest = [
            declare("Good", keys="g", hook=recorder),
            declare("Bad", hook=recorder),
        ]
        with pytest.raises(MissingKeysError):
            declare_templates(forest)
        assert len(get_registry()) == 0

    def test_bad_callback_installs_nothing(self, recorder):
        forest = [
            declare("First", keys="a", before_finalize=recorder),
            declare("Second", keys="b", after_finalize="not callable"),
        ]
        with pytest.raises(InvalidArgumentError):
            declare_templates(forest)
        assert len(get_registry()) == 0
        assert get_registry().known_names() == set()


class TestProcessConfiguration:

    def test_default_type_and_ordering(self):
        configure(
            default_type="plain",
            sort_forest=lambda left, right: left.keys < right.keys,
        )
        records = declare_templates([
            declare("Second", keys="b", file="b.org"),
            declare("First", keys="a", file="a.org"),
        ])
        assert records == [
            ["a", "First", "plain", ["file", "a.org"]],
            ["b", "Second", "plain", ["file", "b.org"]],
        ]

    def test_package_exports(self):
        assert declcapture.__version__ == "0.1.0"
        assert callable(declcapture.compile_templates)

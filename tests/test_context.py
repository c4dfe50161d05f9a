# tests/test_context.py
"""Tests for the compilation context: construction, cloning and compile entry points."""

from dataclasses import dataclass
from pathlib import Path

import pytest

from stachekit import Context, DEFAULT_EXTENSION, DefaultLoader, DictLoader, PartialLoader, Template
from stachekit.config.settings import EngineConfig
from stachekit.exceptions import LoaderError, ParseError, TemplateDecodeError, TemplateNotFoundError


@dataclass(frozen=True)
class ConstantLoader(PartialLoader):
    """Returns the same body for every name."""
    body: str = "X"

    def load(self, name):
        return self.body


class FailingLoader(PartialLoader):
    def load(self, name):
        raise LoaderError(f"backend unavailable for {name}", name=str(name))


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    (tmp_path / "greeting.mustache").write_text("Hello", encoding="utf-8")
    return tmp_path


class TestConstruction:
    def test_new_uses_default_extension(self, tmp_path):
        context = Context.new(tmp_path)
        assert context.partial_loader == DefaultLoader(tmp_path, DEFAULT_EXTENSION)
        assert DEFAULT_EXTENSION == "mustache"

    def test_with_extension(self, tmp_path):
        context = Context.with_extension(tmp_path, "hbs")
        assert context.partial_loader == DefaultLoader(tmp_path, "hbs")

    def test_with_loader_keeps_the_given_loader(self):
        loader = DictLoader({"a": "b"})
        assert Context.with_loader(loader).partial_loader is loader

    def test_with_loader_rejects_non_loaders(self):
        with pytest.raises(TypeError):
            Context.with_loader({"a": "b"})

    def test_from_config(self, tmp_path):
        config = EngineConfig(template_path=tmp_path, template_extension="txt", missing_as_empty=False)
        context = Context.from_config(config)
        assert context.partial_loader == DefaultLoader(tmp_path, "txt", missing_as_empty=False)

    def test_context_is_immutable(self, tmp_path):
        context = Context.new(tmp_path)
        with pytest.raises(AttributeError):
            context.partial_loader = DictLoader({})


class TestClone:
    def test_clone_is_equal_and_independent(self, tmp_path):
        context = Context.new(tmp_path)
        copy = context.clone()
        assert copy == context
        assert copy.partial_loader is not context.partial_loader

    def test_clone_compiles_identically(self, templates_dir):
        context = Context.new(templates_dir)
        assert context.clone().compile_path("greeting") == context.compile_path("greeting")

    def test_templates_hold_their_own_context_copy(self, templates_dir):
        context = Context.new(templates_dir)
        first = context.compile_path("greeting")
        second = context.compile_path("greeting")
        assert first.context == context
        assert first.context is not context
        assert first.context.partial_loader is not second.context.partial_loader


class TestCompile:
    def test_compile_string(self, tmp_path):
        template = Context.new(tmp_path).compile("Hello {{name}}")
        assert isinstance(template, Template)
        assert template.render({"name": "World"}) == "Hello World"

    def test_compile_accepts_lazy_character_iterator(self, tmp_path):
        context = Context.new(tmp_path)
        chars = (c for c in "Hi {{who}}")
        assert context.compile(chars) == context.compile("Hi {{who}}")

    def test_compile_collects_partials(self):
        template = Context.with_loader(DictLoader({})).compile("{{> header}}body{{> footer}}")
        assert template.partials == ("header", "footer")

    def test_compile_propagates_parse_error(self, tmp_path):
        with pytest.raises(ParseError):
            Context.new(tmp_path).compile("{{#open}}never closed properly{{/other}}")

    def test_compile_does_not_touch_loader(self):
        # partials are resolved at render time, not compile time
        template = Context.with_loader(FailingLoader()).compile("{{> anything}}")
        assert template.partials == ("anything",)


class TestCompilePath:
    def test_loads_then_compiles(self, templates_dir):
        template = Context.new(templates_dir).compile_path("greeting")
        assert template.render() == "Hello"

    def test_missing_template_compiles_to_empty(self, templates_dir):
        template = Context.new(templates_dir).compile_path("missing")
        assert template.tokens == ()
        assert template.partials == ()
        assert template.render() == ""

    def test_missing_template_raises_when_policy_disabled(self, templates_dir):
        context = Context(DefaultLoader(templates_dir, missing_as_empty=False))
        with pytest.raises(TemplateNotFoundError):
            context.compile_path("missing")

    def test_constant_loader_matches_compile(self):
        context = Context.with_loader(ConstantLoader("X"))
        assert context.compile_path("anything") == context.compile("X")
        assert context.compile_path(Path("other/name.txt")) == context.compile("X")

    def test_loader_errors_propagate_unchanged(self):
        with pytest.raises(LoaderError, match="backend unavailable for page"):
            Context.with_loader(FailingLoader()).compile_path("page")

    def test_decode_errors_propagate_unchanged(self, tmp_path):
        (tmp_path / "bad.mustache").write_bytes(b"\xc3\x28")
        with pytest.raises(TemplateDecodeError):
            Context.new(tmp_path).compile_path("bad")

    def test_parse_errors_from_loaded_text_propagate(self):
        context = Context.with_loader(ConstantLoader("{{#a}}x{{/b}}"))
        with pytest.raises(ParseError):
            context.compile_path("broken")

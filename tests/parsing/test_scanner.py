"""
Tests for variable reference scanning.
"""

import pytest

from piperef.parsing import IndexForm, Namespace, contains_reference, iter_references, scan


class TestScan:
    """Tests for finding references in field text."""

    def test_simple_param(self):
        refs = scan("--flag=$(params.foo)")
        assert len(refs) == 1
        ref = refs[0]
        assert ref.text == "$(params.foo)"
        assert ref.namespace is Namespace.PARAMS
        assert ref.key_path == ("foo",)
        assert ref.index_form is IndexForm.NONE
        assert (ref.start, ref.end) == (7, 20)

    def test_object_key(self):
        ref = scan("$(params.gitrepo.url)")[0]
        assert ref.key_path == ("gitrepo", "url")
        assert ref.key == "params.gitrepo.url"

    def test_star_index(self):
        ref = scan("$(params.flags[*])")[0]
        assert ref.is_star
        assert not ref.is_indexed
        assert ref.key_path == ("flags",)

    def test_literal_index(self):
        ref = scan("$(params.flags[3])")[0]
        assert ref.is_indexed
        assert ref.index == 3

    @pytest.mark.parametrize(
        ("text", "namespace", "key_path"),
        [
            ("$(results.digest.path)", Namespace.RESULTS, ("digest", "path")),
            ("$(step.results.out.path)", Namespace.STEP_RESULTS, ("out", "path")),
            ("$(context.taskRun.name)", Namespace.CONTEXT, ("taskRun", "name")),
            ("$(credentials.path)", Namespace.CREDENTIALS, ("path",)),
            ("$(workspaces.src.bound)", Namespace.WORKSPACES, ("src", "bound")),
        ],
    )
    def test_namespaces(self, text, namespace, key_path):
        ref = scan(text)[0]
        assert ref.namespace is namespace
        assert ref.key_path == key_path

    @pytest.mark.parametrize("quote", ['"', "'"])
    def test_bracket_names(self, quote):
        """Test bracket notation names parameters containing dots."""
        ref = scan(f"$(params[{quote}my.param{quote}])")[0]
        assert ref.key_path == ("my.param",)

    def test_bracket_name_with_index(self):
        ref = scan('$(params["my.array"][*])')[0]
        assert ref.key_path == ("my.array",)
        assert ref.is_star

    def test_several_references_in_order(self):
        refs = scan("$(params.a) and $(params.b) and $(params.a)")
        assert [r.key for r in refs] == ["params.a", "params.b", "params.a"]

    def test_multiline_script(self):
        refs = scan("#!/bin/sh\necho $(params.a)\n\techo $(context.task.name)\n")
        assert [r.namespace for r in refs] == [Namespace.PARAMS, Namespace.CONTEXT]

    @pytest.mark.parametrize("text", ["$(date)", "$(echo hi)", "$(inputs.params.x)", "$params.x", "plain"])
    def test_non_references_ignored(self, text):
        assert scan(text) == []
        assert not contains_reference(text)

    def test_unterminated_reference_ignored(self):
        assert scan("$(params.foo") == []

    def test_iter_references_is_lazy(self):
        refs = iter_references("$(params.a)")
        assert next(refs).key == "params.a"


class TestNameSplits:
    """Tests for splitting key paths into declared names and remainders."""

    def test_longest_first(self):
        ref = scan("$(params.a.b.c)")[0]
        assert list(ref.name_splits()) == [
            ("a.b.c", ()),
            ("a.b", ("c",)),
            ("a", ("b", "c")),
        ]

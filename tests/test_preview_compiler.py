"""Unit tests for preview compilation (project_synth.preview.compiler)."""

import re
from unittest.mock import patch

from project_synth.config import Settings
from project_synth.models import RenderStrategy
from project_synth.parsing import is_network_url
from project_synth.preview import (
    BRIDGE_SOURCE,
    NO_CONTENT_MESSAGE,
    classify_files,
    compile_preview,
    find_document_shell,
    sandbox_attributes,
    strip_local_references,
    uses_utility_classes,
)
from project_synth.store import ProjectStore

_TAG_REFERENCE = re.compile(r"<(?:link|script)\b[^>]*\b(?:href|src)\s*=\s*[\"']([^\"']*)[\"']", re.IGNORECASE)
_MODULE_LINE = re.compile(r"^\s*(?:import|export)\b", re.MULTILINE)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_store(contents: dict[str, str]) -> ProjectStore:
    return ProjectStore.from_contents(contents)


def local_references(html: str) -> list[str]:
    return [ref for ref in _TAG_REFERENCE.findall(html) if not is_network_url(ref)]


def babel_script(html: str) -> str:
    start = html.index('type="text/babel"')
    start = html.index(">", start) + 1
    return html[start:html.rindex("</script>")]


# ---------------------------------------------------------------------------
# Classification and hints
# ---------------------------------------------------------------------------

class TestClassification:
    def test_roles_by_kind(self, static_site_store, react_store):
        roles = classify_files(static_site_store)
        assert [r.path for r in roles.markup] == ["index.html"]
        assert [r.path for r in roles.styles] == ["styles.css"]
        assert [r.path for r in roles.scripts] == ["app.js"]
        assert not roles.has_components
        assert classify_files(react_store).has_components

    def test_utility_class_hint(self):
        assert uses_utility_classes(make_store({"a.html": '<div class="flex gap-2"></div>'}))
        assert not uses_utility_classes(make_store({"a.html": '<div class="card"></div>'}))

    def test_utility_hint_needs_whole_class_token(self):
        """Prefixes buried inside plain class names are not utility classes."""
        assert not uses_utility_classes(make_store({"a.html": '<div class="app-header top-bar"></div>'}))
        assert uses_utility_classes(make_store({"a.html": '<div class="app-header p-4"></div>'}))

    def test_document_shell_prefers_index(self):
        roles = classify_files(
            make_store({"about.html": "<!DOCTYPE html><html></html>", "index.html": "<html><body/></html>"})
        )
        assert find_document_shell(roles).path == "index.html"

    def test_sandbox_attributes(self):
        assert sandbox_attributes() == "allow-scripts"
        assert sandbox_attributes(True) == "allow-scripts allow-same-origin"

    def test_strip_local_references_keeps_network_urls(self):
        html = (
            '<link rel="stylesheet" href="./main.css">'
            '<link rel="stylesheet" href="https://cdn.example.com/x.css">'
            '<script src="js/app.js"></script>'
            '<script src="//cdn.example.com/lib.js"></script>'
        )
        stripped = strip_local_references(html)
        assert "main.css" not in stripped
        assert "js/app.js" not in stripped
        assert "https://cdn.example.com/x.css" in stripped
        assert "//cdn.example.com/lib.js" in stripped


# ---------------------------------------------------------------------------
# Full-document strategy
# ---------------------------------------------------------------------------

class TestFullDocumentStrategy:
    def test_styles_injected_before_head_close(self, static_site_store):
        doc = compile_preview(static_site_store)
        assert doc.strategy == RenderStrategy.FULL_DOCUMENT
        assert doc.html.index("h1 { color: rebeccapurple; }") < doc.html.index("</head>")

    def test_no_project_local_references(self, static_site_store):
        doc = compile_preview(static_site_store)
        assert local_references(doc.html) == []
        assert "https://fonts.googleapis.com" in doc.html

    def test_scripts_injected_before_body_close(self, static_site_store):
        html = compile_preview(static_site_store).html
        script_at = html.index("textContent = 'Hi'")
        assert html.index("</h1>") < script_at < html.index("</body>")

    def test_bridge_at_top_of_head(self, static_site_store):
        html = compile_preview(static_site_store).html
        assert html.index("<head>") < html.index(BRIDGE_SOURCE) < html.index("<title>")

    def test_document_without_head_gets_one(self):
        store = make_store({"index.html": "<html><body><p>x</p></body></html>", "a.css": "p{}"})
        html = compile_preview(store).html
        assert html.index("<head>") < html.index("p{}") < html.index("</head>") < html.index("<body>")

    def test_inline_script_cannot_close_its_tag(self):
        store = make_store(
            {"index.html": "<!DOCTYPE html><html><head></head><body></body></html>", "a.js": "s = '</script>';"}
        )
        html = compile_preview(store).html
        assert "s = '<\\/script>';" in html

    def test_utility_helper_only_when_hinted(self, static_site_store):
        settings = Settings()
        assert settings.tailwind_url not in compile_preview(static_site_store).html
        store = make_store({"index.html": '<!DOCTYPE html><html><body><p class="text-sm">x</p></body></html>'})
        assert settings.tailwind_url in compile_preview(store).html


# ---------------------------------------------------------------------------
# Component strategy
# ---------------------------------------------------------------------------

class TestComponentStrategy:
    def test_strategy_and_runtimes(self, react_store):
        settings = Settings()
        doc = compile_preview(react_store, settings=settings)
        assert doc.strategy == RenderStrategy.COMPONENT
        for url in (settings.react_url, settings.react_dom_url, settings.babel_url):
            assert url in doc.html

    def test_no_module_lines_in_inline_script(self, react_store):
        script = babel_script(compile_preview(react_store).html)
        assert _MODULE_LINE.search(script) is None

    def test_components_folder_before_entry(self, react_store):
        script = babel_script(compile_preview(react_store).html)
        assert script.index("const Header") < script.index("function App")

    def test_styles_inlined(self, react_store):
        assert "button { padding: 4px; }" in compile_preview(react_store).html

    def test_mount_epilogue_follows_project_code(self, react_store):
        script = babel_script(compile_preview(react_store).html)
        assert script.index("function App") < script.index("window.__previewMounted) {")

    def test_utility_hint_from_class_name(self, react_store):
        doc = compile_preview(react_store)
        assert doc.uses_utility_classes
        assert Settings().tailwind_url in doc.html

    def test_components_take_precedence_over_document_shell(self, react_store):
        store = make_store(
            {**react_store.contents(), "index.html": "<!DOCTYPE html><html><body><div id=root></div></body></html>"}
        )
        assert compile_preview(store).strategy == RenderStrategy.COMPONENT

    def test_anonymous_default_export_named_after_file(self):
        store = make_store({"Widget.jsx": "export default function () { return <p>w</p>; }"})
        assert "function Widget(" in compile_preview(store).html


# ---------------------------------------------------------------------------
# Fragment strategy and fallbacks
# ---------------------------------------------------------------------------

class TestFragmentStrategy:
    def test_fragments_wrapped_in_document(self):
        store = make_store({"page.html": "<section><h2>Hi</h2></section>", "main.css": "h2 { margin: 0; }"})
        doc = compile_preview(store)
        assert doc.strategy == RenderStrategy.FRAGMENT
        assert doc.has_renderable_content
        assert doc.html.startswith("<!DOCTYPE html>")
        assert "<section><h2>Hi</h2></section>" in doc.html
        assert "h2 { margin: 0; }" in doc.html

    def test_scripts_without_markup_get_root(self):
        doc = compile_preview(make_store({"main.js": "console.log(1);"}))
        assert '<div id="root"></div>' in doc.html
        assert "console.log(1);" in doc.html

    def test_empty_store_is_placeholder(self):
        doc = compile_preview(ProjectStore.empty())
        assert doc.strategy == RenderStrategy.FRAGMENT
        assert not doc.has_renderable_content
        assert NO_CONTENT_MESSAGE in doc.html
        assert BRIDGE_SOURCE in doc.html

    def test_data_only_project_is_placeholder(self):
        doc = compile_preview(make_store({"data.json": "{}", "README.md": "# hi"}))
        assert not doc.has_renderable_content

    def test_internal_failure_degrades_to_placeholder(self, static_site_store):
        with patch("project_synth.preview.compiler.classify_files", side_effect=RuntimeError("boom")):
            doc = compile_preview(static_site_store, generation=4)
        assert doc.strategy == RenderStrategy.FRAGMENT
        assert not doc.has_renderable_content
        assert NO_CONTENT_MESSAGE in doc.html
        assert doc.generation == 4


# ---------------------------------------------------------------------------
# Generation and sandbox
# ---------------------------------------------------------------------------

class TestGenerationAndSandbox:
    def test_generation_stamped_into_bridge(self, static_site_store):
        doc = compile_preview(static_site_store, generation=7)
        assert doc.generation == 7
        assert "var GENERATION = 7;" in doc.html

    def test_sandbox_default_denies_same_origin(self, static_site_store):
        assert compile_preview(static_site_store).sandbox == "allow-scripts"

    def test_sandbox_opt_in(self, static_site_store):
        assert "allow-same-origin" in compile_preview(static_site_store, allow_same_origin=True).sandbox
        settings = Settings(allow_same_origin=True)
        assert "allow-same-origin" in compile_preview(static_site_store, settings=settings).sandbox

"""Preview compiler: turns a project snapshot into one runnable HTML document.

Three render strategies are tried in order:

1. Full document: a markup file already holds a complete document and the
   project has no component files. Project styles and scripts are inlined
   into that document.
2. Component: the project has component files. They are stripped of module
   syntax, concatenated in dependency order and transpiled in the browser.
3. Fragment: everything else, including the "nothing to render" case.

Every strategy injects the instrumentation bridge at the top of the head.
Compilation never raises; unexpected failures produce a placeholder page.
"""

import logging
import re

from pydantic import BaseModel, ConfigDict, Field

from project_synth.config import Settings
from project_synth.models import ContentKind, FileRecord, PreviewDocument, RenderStrategy
from project_synth.parsing import is_network_url
from project_synth.preview import templates
from project_synth.preview.module_syntax import (
    default_export_name,
    order_component_files,
    strip_module_syntax,
)
from project_synth.store import ProjectStore

logger = logging.getLogger(__name__)

UTILITY_CLASS_PATTERN = re.compile(
    r"\bclass(?:Name)?=[\"'][^\"']*?(?<![\w-])"
    r"(?:flex|grid|bg-|text-|p-|m-|w-|h-|rounded|shadow|border|gap-|space-|items-|justify-)"
)

_FULL_DOCUMENT_MARKER = re.compile(r"<!doctype\s+html|<html[\s>]", re.IGNORECASE)
_LINK_TAG = re.compile(r"<link\b[^>]*>", re.IGNORECASE)
_SCRIPT_SRC_TAG = re.compile(
    r"<script\b[^>]*\bsrc\s*=[^>]*>(?:\s*</script\s*>)?",
    re.IGNORECASE,
)
_HREF = re.compile(r"\bhref\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^\s>]+))", re.IGNORECASE)
_SRC = re.compile(r"\bsrc\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^\s>]+))", re.IGNORECASE)

_HEAD_OPEN = re.compile(r"<head\b[^>]*>", re.IGNORECASE)
_HEAD_CLOSE = re.compile(r"</head\s*>", re.IGNORECASE)
_BODY_CLOSE = re.compile(r"</body\s*>", re.IGNORECASE)
_HTML_OPEN = re.compile(r"<html\b[^>]*>", re.IGNORECASE)
_DOCTYPE = re.compile(r"<!doctype[^>]*>", re.IGNORECASE)


class ProjectRoles(BaseModel):
    """Project files grouped by the role they play in the preview."""

    model_config = ConfigDict(frozen=True)

    styles: list[FileRecord] = Field(default_factory=list)
    scripts: list[FileRecord] = Field(default_factory=list)
    components: list[FileRecord] = Field(default_factory=list)
    markup: list[FileRecord] = Field(default_factory=list)

    @property
    def has_components(self) -> bool:
        return bool(self.components)


def classify_files(store: ProjectStore) -> ProjectRoles:
    """Split the snapshot by kind. Data and text files take no part."""
    records = store.records()
    return ProjectRoles(
        styles=[r for r in records if r.kind == ContentKind.STYLE],
        scripts=[r for r in records if r.kind == ContentKind.SCRIPT],
        components=[r for r in records if r.kind == ContentKind.COMPONENT_SYNTAX],
        markup=[r for r in records if r.kind == ContentKind.MARKUP],
    )


def uses_utility_classes(store: ProjectStore) -> bool:
    """Return True if any file uses utility-class style markup."""
    return any(UTILITY_CLASS_PATTERN.search(record.content) for record in store.records())


def sandbox_attributes(allow_same_origin: bool = False) -> str:
    """Sandbox flags for the frame hosting the preview."""
    return "allow-scripts allow-same-origin" if allow_same_origin else "allow-scripts"


def _is_full_document(record: FileRecord) -> bool:
    return _FULL_DOCUMENT_MARKER.search(record.content) is not None


def find_document_shell(roles: ProjectRoles) -> FileRecord | None:
    """Markup file to use as the base document, preferring index.html."""
    candidates = [record for record in roles.markup if _is_full_document(record)]
    if not candidates:
        return None
    for record in candidates:
        if record.path.rsplit("/", 1)[-1].lower() in ("index.html", "index.htm"):
            return record
    return candidates[0]


def _attribute_value(pattern: re.Pattern, tag: str) -> str | None:
    match = pattern.search(tag)
    if match is None:
        return None
    return next(group for group in match.groups() if group is not None)


def strip_local_references(html: str) -> str:
    """Drop ``<link>`` and ``<script src>`` tags pointing at project paths.

    Tags referencing absolute network URLs are kept.
    """

    def _link(match: re.Match) -> str:
        href = _attribute_value(_HREF, match.group(0))
        if href is None or is_network_url(href):
            return match.group(0)
        return ""

    def _script(match: re.Match) -> str:
        src = _attribute_value(_SRC, match.group(0))
        if src is None or is_network_url(src):
            return match.group(0)
        return ""

    html = _LINK_TAG.sub(_link, html)
    return _SCRIPT_SRC_TAG.sub(_script, html)


def _ensure_head(html: str) -> str:
    if _HEAD_OPEN.search(html):
        return html
    for anchor in (_HTML_OPEN, _DOCTYPE):
        match = anchor.search(html)
        if match:
            return f"{html[:match.end()]}\n<head>\n</head>{html[match.end():]}"
    return f"<head>\n</head>\n{html}"


def _insert_after(html: str, pattern: re.Pattern, snippet: str) -> str:
    match = pattern.search(html)
    if match is None:
        return f"{snippet}\n{html}"
    return f"{html[:match.end()]}\n{snippet}{html[match.end():]}"


def _insert_before(html: str, pattern: re.Pattern, snippet: str) -> str:
    match = pattern.search(html)
    if match is None:
        return f"{html}\n{snippet}"
    return f"{html[:match.start()]}{snippet}\n{html[match.start():]}"


def _joined_styles(roles: ProjectRoles) -> str:
    return "\n\n".join(f"/* {r.path} */\n{r.content}" for r in roles.styles if r.content.strip())


def _script_tags(records: list[FileRecord]) -> list[str]:
    return [
        templates.inline_script(f"// {r.path}\n{r.content}") for r in records if r.content.strip()
    ]


def _utility_script(settings: Settings, enabled: bool) -> str:
    return templates.external_script(settings.tailwind_url) if enabled else ""


def compile_full_document(
    shell: FileRecord,
    roles: ProjectRoles,
    generation: int,
    settings: Settings,
    utility_classes: bool,
) -> str:
    """Inline project styles and scripts into an existing document."""
    html = _ensure_head(strip_local_references(shell.content))
    html = _insert_after(html, _HEAD_OPEN, templates.bridge_script(generation))

    head_parts = [_utility_script(settings, utility_classes)]
    styles = _joined_styles(roles)
    if styles:
        head_parts.append(templates.style_block(styles))
    head_snippet = "\n".join(part for part in head_parts if part)
    if head_snippet:
        html = _insert_before(html, _HEAD_CLOSE, head_snippet)

    scripts = _script_tags(roles.scripts)
    if scripts:
        html = _insert_before(html, _BODY_CLOSE, "\n".join(scripts))
    return html


def bundle_components(components: list[FileRecord]) -> str:
    """Concatenate component files, stripped of module syntax, in mount order."""
    sections = []
    for record in order_component_files(components):
        code = strip_module_syntax(record.content, default_export_name(record.path))
        if code:
            sections.append(f"// {record.path}\n{code}")
    return "\n\n".join(sections)


def compile_components(
    roles: ProjectRoles,
    generation: int,
    settings: Settings,
    utility_classes: bool,
) -> str:
    """Synthesize a document that transpiles and mounts the component files."""
    styles = _joined_styles(roles)
    head = [
        templates.bridge_script(generation),
        _utility_script(settings, utility_classes),
        templates.external_script(settings.react_url),
        templates.external_script(settings.react_dom_url),
        templates.external_script(settings.babel_url),
        templates.style_block(templates.BASE_STYLE),
        templates.style_block(styles) if styles else "",
    ]

    plain_scripts = [
        templates.inline_script(f"// {r.path}\n{strip_module_syntax(r.content)}")
        for r in roles.scripts
        if r.content.strip()
    ]
    component_code = "\n\n".join(
        [templates.react_prelude(), bundle_components(roles.components), templates.mount_epilogue()]
    )
    body = [
        '<div id="root"></div>',
        *plain_scripts,
        templates.tsx_preset_script(),
        templates.inline_script(component_code, script_type="text/babel", presets="react,preview-tsx"),
    ]
    return templates.document(head, body)


def compile_fragments(
    roles: ProjectRoles,
    generation: int,
    settings: Settings,
    utility_classes: bool,
) -> tuple[str, bool]:
    """Wrap markup fragments in a synthesized document.

    Returns:
        (html, has_renderable_content)
    """
    fragments = [strip_local_references(r.content) for r in roles.markup if r.content.strip()]
    styles = _joined_styles(roles)
    scripts = _script_tags(roles.scripts)
    renderable = bool(fragments or styles or scripts)

    if fragments:
        body = list(fragments)
    elif renderable:
        body = ['<div id="root"></div>']
    else:
        body = [templates.placeholder_body()]
    body.extend(scripts)

    head = [
        templates.bridge_script(generation),
        _utility_script(settings, utility_classes),
        templates.style_block(templates.BASE_STYLE),
        templates.style_block(styles) if styles else "",
    ]
    return templates.document(head, body), renderable


def placeholder_document(generation: int = 0) -> str:
    """Document shown when there is nothing to render."""
    return templates.document(
        [templates.bridge_script(generation), templates.style_block(templates.BASE_STYLE)],
        [templates.placeholder_body()],
    )


def _compile(store: ProjectStore, generation: int, settings: Settings, sandbox: str) -> PreviewDocument:
    roles = classify_files(store)
    utility_classes = uses_utility_classes(store)

    shell = None if roles.has_components else find_document_shell(roles)
    if shell is not None:
        # The shell is the page itself; other markup files are not inlined.
        html = compile_full_document(shell, roles, generation, settings, utility_classes)
        strategy = RenderStrategy.FULL_DOCUMENT
        renderable = True
    elif roles.has_components:
        html = compile_components(roles, generation, settings, utility_classes)
        strategy = RenderStrategy.COMPONENT
        renderable = True
    else:
        html, renderable = compile_fragments(roles, generation, settings, utility_classes)
        strategy = RenderStrategy.FRAGMENT

    logger.debug("Compiled %d file(s) with %s strategy", len(store), strategy.value)
    return PreviewDocument(
        html=html,
        strategy=strategy,
        generation=generation,
        uses_utility_classes=utility_classes,
        has_renderable_content=renderable,
        sandbox=sandbox,
    )


def compile_preview(
    store: ProjectStore,
    generation: int = 0,
    settings: Settings | None = None,
    allow_same_origin: bool | None = None,
) -> PreviewDocument:
    """Compile a project snapshot into a PreviewDocument.

    Args:
        store: Snapshot to render.
        generation: Identifier stamped into the bridge so diagnostics from a
            replaced preview can be told apart.
        settings: Library URLs and defaults; ``Settings()`` when omitted.
        allow_same_origin: Overrides ``settings.allow_same_origin``.

    Returns:
        The compiled document. Never raises.
    """
    settings = settings or Settings()
    if allow_same_origin is None:
        allow_same_origin = settings.allow_same_origin
    sandbox = sandbox_attributes(allow_same_origin)

    try:
        return _compile(store, generation, settings, sandbox)
    except Exception:
        logger.exception("Preview compilation failed; emitting placeholder document")
        return PreviewDocument(
            html=placeholder_document(generation),
            strategy=RenderStrategy.FRAGMENT,
            generation=generation,
            has_renderable_content=False,
            sandbox=sandbox,
        )

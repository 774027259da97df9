"""HTML and script fragments used to assemble preview documents."""

BRIDGE_SOURCE = "preview-console"

# Conventional top-level component names, probed in this order.
ENTRY_COMPONENT_NAMES = (
    "App",
    "Main",
    "Page",
    "Home",
    "Landing",
    "Blog",
    "Component",
    "Hero",
    "Layout",
)

# Hooks exposed as globals because module imports are stripped.
REACT_GLOBALS = (
    "useState",
    "useEffect",
    "useLayoutEffect",
    "useRef",
    "useMemo",
    "useCallback",
    "useReducer",
    "useContext",
    "useId",
    "createContext",
    "Fragment",
)

NO_CONTENT_MESSAGE = "No renderable code detected"

_BRIDGE_SCRIPT = """<script>
(function () {
  var SOURCE = '__BRIDGE_SOURCE__';
  var GENERATION = __GENERATION__;
  function format(args) {
    return Array.prototype.map.call(args, function (value) {
      try {
        if (value instanceof Error) { return value.name + ': ' + value.message; }
        return typeof value === 'object' ? JSON.stringify(value) : String(value);
      } catch (e) {
        return String(value);
      }
    }).join(' ');
  }
  function post(level, args) {
    try {
      parent.postMessage({ source: SOURCE, generation: GENERATION, type: level, message: format(args) }, '*');
    } catch (e) {}
  }
  ['log', 'info', 'warn', 'error'].forEach(function (level) {
    var original = console[level];
    console[level] = function () {
      original.apply(console, arguments);
      post(level, arguments);
    };
  });
  window.onerror = function (message, source, line, column, error) {
    post('error', [(error && error.message ? error.name + ': ' + error.message : message) + ' (line ' + line + ')']);
  };
  window.onunhandledrejection = function (event) {
    var reason = event.reason;
    post('error', ['Unhandled Promise: ' + (reason && reason.message ? reason.message : reason)]);
  };
})();
</script>"""

BASE_STYLE = """*, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }
body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; }"""

# Marks the page as mounted when project code creates its own root.
_MOUNT_GUARD = """(function () {
  var createRoot = ReactDOM.createRoot;
  ReactDOM.createRoot = function () {
    window.__previewMounted = true;
    return createRoot.apply(ReactDOM, arguments);
  };
  if (typeof ReactDOM.render === 'function') {
    var legacyRender = ReactDOM.render;
    ReactDOM.render = function () {
      window.__previewMounted = true;
      return legacyRender.apply(ReactDOM, arguments);
    };
  }
})();"""

_TSX_PRESET = """<script>
Babel.registerPreset('preview-tsx', {
  presets: [[Babel.availablePresets['typescript'], { allExtensions: true, isTSX: true }]]
});
</script>"""


def bridge_script(generation: int) -> str:
    """Instrumentation script forwarding console output and errors to the host."""
    return _BRIDGE_SCRIPT.replace("__BRIDGE_SOURCE__", BRIDGE_SOURCE).replace(
        "__GENERATION__", str(int(generation))
    )


def escape_inline_script(code: str) -> str:
    """Keep a literal ``</script`` inside code from closing the tag early."""
    return code.replace("</script", "<\\/script").replace("</SCRIPT", "<\\/SCRIPT")


def inline_script(code: str, script_type: str | None = None, presets: str | None = None) -> str:
    attributes = ""
    if script_type:
        attributes += f' type="{script_type}"'
    if presets:
        attributes += f' data-presets="{presets}"'
    return f"<script{attributes}>\n{escape_inline_script(code)}\n</script>"


def style_block(css: str) -> str:
    return f"<style>\n{css}\n</style>"


def external_script(url: str) -> str:
    return f'<script src="{url}" crossorigin></script>'


def react_prelude() -> str:
    """Expose hooks as globals and install the mount guard."""
    assignments = ",\n  ".join(f"{name}: React.{name}" for name in REACT_GLOBALS)
    return f"Object.assign(window, {{\n  {assignments}\n}});\n{_MOUNT_GUARD}"


def mount_epilogue() -> str:
    """Mount the first callable entry component unless project code already did."""
    probes = ",\n    ".join(
        f"typeof {name} === 'function' ? {name} : undefined" for name in ENTRY_COMPONENT_NAMES
    )
    names = ", ".join(ENTRY_COMPONENT_NAMES)
    return f"""if (!window.__previewMounted) {{
  const __previewEntry = [
    {probes}
  ].find(function (candidate) {{ return candidate !== undefined; }});
  if (__previewEntry) {{
    ReactDOM.createRoot(document.getElementById('root')).render(React.createElement(__previewEntry));
  }} else {{
    console.warn('Preview: no component named {names} was found to mount');
  }}
}}"""


def tsx_preset_script() -> str:
    return _TSX_PRESET


def document(head: list[str], body: list[str], lang: str = "en") -> str:
    """Assemble a complete HTML document from head and body parts."""
    head_html = "\n".join(part for part in head if part)
    body_html = "\n".join(part for part in body if part)
    return (
        "<!DOCTYPE html>\n"
        f'<html lang="{lang}">\n'
        "<head>\n"
        '<meta charset="UTF-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"{head_html}\n"
        "</head>\n"
        "<body>\n"
        f"{body_html}\n"
        "</body>\n"
        "</html>"
    )


def placeholder_body() -> str:
    return (
        '<div id="root" style="display:flex;align-items:center;justify-content:center;'
        'min-height:100vh;color:#888;">'
        f"<p>{NO_CONTENT_MESSAGE}</p></div>"
    )
